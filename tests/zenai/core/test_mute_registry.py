from zenai.core.mute_registry import MuteRegistry


def test_mute_and_unmute():
    registry = MuteRegistry()
    registry.mute("U2")
    registry.mute("U1")

    assert registry.is_muted("U1")
    assert registry.muted_users() == ["U1", "U2"]

    assert registry.unmute("U1") is True
    assert not registry.is_muted("U1")


def test_unmute_unknown_user_returns_false():
    assert MuteRegistry().unmute("U404") is False


def test_mute_is_idempotent():
    registry = MuteRegistry()
    registry.mute("U1")
    registry.mute("U1")
    assert registry.muted_users() == ["U1"]
