"""Tests for EventAdmissionFilter and LedgerSweeper."""

import asyncio

import pytest

from zenai.core.admission import (
    AdmissionStatus,
    EventAdmissionFilter,
    LedgerState,
    LedgerSweeper,
)
from zenai.schemas.events import DirectMessageEvent, MentionEvent, ReactionAddedEvent


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def admission(clock):
    return EventAdmissionFilter(retention_seconds=300, clock=clock)


def mention(ts="1.0001", client_msg_id=None, user="U1", channel="C1"):
    return MentionEvent(
        user_id=user, channel_id=channel, ts=ts, client_msg_id=client_msg_id, text="hi"
    )


def test_admit_marks_keys_in_flight_and_takes_lock(admission):
    event = mention(client_msg_id="abc")
    decision = admission.admit(event)

    assert decision.status is AdmissionStatus.ADMITTED
    assert decision.ticket.keys == ("abc", "U1-1.0001", "C1-1.0001")
    assert decision.ticket.lock_key == ("U1", "C1")
    assert admission.is_locked(("U1", "C1"))
    for key in decision.ticket.keys:
        assert admission.entry(key).state is LedgerState.IN_FLIGHT


def test_redelivery_while_in_flight_is_duplicate(admission):
    first = admission.admit(mention(client_msg_id="abc"))
    second = admission.admit(mention(client_msg_id="abc"))

    assert first.admitted
    assert second.status is AdmissionStatus.DUPLICATE
    assert second.ticket is None


def test_redelivery_with_different_identifier_is_duplicate(admission):
    # Retry arrives without client_msg_id; the user-ts key still matches.
    admission.admit(mention(client_msg_id="abc"))
    decision = admission.admit(mention(client_msg_id=None))
    assert decision.status is AdmissionStatus.DUPLICATE


def test_redelivery_after_completion_is_duplicate(admission):
    decision = admission.admit(mention())
    admission.release(decision.ticket)

    assert admission.admit(mention()).status is AdmissionStatus.DUPLICATE


def test_second_message_while_busy_records_nothing(admission):
    admission.admit(mention(ts="1.0001"))
    busy = admission.admit(mention(ts="2.0002"))

    assert busy.status is AdmissionStatus.BUSY
    assert admission.entry("U1-2.0002") is None
    assert admission.entry("C1-2.0002") is None


def test_lock_is_per_user_and_channel(admission):
    admission.admit(mention(ts="1.0001"))

    assert admission.admit(mention(ts="2.0002", channel="C2")).admitted
    assert admission.admit(mention(ts="3.0003", user="U2")).admitted


def test_release_unlocks_and_completes(admission, clock):
    decision = admission.admit(mention())
    clock.now = 1010.0
    admission.release(decision.ticket)

    assert not admission.is_locked(("U1", "C1"))
    entry = admission.entry("U1-1.0001")
    assert entry.state is LedgerState.COMPLETED
    assert entry.completed_at == 1010.0
    assert admission.admit(mention(ts="2.0002")).admitted


def test_release_twice_keeps_first_completion_time(admission, clock):
    decision = admission.admit(mention())
    admission.release(decision.ticket)
    clock.now = 2000.0
    admission.release(decision.ticket)

    assert admission.entry("U1-1.0001").completed_at == 1000.0


def test_hold_releases_on_exception(admission):
    decision = admission.admit(mention())

    with pytest.raises(RuntimeError):
        with admission.hold(decision.ticket):
            raise RuntimeError("LLM down")

    assert not admission.is_locked(("U1", "C1"))
    assert admission.entry("U1-1.0001").state is LedgerState.COMPLETED


def test_sweep_removes_only_expired_completed_entries(admission, clock):
    done = admission.admit(mention(ts="1.0001"))
    admission.release(done.ticket)
    in_flight = admission.admit(mention(ts="2.0002", user="U2"))

    clock.now = 1000.0 + 299
    assert admission.sweep() == 0

    clock.now = 1000.0 + 300
    removed = admission.sweep()

    assert removed == 2
    assert admission.entry("U1-1.0001") is None
    assert admission.entry("U2-2.0002").state is LedgerState.IN_FLIGHT
    assert in_flight.ticket.keys[0] == "U2-2.0002"


def test_expired_key_is_still_duplicate_until_swept(admission, clock):
    decision = admission.admit(mention())
    admission.release(decision.ticket)
    clock.now = 5000.0

    assert admission.admit(mention()).status is AdmissionStatus.DUPLICATE
    admission.sweep()
    assert admission.admit(mention()).admitted


def test_direct_message_keys():
    event = DirectMessageEvent(user_id="U1", channel_id="D1", ts="5.5", client_msg_id="m1")
    assert event.dedupe_keys() == ("m1", "dm-U1-5.5")


def test_reactions_do_not_take_the_user_lock(admission):
    admission.admit(mention())
    reaction = ReactionAddedEvent(
        user_id="U1", reaction="+1", item_channel_id="C1", item_ts="9.9", event_ts="10.1"
    )
    decision = admission.admit(reaction)

    assert decision.admitted
    assert decision.ticket.lock_key is None


@pytest.mark.asyncio
async def test_sweeper_runs_periodically(admission, clock):
    decision = admission.admit(mention())
    admission.release(decision.ticket)
    clock.now = 2000.0

    sweeper = LedgerSweeper(admission, interval_seconds=0.01)
    sweeper.start()
    assert sweeper.running
    await asyncio.sleep(0.05)
    await sweeper.stop()

    assert not sweeper.running
    assert len(admission) == 0
