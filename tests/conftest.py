import os

os.environ["ENV"] = "test"

from contextlib import contextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from zenai.adapters.base import PostedMessage
from zenai.adapters.slack import SlackAdapter
from zenai.config import get_settings
from zenai.core.app_state import AppState
from zenai.db import Base
from zenai.workers.llm import CompletionResult, LLMRunner
import zenai.models  # noqa: F401

pytest_plugins = [
    "tests.fixtures.conversation_fixtures",
    "tests.fixtures.event_fixtures",
]

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture(scope="function")
def db():
    """Fresh schema per test on a shared in-memory SQLite database."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db):
    """Background handlers open sessions through this; they all share the test session."""

    @contextmanager
    def factory():
        yield db

    return factory


@pytest.fixture
def slack_adapter():
    adapter = MagicMock(spec=SlackAdapter)
    adapter.post_message = AsyncMock(
        side_effect=lambda channel, text, thread_ts=None: PostedMessage(
            channel=channel, ts=f"{1700000000 + adapter.post_message.call_count}.000100"
        )
    )
    adapter.update_message = AsyncMock(return_value=True)
    adapter.get_user_info = AsyncMock(
        return_value={"username": "jdoe", "display_name": "Jane Doe"}
    )
    adapter.verify_webhook.return_value = True
    return adapter


@pytest.fixture
def llm():
    runner = MagicMock(spec=LLMRunner)
    runner.model_name = "test-model"
    runner.is_configured = True
    runner.complete = AsyncMock(
        return_value=CompletionResult(
            text="Here is the answer.", processing_time_ms=12, tokens_used=42
        )
    )
    runner.generate_title = AsyncMock(return_value="A test conversation")
    return runner


@pytest.fixture
def app_state(slack_adapter, llm, session_factory):
    return AppState(
        settings=get_settings(),
        adapter=slack_adapter,
        llm=llm,
        session_factory=session_factory,
    )
