"""Process-wide state shared by the webhook endpoints and their background handlers."""

from __future__ import annotations

from typing import Callable, ContextManager, Optional

from sqlalchemy.orm import Session

from zenai.adapters.slack import SlackAdapter
from zenai.config import Settings, get_settings
from zenai.core.admission import EventAdmissionFilter, LedgerSweeper
from zenai.core.mute_registry import MuteRegistry
from zenai.db import db_session
from zenai.workers.llm import LLMRunner, build_llm_runner_from_env

SessionFactory = Callable[[], ContextManager[Session]]


class AppState:
    """One instance per FastAPI app, stored on app.state.zenai."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        adapter: Optional[SlackAdapter] = None,
        llm: Optional[LLMRunner] = None,
        session_factory: Optional[SessionFactory] = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.admission = EventAdmissionFilter(
            retention_seconds=self.settings.dedupe_retention_seconds
        )
        self.mutes = MuteRegistry()
        self.sweeper = LedgerSweeper(
            self.admission,
            interval_seconds=self.settings.dedupe_sweep_interval_seconds,
        )
        self.adapter = adapter
        self.llm = llm or build_llm_runner_from_env()
        self.session_factory: SessionFactory = session_factory or db_session
