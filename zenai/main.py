from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from zenai.commands.base_slack import BaseSlackCommand
from zenai.config import get_settings
from zenai.core.app_state import AppState
from zenai.infra.logging_config import LoggingConfig, get_logger
from zenai.routers import analytics_router, system, webhooks

logger = get_logger()


def create_app(testing: bool = False, state: Optional[AppState] = None) -> FastAPI:
    """
    Build the FastAPI application.

    `state` lets tests supply their own adapter, LLM runner and session factory;
    otherwise they are built from settings.
    """
    settings = get_settings()
    if not testing:
        LoggingConfig()

    if state is None:
        state = AppState(settings=settings, adapter=BaseSlackCommand.get_slack_adapter())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        state.sweeper.start()
        logger.info(
            "%s started (slack=%s, llm=%s)",
            settings.app_name,
            "on" if state.adapter is not None else "off",
            "configured" if state.llm.is_configured else "not configured",
        )
        try:
            yield
        finally:
            await state.sweeper.stop()
            logger.info("%s stopped", settings.app_name)

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.zenai = state

    app.include_router(system.router)
    app.include_router(webhooks.router)
    app.include_router(analytics_router.router)

    return app


app = create_app()
