from typing import Any

from fastapi import APIRouter, Depends

from zenai.config import get_settings
from zenai.core.app_state import AppState
from zenai.routers.utils.dependencies import get_app_state

router = APIRouter(tags=["system"])


@router.get("/health")
def health(state: AppState = Depends(get_app_state)) -> dict[str, Any]:
    settings = get_settings()
    return {
        "status": "ok",
        "app": settings.app_name,
        "environment": settings.environment,
        "slack_enabled": state.adapter is not None,
        "llm_configured": state.llm.is_configured,
        "ledger_size": len(state.admission),
        "sweeper_running": state.sweeper.running,
    }
