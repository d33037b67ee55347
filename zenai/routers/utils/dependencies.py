from fastapi import Request

from zenai.core.app_state import AppState


def get_app_state(request: Request) -> AppState:
    """AppState created by create_app for this application."""
    return request.app.state.zenai
