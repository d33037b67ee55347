from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from zenai.db import get_db
from zenai.schemas.conversation import (
    ConversationHistoryRead,
    ConversationRead,
    UserStatsRead,
)
from zenai.services.conversation_service import ConversationService
from zenai.services.message_service import MessageService
from zenai.services.user_service import UserService

router = APIRouter(
    prefix="/analytics",
    tags=["analytics"],
    responses={404: {"description": "Not found"}},
)


@router.get("/users/{slack_user_id}/stats", response_model=UserStatsRead)
def get_user_stats(slack_user_id: str, db: Session = Depends(get_db)) -> UserStatsRead:
    user = UserService(db).get_by_platform_id(slack_user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    stats = ConversationService(db).get_user_stats(user.id)
    return UserStatsRead(slack_user_id=slack_user_id, stats=stats)


@router.get(
    "/conversations/{conversation_id}/history",
    response_model=ConversationHistoryRead,
)
def get_conversation_history(
    conversation_id: UUID,
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
) -> ConversationHistoryRead:
    """Replayable messages of a conversation, oldest first, with reactions."""
    conversation = ConversationService(db).get_conversation(conversation_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    messages = MessageService(db).get_history(conversation_id, limit=limit)
    return ConversationHistoryRead(
        conversation=ConversationRead.model_validate(conversation),
        messages=messages,
    )
