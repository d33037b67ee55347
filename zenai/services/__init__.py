from zenai.services.conversation_service import ConversationService
from zenai.services.message_service import MessageService
from zenai.services.user_service import UserService

__all__ = [
    "ConversationService",
    "MessageService",
    "UserService",
]
