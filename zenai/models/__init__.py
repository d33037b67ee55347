from zenai.models.bot_response import BotResponse
from zenai.models.conversation import Conversation
from zenai.models.message_reaction import MessageReaction
from zenai.models.user import User
from zenai.models.user_query import UserQuery

__all__ = [
    "BotResponse",
    "Conversation",
    "MessageReaction",
    "User",
    "UserQuery",
]
