"""Fixed user-facing replies."""

THINKING = "🤔 Thinking..."
EMPTY_MENTION = "👋 Hi! Please include a message with your mention."
FILES_UNSUPPORTED = (
    "❌ Sorry, I can't access files or media. I can only process text messages."
)
AI_NOT_CONFIGURED = (
    "❌ I'm sorry, my AI connection is not configured. "
    "Please contact the administrator."
)
DATABASE_ERROR = "❌ Sorry, I encountered a database error. Please try again."
LLM_ERROR = "❌ Sorry, I encountered an error: {error}"
UNEXPECTED_ERROR = (
    "❌ I encountered an unexpected error. Please try again or contact support."
)
