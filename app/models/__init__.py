from app.models.conversation_turn import THREAD_MARKER_CONTENT, ConversationTurn

__all__ = [
    "THREAD_MARKER_CONTENT",
    "ConversationTurn",
]
