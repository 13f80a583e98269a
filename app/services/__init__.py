from app.services.conversation_turn_service import ConversationTurnService
from app.services.session_directory import SessionDirectory
from app.services.title_service import TitleService
from app.services.chat_orchestrator import ChatOrchestrator

__all__ = [
    "ChatOrchestrator",
    "ConversationTurnService",
    "SessionDirectory",
    "TitleService",
]
