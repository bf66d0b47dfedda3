"""FastAPI dependency injection for the SBWC assistant."""

from ....composition.container import get_chat_service
from ....core.services.chat_service import ChatService


def get_chat() -> ChatService:
    """Get the process-wide ChatService."""
    return get_chat_service()
