"""Per-session conversation memory for the API."""

import uuid
from typing import Dict

from policy_bot.chat.memory import ConversationMemory
from policy_bot.config import settings
from policy_bot.utils.logger import get_logger

logger = get_logger(__name__)

_sessions: Dict[str, ConversationMemory] = {}


def create_session() -> tuple[str, ConversationMemory]:
    """
    Create a new conversation session.

    Returns:
        Tuple of (session_id, empty memory)
    """
    session_id = str(uuid.uuid4())
    memory = ConversationMemory(settings.MAX_MEMORY_TURNS)

    _sessions[session_id] = memory
    logger.info(f"Created session: {session_id}")

    return session_id, memory


def get_session(session_id: str) -> ConversationMemory | None:
    """Retrieve a session's memory, None if unknown."""
    return _sessions.get(session_id)


def delete_session(session_id: str) -> bool:
    """
    Delete a session.

    Returns:
        True if session existed and was deleted, False otherwise
    """
    if _sessions.pop(session_id, None) is not None:
        logger.info(f"Deleted session: {session_id}")
        return True
    return False


def get_session_count() -> int:
    """Get total number of active sessions."""
    return len(_sessions)


def clear_all_sessions() -> int:
    """
    Clear all sessions (useful for testing).

    Returns:
        Number of sessions cleared
    """
    count = len(_sessions)
    _sessions.clear()
    logger.info(f"Cleared {count} sessions")
    return count
