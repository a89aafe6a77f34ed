"""Langfuse tracing utilities."""

from typing import Any, Dict, Optional

from langfuse.langchain import CallbackHandler

from policy_bot.config import settings
from policy_bot.utils.logger import get_logger

logger = get_logger(__name__)


def get_langfuse_handler() -> Optional[CallbackHandler]:
    """
    Create a Langfuse callback handler for the generation call if enabled.

    Session grouping is passed through the run metadata
    (``langfuse_session_id``), see create_trace_metadata.

    Returns:
        CallbackHandler if Langfuse is enabled, None otherwise
    """
    if not settings.langfuse_enabled:
        logger.debug("Langfuse tracing disabled")
        return None

    try:
        from langfuse import Langfuse

        Langfuse(
            public_key=settings.LANGFUSE_PUBLIC_KEY,
            secret_key=settings.LANGFUSE_SECRET_KEY,
            host=settings.LANGFUSE_HOST,
        )

        handler = CallbackHandler()
        logger.debug("Created Langfuse handler")
        return handler

    except Exception as e:
        logger.error(f"Failed to create Langfuse handler: {e}")
        return None


def create_trace_metadata(
    session_id: Optional[str] = None,
    **kwargs: Any,
) -> Dict[str, Any]:
    """
    Create standardized metadata for traces.

    Args:
        session_id: Conversation session, mapped to langfuse_session_id
        **kwargs: Additional metadata fields

    Returns:
        Metadata dictionary
    """
    metadata = {
        "application": "policy_bot",
        "environment": settings.ENVIRONMENT,
        "vector_backend": settings.VECTOR_BACKEND,
    }

    if session_id:
        metadata["langfuse_session_id"] = session_id

    metadata.update(kwargs)

    return metadata
