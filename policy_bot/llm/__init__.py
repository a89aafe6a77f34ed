"""Chat and embedding model factories for the configured provider."""

from typing import Any

from langchain_core.embeddings import Embeddings
from langchain_core.language_models.chat_models import BaseChatModel

from policy_bot.config import settings
from policy_bot.llm import gemini_client, openai_client
from policy_bot.utils.logger import get_logger

logger = get_logger(__name__)

_PROVIDERS = {"gemini": gemini_client, "openai": openai_client}


def get_chat_model(**kwargs: Any) -> BaseChatModel:
    """Create the chat model for settings.LLM_PROVIDER."""
    return _PROVIDERS[settings.LLM_PROVIDER].get_llm(**kwargs)


def get_embedding_model(**kwargs: Any) -> Embeddings:
    """Create the embedding model for settings.LLM_PROVIDER."""
    return _PROVIDERS[settings.LLM_PROVIDER].get_embeddings(**kwargs)


async def test_llm_connection() -> bool:
    """
    Test that the chat model answers.

    Returns:
        True if connection successful, False otherwise
    """
    try:
        logger.info("Testing LLM connection...")
        response = await get_chat_model().ainvoke("Say 'OK' if you can read this.")

        if response and response.content:
            logger.info("LLM connection successful")
            return True

        logger.error("LLM returned empty response")
        return False

    except Exception as e:
        logger.error(f"LLM connection failed: {e}")
        return False


__all__ = [
    "get_chat_model",
    "get_embedding_model",
    "test_llm_connection",
]
