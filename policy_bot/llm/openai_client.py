"""OpenAI chat and embedding clients."""

from typing import Any, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_openai import ChatOpenAI, OpenAIEmbeddings

from policy_bot.config import settings
from policy_bot.errors import ConfigError
from policy_bot.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CHAT_MODEL = "gpt-4o-mini"
DEFAULT_EMBEDDING_MODEL = "text-embedding-3-small"


def _api_key() -> str:
    if not settings.OPENAI_API_KEY:
        raise ConfigError("OPENAI_API_KEY must be set when LLM_PROVIDER=openai")
    return settings.OPENAI_API_KEY


def get_llm(
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    model: Optional[str] = None,
    **kwargs: Any,
) -> BaseChatModel:
    """
    Get configured OpenAI chat model.

    Args:
        temperature: Override default temperature (0.0-2.0)
        max_tokens: Override default max output tokens
        model: Override default model name
        **kwargs: Additional arguments for ChatOpenAI

    Raises:
        ConfigError: If OPENAI_API_KEY is missing
    """
    llm_config = {
        "model": model or settings.LLM_MODEL or DEFAULT_CHAT_MODEL,
        "temperature": temperature
        if temperature is not None
        else settings.LLM_TEMPERATURE,
        "max_tokens": max_tokens or settings.LLM_MAX_TOKENS,
        "api_key": _api_key(),
    }
    llm_config.update(kwargs)

    logger.debug(
        f"Initializing OpenAI LLM: {llm_config['model']} "
        f"(temp={llm_config['temperature']}, max_tokens={llm_config['max_tokens']})"
    )
    return ChatOpenAI(**llm_config)


def get_embeddings(model: Optional[str] = None) -> OpenAIEmbeddings:
    """Get the OpenAI embedding model."""
    model = model or settings.EMBEDDING_MODEL or DEFAULT_EMBEDDING_MODEL
    logger.debug(f"Initializing OpenAI embeddings: {model}")
    return OpenAIEmbeddings(model=model, api_key=_api_key())
