"""Google Gemini chat and embedding clients."""

from typing import Any, Optional

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_google_genai import ChatGoogleGenerativeAI, GoogleGenerativeAIEmbeddings
from pydantic import SecretStr

from policy_bot.config import settings
from policy_bot.errors import ConfigError
from policy_bot.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_CHAT_MODEL = "gemini-1.5-flash"
DEFAULT_EMBEDDING_MODEL = "models/embedding-001"


def _api_key() -> str:
    key = settings.GEMINI_API_KEY
    if not key or key.startswith("your_"):
        raise ConfigError(
            "GEMINI_API_KEY must be set. Get one from https://makersuite.google.com/app/apikey"
        )
    return key


def get_llm(
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
    model: Optional[str] = None,
    **kwargs: Any,
) -> BaseChatModel:
    """
    Get configured Gemini chat model.

    Args:
        temperature: Override default temperature (0.0-1.0)
        max_tokens: Override default max output tokens
        model: Override default model name
        **kwargs: Additional arguments for ChatGoogleGenerativeAI

    Returns:
        Configured ChatGoogleGenerativeAI instance

    Raises:
        ConfigError: If GEMINI_API_KEY is missing
    """
    llm_config = {
        "model": model or settings.LLM_MODEL or DEFAULT_CHAT_MODEL,
        "temperature": temperature
        if temperature is not None
        else settings.LLM_TEMPERATURE,
        "max_output_tokens": max_tokens or settings.LLM_MAX_TOKENS,
        "google_api_key": _api_key(),
    }
    llm_config.update(kwargs)

    logger.debug(
        f"Initializing Gemini LLM: {llm_config['model']} "
        f"(temp={llm_config['temperature']}, max_tokens={llm_config['max_output_tokens']})"
    )
    return ChatGoogleGenerativeAI(**llm_config)


def get_embeddings(model: Optional[str] = None) -> GoogleGenerativeAIEmbeddings:
    """
    Get the Gemini embedding model for document vectorization.

    Raises:
        ConfigError: If GEMINI_API_KEY is missing
    """
    model = model or settings.EMBEDDING_MODEL or DEFAULT_EMBEDDING_MODEL
    logger.debug(f"Initializing Gemini embeddings: {model}")
    return GoogleGenerativeAIEmbeddings(
        model=model,
        google_api_key=SecretStr(_api_key()),
    )
