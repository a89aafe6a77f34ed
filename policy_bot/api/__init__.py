"""API module."""

from policy_bot.api.schemas import (
    ChatRequest,
    ChatResponse,
    ConfigResponse,
    ErrorResponse,
    HealthResponse,
    IngestResponse,
)
from policy_bot.api.tracing import create_trace_metadata, get_langfuse_handler

__all__ = [
    "ChatRequest",
    "ChatResponse",
    "ErrorResponse",
    "HealthResponse",
    "IngestResponse",
    "ConfigResponse",
    "get_langfuse_handler",
    "create_trace_metadata",
]
