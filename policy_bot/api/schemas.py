"""Pydantic schemas for API requests and responses."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class ChatRequest(BaseModel):
    """Request model for chat endpoint."""

    message: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="Employee's question",
        examples=["How many vacation days do I get per year?"],
    )

    session_id: Optional[str] = Field(
        None,
        description="Session ID for conversation continuity",
        examples=["3f2b8c1e-5d0a-4c47-9a61-1f0d2f6f4b1e"],
    )

    @field_validator("message")
    @classmethod
    def validate_message(cls, v: str) -> str:
        """Validate message is not empty or whitespace only."""
        if not v or not v.strip():
            raise ValueError("Message cannot be empty")
        return v.strip()


class ChatResponse(BaseModel):
    """Response model for chat endpoint."""

    message: str = Field(..., description="Assistant's answer")

    session_id: str = Field(..., description="Session ID for this conversation")

    turn_count: int = Field(
        ..., description="Turns currently held in the session's memory"
    )

    metadata: Optional[Dict[str, Any]] = Field(
        None, description="Additional metadata about the conversation"
    )


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str = Field(..., description="Error type or code")

    message: str = Field(..., description="Human-readable error message")

    details: Optional[Dict[str, Any]] = Field(
        None, description="Additional error details"
    )


class IngestResponse(BaseModel):
    """Result of re-ingesting the policy corpus."""

    chunk_count: int = Field(..., description="Chunks indexed")


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str = Field(
        ...,
        description="Overall health status",
        examples=["healthy", "degraded", "unhealthy"],
    )

    api: str = Field(..., description="API service status")

    rag: str = Field(..., description="RAG system status")

    llm: str = Field(default="not_tested", description="LLM connection status")

    rag_chunk_count: Optional[int] = Field(
        None, description="Number of chunks in the local vector store"
    )

    rag_error: Optional[str] = Field(None, description="RAG error message if unhealthy")


class ConfigResponse(BaseModel):
    """Configuration information response."""

    llm_provider: str = Field(..., description="Chat/embedding provider")
    environment: str = Field(..., description="Environment (development/production)")
    langfuse_enabled: bool = Field(
        ..., description="Whether Langfuse tracing is enabled"
    )
    vector_backend: str = Field(..., description="local or atlas")
    search_paths: List[str] = Field(..., description="Enabled search paths")
    chunk_size: int = Field(..., description="RAG chunk size")
    chunk_overlap: int = Field(..., description="RAG chunk overlap")
    top_k_results: int = Field(..., description="Number of RAG results retrieved")
    max_memory_turns: int = Field(..., description="Conversation pairs remembered")
