"""Application configurations loaded from environment variables."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API keys
    GEMINI_API_KEY: Optional[str] = Field(None, description="Google Gemini API key")
    OPENAI_API_KEY: Optional[str] = Field(None, description="OpenAI API key")
    LANGFUSE_PUBLIC_KEY: Optional[str] = Field(
        None, description="Langfuse public key for tracing"
    )
    LANGFUSE_SECRET_KEY: Optional[str] = Field(
        None, description="Langfuse secret key for tracing"
    )
    LANGFUSE_HOST: str = Field(
        default="https://cloud.langfuse.com", description="Langfuse host URL"
    )

    # application configurations
    ENVIRONMENT: str = Field(default="development", description="Environment name")
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FILE: Optional[Path] = Field(
        None, description="Optional file receiving DEBUG-level logs"
    )
    API_PORT: int = Field(default=8000, description="FastAPI server port")

    # model configurations
    LLM_PROVIDER: Literal["gemini", "openai"] = Field(
        default="gemini", description="Provider for chat and embedding models"
    )
    LLM_MODEL: Optional[str] = Field(
        None, description="Chat model (provider default when unset)"
    )
    LLM_TEMPERATURE: float = Field(
        default=0.0, description="Temperature for LLM responses"
    )
    LLM_MAX_TOKENS: int = Field(default=1024, description="Max tokens per response")
    EMBEDDING_MODEL: Optional[str] = Field(
        None, description="Embedding model (provider default when unset)"
    )
    EMBED_BATCH_SIZE: int = Field(
        default=64, description="Texts per batch embedding request"
    )

    # paths
    DATA_DIR: Path = Field(
        default=Path("data/policies"),
        description="Directory containing policy documents",
    )
    PROMPTS_DIR: Path = Field(
        default=Path("prompts"), description="Directory containing system prompts"
    )
    INDEX_OUTPUT_DIR: Path = Field(
        default=Path("atlas_index_jsons"),
        description="Where generated search index definitions are written",
    )

    # chunking and retrieval
    CHUNK_SIZE: int = Field(default=1000, description="Document chunk size")
    CHUNK_OVERLAP: int = Field(default=100, description="Overlap between chunks")
    TOP_K_RESULTS: int = Field(
        default=6, description="Number of passages to retrieve"
    )
    MAX_MEMORY_TURNS: int = Field(
        default=10, description="Question/answer pairs kept in conversation memory"
    )

    # search feature flags
    VECTOR_SEARCH_ENABLED: bool = Field(
        default=True, description="Enable dense vector search"
    )
    BM25_SEARCH_ENABLED: bool = Field(
        default=True, description="Enable BM25 keyword search"
    )
    HYBRID_SEARCH: bool = Field(
        default=False, description="Merge keyword hits with vector hits"
    )
    VECTOR_BACKEND: Literal["local", "atlas"] = Field(
        default="local",
        description="'local' scans cached embeddings, 'atlas' queries Atlas Search",
    )

    # mongodb / atlas search
    MONGODB_URI: Optional[str] = Field(None, description="MongoDB connection string")
    MONGODB_DB_NAME: str = Field(default="policy_bot", description="Database name")
    MONGODB_COLLECTION: str = Field(
        default="vectors", description="Collection holding policy chunks"
    )
    VECTOR_INDEX_NAME: Optional[str] = Field(
        None, description="Atlas vector index name"
    )
    BM25_INDEX_NAME: Optional[str] = Field(
        None, description="Atlas keyword index name"
    )

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and validate the logging level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown LOG_LEVEL: {v}")
        return level

    @property
    def vector_index_name(self) -> str:
        return self.VECTOR_INDEX_NAME or f"{self.MONGODB_COLLECTION}_vector_search"

    @property
    def bm25_index_name(self) -> str:
        return self.BM25_INDEX_NAME or f"{self.MONGODB_COLLECTION}_bm25_keyword"

    @property
    def mongodb_configured(self) -> bool:
        """Check if a MongoDB connection string is available."""
        return bool(self.MONGODB_URI)

    @property
    def langfuse_enabled(self) -> bool:
        """Check if Langfuse tracing is configured."""
        return bool(self.LANGFUSE_PUBLIC_KEY and self.LANGFUSE_SECRET_KEY)


# global instance
settings = Settings()
