"""Pydantic models for chunks, search hits and search index definitions."""

from typing import Any, Dict, List, Optional

from langchain_core.documents import Document
from pydantic import BaseModel, ConfigDict, Field


class Chunk(BaseModel):
    """A bounded segment of a policy document plus provenance and embedding."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable identifier, '<source>:<index>'")
    content: str = Field(..., description="Chunk text")
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        description="Provenance; always carries 'source' and 'index'",
    )
    embedding: Optional[List[float]] = Field(
        None, description="Embedding vector, absent until embedded"
    )

    @property
    def source(self) -> str:
        return self.metadata.get("source", "unknown")

    def with_embedding(self, embedding: List[float]) -> "Chunk":
        """Return a copy carrying the given embedding."""
        return self.model_copy(update={"embedding": list(embedding)})


class SearchHit(BaseModel):
    """One ranked result from a vector or keyword search."""

    content: str
    metadata: Dict[str, Any] = Field(default_factory=dict)
    score: float

    def to_document(self) -> Document:
        return Document(page_content=self.content, metadata=dict(self.metadata))


class MetadataFilter(BaseModel):
    """Equality filter on a (dotted) path of a stored chunk."""

    path: str = Field(..., examples=["metadata.source"])
    value: Any = Field(..., examples=["leave_policy.txt"])

    def matches(self, record: Dict[str, Any]) -> bool:
        """
        Check whether a chunk record satisfies the filter.

        A path without a dot is looked up inside ``metadata``, so
        ``source`` and ``metadata.source`` are equivalent.

        Example:
            >>> f = MetadataFilter(path="source", value="a.txt")
            >>> f.matches({"content": "x", "metadata": {"source": "a.txt"}})
            True
        """
        parts = self.path.split(".")
        if len(parts) == 1 and parts[0] not in record:
            parts = ["metadata", parts[0]]

        current: Any = record
        for part in parts:
            if not isinstance(current, dict) or part not in current:
                return False
            current = current[part]
        return current == self.value


class IndexDescriptor(BaseModel):
    """Declarative body of an Atlas Search index definition."""

    model_config = ConfigDict(populate_by_name=True)

    name: str
    database: str
    collection_name: str = Field(..., alias="collectionName")
    mappings: Dict[str, Any]

    def to_api_body(self) -> Dict[str, Any]:
        """Serialise in the shape the Atlas index API expects."""
        return self.model_dump(by_alias=True)
