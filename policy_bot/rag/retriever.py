"""Retrieval interface for querying policy documents."""

from typing import List, Optional, Protocol, Sequence

from langchain_core.documents import Document

from policy_bot.config import settings
from policy_bot.errors import ConfigError, FeatureDisabledError, ProviderError, RetrievalError
from policy_bot.rag.embeddings import EmbeddingClient
from policy_bot.rag.keyword_search import KeywordSearchIndex
from policy_bot.rag.schemas import MetadataFilter, SearchHit
from policy_bot.utils.logger import get_logger

logger = get_logger(__name__)

CONTEXT_SEPARATOR = "\n\n---\n\n"

# failures that make the retriever fall back to the other search path
RECOVERABLE_ERRORS = (ProviderError, FeatureDisabledError)


class VectorIndex(Protocol):
    """Anything answering nearest-neighbour queries (local store or Atlas)."""

    enabled: bool

    @property
    def is_ready(self) -> bool: ...

    async def nearest_neighbors(
        self,
        query_vector: Sequence[float],
        k: int,
        filter: Optional[MetadataFilter] = None,
    ) -> List[SearchHit]: ...


def merge_hits(
    vector_hits: Sequence[SearchHit], keyword_hits: Sequence[SearchHit], k: int
) -> List[SearchHit]:
    """
    Interleave two ranked lists, dropping repeated content.

    Takes the first vector hit, then the first keyword hit, then the second
    of each, and so on. A hit whose content was already taken is skipped.
    The result is truncated to ``k``.

    Example:
        >>> [h.content for h in merge_hits(vec, kw, k=3)]
        ['v1', 'k1', 'v2']
    """
    merged: List[SearchHit] = []
    seen = set()

    for rank in range(max(len(vector_hits), len(keyword_hits))):
        for hits in (vector_hits, keyword_hits):
            if rank >= len(hits) or hits[rank].content in seen:
                continue
            seen.add(hits[rank].content)
            merged.append(hits[rank])
            if len(merged) == k:
                return merged

    return merged


def format_retrieved_context(documents: List[Document]) -> str:
    """
    Format retrieved documents into a context string for the LLM.

    Passages are separated by a horizontal rule so the model can tell
    where one ends and the next begins.

    Example:
        >>> format_retrieved_context([Document(page_content="20 days", metadata={"source": "leave.txt"})])
        '[Source: leave.txt]\\n20 days'
    """
    if not documents:
        return "No relevant policy information found."

    formatted_parts = []
    for doc in documents:
        source = doc.metadata.get("source", "unknown")
        formatted_parts.append(f"[Source: {source}]\n{doc.page_content.strip()}")

    context = CONTEXT_SEPARATOR.join(formatted_parts)
    logger.debug(f"Formatted {len(documents)} documents into context")
    return context


class HybridRetriever:
    """
    Produces a ranked, de-duplicated top-k list of policy passages.

    Vector search is the primary path. Keyword search runs alongside it when
    ``hybrid`` is on, and otherwise serves as the fallback when the vector
    path fails. A disabled or failing path is logged and skipped; only when
    every attempted path failed is a RetrievalError raised.

    Args:
        embedder: Embedding client used for the query vector
        vector_index: Local VectorStore or AtlasVectorIndex
        keyword_index: Optional keyword search index
        k: Default number of passages (defaults to settings.TOP_K_RESULTS)
        hybrid: Merge keyword hits with vector hits (defaults to settings.HYBRID_SEARCH)
    """

    def __init__(
        self,
        embedder: EmbeddingClient,
        vector_index: VectorIndex,
        keyword_index: Optional[KeywordSearchIndex] = None,
        k: Optional[int] = None,
        hybrid: Optional[bool] = None,
    ):
        self.embedder = embedder
        self.vector_index = vector_index
        self.keyword_index = keyword_index
        self.k = settings.TOP_K_RESULTS if k is None else k
        self.hybrid = settings.HYBRID_SEARCH if hybrid is None else hybrid

        if self.k < 1:
            raise ConfigError(f"k must be at least 1, got {self.k}")

    @property
    def is_ready(self) -> bool:
        """True when at least one search path can serve queries."""
        if self.vector_index.is_ready:
            return True
        return self.keyword_index is not None and self.keyword_index.is_ready

    async def retrieve_hits(
        self, query: str, k: Optional[int] = None, filter: Optional[MetadataFilter] = None
    ) -> List[SearchHit]:
        """
        Retrieve scored hits for a query.

        Raises:
            ConfigError: If k < 1
            RetrievalError: If every attempted search path failed
        """
        k = self.k if k is None else k
        if k < 1:
            raise ConfigError(f"k must be at least 1, got {k}")
        failures = []

        vector_hits: Optional[List[SearchHit]] = None
        try:
            vector_hits = await self._vector_search(query, k, filter)
        except RECOVERABLE_ERRORS as e:
            logger.warning(f"Vector search unavailable: {e}")
            failures.append(e)

        keyword_hits: Optional[List[SearchHit]] = None
        if self.keyword_index is not None and (self.hybrid or vector_hits is None):
            try:
                keyword_hits = await self.keyword_index.search(query, limit=k, filter=filter)
            except RECOVERABLE_ERRORS as e:
                logger.warning(f"Keyword search unavailable: {e}")
                failures.append(e)

        if vector_hits is None and keyword_hits is None:
            reasons = "; ".join(str(e) for e in failures)
            raise RetrievalError(f"All retrieval paths failed: {reasons}")

        hits = merge_hits(vector_hits or [], keyword_hits or [], k)

        logger.info(f"Retrieved {len(hits)} passages for query: '{query[:50]}'")
        return hits

    async def retrieve(
        self, query: str, k: Optional[int] = None, filter: Optional[MetadataFilter] = None
    ) -> List[Document]:
        """
        Retrieve relevant policy passages for a query.

        Returns:
            Documents in rank order, at most ``k``

        Example:
            >>> docs = await retriever.retrieve("How many vacation days do I get?", k=1)
            >>> docs[0].metadata["source"]
            'leave_policy.txt'
        """
        hits = await self.retrieve_hits(query, k, filter)
        return [hit.to_document() for hit in hits]

    async def _vector_search(
        self, query: str, k: int, filter: Optional[MetadataFilter]
    ) -> List[SearchHit]:
        # skip the embedding call when the index would refuse anyway
        if not self.vector_index.enabled:
            raise FeatureDisabledError("Vector search disabled via VECTOR_SEARCH_ENABLED=false")

        query_vector = await self.embedder.embed_one(query)
        return await self.vector_index.nearest_neighbors(query_vector, k, filter)
