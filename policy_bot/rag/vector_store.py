"""In-memory vector store: linear cosine-similarity scan over cached embeddings."""

import threading
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from policy_bot.config import settings
from policy_bot.errors import ConfigError, ConsistencyError, FeatureDisabledError
from policy_bot.rag.embeddings import EmbeddingClient
from policy_bot.rag.schemas import Chunk, MetadataFilter, SearchHit
from policy_bot.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class _Snapshot:
    """Immutable chunk set with its embedding matrix; replaced, never mutated."""

    chunks: Tuple[Chunk, ...] = ()
    matrix: np.ndarray = field(default_factory=lambda: np.zeros((0, 0)))
    norms: np.ndarray = field(default_factory=lambda: np.zeros(0))
    dimension: Optional[int] = None


def _as_record(chunk: Chunk) -> dict:
    return {"id": chunk.id, "content": chunk.content, "metadata": chunk.metadata}


def cosine_scores(query: np.ndarray, matrix: np.ndarray, norms: np.ndarray) -> np.ndarray:
    """
    Cosine similarity of ``query`` against every row of ``matrix``.

    Rows or queries with zero norm score 0 instead of NaN.
    """
    scores = np.zeros(matrix.shape[0], dtype=np.float64)
    query_norm = float(np.linalg.norm(query))
    if query_norm == 0.0 or matrix.shape[0] == 0:
        return scores

    dots = matrix @ query
    nonzero = norms > 0
    scores[nonzero] = dots[nonzero] / (norms[nonzero] * query_norm)
    return np.clip(scores, -1.0, 1.0)


class VectorStore:
    """
    Holds one corpus of embedded chunks and answers nearest-neighbour queries.

    ``replace_all`` builds a complete snapshot before swapping it in, so a
    reader always sees either the previous chunk set or the new one. Queries
    scan every stored embedding (O(n * dim)).

    Args:
        enabled: Vector search flag (defaults to settings.VECTOR_SEARCH_ENABLED)

    Example:
        >>> store = VectorStore()
        >>> store.replace_all(embedded_chunks)
        >>> hits = await store.nearest_neighbors([0.9, 0.1], k=1)
    """

    def __init__(self, enabled: Optional[bool] = None):
        self.enabled = settings.VECTOR_SEARCH_ENABLED if enabled is None else enabled
        self._snapshot: Optional[_Snapshot] = None
        self._write_lock = threading.Lock()

    @property
    def is_ready(self) -> bool:
        """True once a chunk set has been installed."""
        return self.enabled and self._snapshot is not None

    @property
    def count(self) -> int:
        snapshot = self._snapshot
        return len(snapshot.chunks) if snapshot else 0

    @property
    def dimension(self) -> Optional[int]:
        snapshot = self._snapshot
        return snapshot.dimension if snapshot else None

    def chunks(self) -> List[Chunk]:
        """Return the current chunk set in insertion order."""
        snapshot = self._snapshot
        return list(snapshot.chunks) if snapshot else []

    def replace_all(self, chunks: Sequence[Chunk]) -> None:
        """
        Discard the current chunk set and install ``chunks``.

        Chunks without an embedding are dropped with a warning; they can
        never take part in vector search.

        Raises:
            ConsistencyError: If the embeddings do not share one dimension
        """
        snapshot = self._build_snapshot(chunks)

        with self._write_lock:
            previous = self.count
            self._snapshot = snapshot

        logger.info(
            f"Vector store replaced {previous} chunks with {len(snapshot.chunks)} "
            f"(dim={snapshot.dimension})"
        )

    def clear(self) -> None:
        with self._write_lock:
            self._snapshot = None
        logger.info("Vector store cleared")

    async def nearest_neighbors(
        self,
        query_vector: Sequence[float],
        k: int,
        filter: Optional[MetadataFilter] = None,
    ) -> List[SearchHit]:
        """
        Return the ``k`` chunks most similar to ``query_vector``.

        Args:
            query_vector: Query embedding
            k: Number of hits, at least 1
            filter: Optional equality filter on chunk metadata

        Returns:
            Hits sorted by descending cosine score, ties in insertion order;
            empty before the first ``replace_all``

        Raises:
            FeatureDisabledError: If vector search is disabled
            ConfigError: If k < 1
            ConsistencyError: If the query dimension differs from the corpus
        """
        if not self.enabled:
            msg = "Vector search disabled via VECTOR_SEARCH_ENABLED=false"
            logger.info(msg)
            raise FeatureDisabledError(msg)

        if k < 1:
            raise ConfigError(f"k must be at least 1, got {k}")

        snapshot = self._snapshot
        if snapshot is None or snapshot.dimension is None:
            return []

        query = np.asarray(query_vector, dtype=np.float64)
        if query.shape != (snapshot.dimension,):
            raise ConsistencyError(
                f"Query vector has dimension {query.size}, corpus uses {snapshot.dimension}"
            )

        rows = np.arange(len(snapshot.chunks))
        if filter is not None:
            rows = np.array(
                [i for i in rows if filter.matches(_as_record(snapshot.chunks[i]))],
                dtype=np.int64,
            )
            if rows.size == 0:
                return []

        scores = cosine_scores(query, snapshot.matrix[rows], snapshot.norms[rows])

        # stable sort keeps insertion order between equal scores
        order = np.argsort(-scores, kind="stable")[:k]

        return [
            SearchHit(
                content=snapshot.chunks[rows[i]].content,
                metadata=dict(snapshot.chunks[rows[i]].metadata),
                score=float(scores[i]),
            )
            for i in order
        ]

    @staticmethod
    def _build_snapshot(chunks: Sequence[Chunk]) -> _Snapshot:
        embedded = [c for c in chunks if c.embedding is not None]
        skipped = len(chunks) - len(embedded)
        if skipped:
            logger.warning(f"{skipped} chunks have no embedding and are not searchable")

        if not embedded:
            return _Snapshot(chunks=tuple(embedded))

        dimension = len(embedded[0].embedding)
        for chunk in embedded:
            if len(chunk.embedding) != dimension:
                raise ConsistencyError(
                    f"Chunk {chunk.id} has dimension {len(chunk.embedding)}, "
                    f"expected {dimension}"
                )

        matrix = np.asarray([c.embedding for c in embedded], dtype=np.float64)
        matrix.setflags(write=False)
        norms = np.linalg.norm(matrix, axis=1)
        norms.setflags(write=False)

        return _Snapshot(
            chunks=tuple(embedded), matrix=matrix, norms=norms, dimension=dimension
        )


async def initialize_vector_store(
    chunks: Sequence[Chunk],
    embedder: EmbeddingClient,
    store: Optional[VectorStore] = None,
) -> VectorStore:
    """
    Embed chunks and install them in a vector store.

    Args:
        chunks: Chunks produced by the chunker
        embedder: Embedding client adapter
        store: Store to fill (a new one is created when omitted)

    Returns:
        The populated VectorStore

    Example:
        >>> chunks = load_and_chunk_policies()
        >>> store = await initialize_vector_store(chunks, EmbeddingClient(provider))
        >>> store.count
        42
    """
    store = store or VectorStore()

    logger.info(f"Embedding {len(chunks)} chunks for the vector store")
    vectors = await embedder.embed_batch([c.content for c in chunks])

    embedded = [chunk.with_embedding(vector) for chunk, vector in zip(chunks, vectors)]
    store.replace_all(embedded)

    return store
