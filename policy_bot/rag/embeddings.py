"""Uniform batch/single interface over an external embedding provider."""

from typing import Any, List, Optional, Protocol, runtime_checkable

from policy_bot.config import settings
from policy_bot.errors import ConfigError, ConsistencyError, ProviderError
from policy_bot.utils.logger import get_logger

logger = get_logger(__name__)


@runtime_checkable
class BatchEmbedder(Protocol):
    """Provider able to embed many texts in one request."""

    async def aembed_documents(self, texts: List[str]) -> List[List[float]]: ...


@runtime_checkable
class QueryEmbedder(Protocol):
    """Provider able to embed a single text."""

    async def aembed_query(self, text: str) -> List[float]: ...


class EmbeddingClient:
    """
    Embedding client adapter with a batch path and a sequential fallback.

    The strategy is chosen once from the provider's capabilities: batch
    embedding when ``aembed_documents`` is available, one request per text
    through ``aembed_query`` otherwise. Every LangChain ``Embeddings``
    implementation qualifies for the batch path.

    The embedding dimension is unknown until the first successful call and
    is enforced for every later one, so a corpus never mixes spaces.

    Args:
        provider: Embedding provider (e.g. GoogleGenerativeAIEmbeddings)
        batch_size: Texts per provider request on the batch path

    Raises:
        ConfigError: If the provider exposes neither method

    Example:
        >>> client = EmbeddingClient(get_embedding_model())
        >>> vectors = await client.embed_batch(["Vacation policy", "Dress code"])
        >>> client.dimension
        768
    """

    def __init__(self, provider: Any, batch_size: Optional[int] = None):
        self.provider = provider
        self.batch_size = batch_size or settings.EMBED_BATCH_SIZE

        if self.batch_size < 1:
            raise ConfigError(f"batch_size must be positive, got {self.batch_size}")

        if isinstance(provider, BatchEmbedder):
            self.strategy = "batch"
        elif isinstance(provider, QueryEmbedder):
            self.strategy = "sequential"
        else:
            raise ConfigError(
                f"Embedding provider {type(provider).__name__} exposes neither "
                "aembed_documents nor aembed_query"
            )

        # single texts go through aembed_query whenever the provider has it
        self._single_via_query = isinstance(provider, QueryEmbedder)
        self.dimension: Optional[int] = None

        logger.info(
            f"Embedding client using {type(provider).__name__} ({self.strategy} strategy)"
        )

    async def embed_batch(self, texts: List[str]) -> List[List[float]]:
        """
        Embed texts, preserving input order.

        Raises:
            ProviderError: If the provider fails or returns a wrong vector count
            ConsistencyError: If a vector's dimension differs from earlier calls
        """
        if not texts:
            return []

        if self.strategy == "batch":
            vectors: List[List[float]] = []
            for start in range(0, len(texts), self.batch_size):
                batch = texts[start : start + self.batch_size]
                vectors.extend(await self._embed_documents(batch))
        else:
            vectors = [await self._embed_query(text) for text in texts]

        if len(vectors) != len(texts):
            raise ProviderError(
                f"Embedding provider returned {len(vectors)} vectors for {len(texts)} texts"
            )

        for vector in vectors:
            self._check_dimension(vector)

        logger.debug(f"Embedded {len(texts)} texts (dim={self.dimension})")
        return vectors

    async def embed_one(self, text: str) -> List[float]:
        """Embed a single text (typically a query)."""
        if not self._single_via_query:
            vectors = await self._embed_documents([text])
            if len(vectors) != 1:
                raise ProviderError(
                    f"Embedding provider returned {len(vectors)} vectors for 1 text"
                )
            vector = vectors[0]
        else:
            vector = await self._embed_query(text)

        self._check_dimension(vector)
        return vector

    async def _embed_documents(self, texts: List[str]) -> List[List[float]]:
        try:
            vectors = await self.provider.aembed_documents(texts)
        except Exception as e:
            raise ProviderError(f"Batch embedding request failed: {e}") from e

        if not isinstance(vectors, list):
            raise ProviderError(
                f"Embedding provider returned {type(vectors).__name__}, expected a list"
            )
        if len(vectors) != len(texts):
            raise ProviderError(
                f"Embedding provider returned {len(vectors)} vectors for {len(texts)} texts"
            )
        return [self._as_vector(v) for v in vectors]

    async def _embed_query(self, text: str) -> List[float]:
        try:
            vector = await self.provider.aembed_query(text)
        except Exception as e:
            raise ProviderError(f"Embedding request failed: {e}") from e
        return self._as_vector(vector)

    @staticmethod
    def _as_vector(vector: Any) -> List[float]:
        try:
            return [float(x) for x in vector]
        except (TypeError, ValueError) as e:
            raise ProviderError(f"Malformed embedding vector: {e}") from e

    def _check_dimension(self, vector: List[float]) -> None:
        if not vector:
            raise ProviderError("Embedding provider returned an empty vector")

        if self.dimension is None:
            self.dimension = len(vector)
            logger.info(f"Embedding dimension discovered: {self.dimension}")
        elif len(vector) != self.dimension:
            raise ConsistencyError(
                f"Embedding dimension changed from {self.dimension} to {len(vector)}; "
                "re-ingest the corpus with a single embedding model"
            )
