"""BM25 keyword search over an Atlas Search text index."""

from typing import List, Optional, Union

from policy_bot.config import settings
from policy_bot.errors import ConfigError, FeatureDisabledError
from policy_bot.rag.atlas import AtlasCollection, build_text_search_pipeline, to_search_hit
from policy_bot.rag.schemas import MetadataFilter, SearchHit
from policy_bot.utils.logger import get_logger

logger = get_logger(__name__)


class KeywordSearchIndex:
    """
    Lexical search against a named Atlas Search index.

    The collection accessor is only created when the index is enabled, so a
    disabled keyword path needs no MongoDB configuration at all.

    Args:
        collection: Collection accessor (opens one client per call)
        index_name: Keyword index name (defaults to settings.bm25_index_name)
        enabled: Keyword search flag (defaults to settings.BM25_SEARCH_ENABLED)

    Example:
        >>> index = KeywordSearchIndex()
        >>> hits = await index.search(
        ...     "license update sandbox",
        ...     limit=5,
        ...     filter=MetadataFilter(path="metadata.source", value="admin.csv"),
        ... )
    """

    def __init__(
        self,
        collection: Optional[AtlasCollection] = None,
        index_name: Optional[str] = None,
        enabled: Optional[bool] = None,
    ):
        self.enabled = settings.BM25_SEARCH_ENABLED if enabled is None else enabled
        self.index_name = index_name or settings.bm25_index_name
        self.collection = collection
        if self.enabled and self.collection is None:
            self.collection = AtlasCollection()

    @property
    def is_ready(self) -> bool:
        return self.enabled

    async def search(
        self,
        query: str,
        fields: Union[str, List[str]] = "content",
        limit: int = 10,
        filter: Optional[MetadataFilter] = None,
    ) -> List[SearchHit]:
        """
        Run a text query, optionally ANDed with an equality filter.

        Args:
            query: Free-text query
            fields: Field path or paths to match against
            limit: Maximum number of hits
            filter: Optional equality filter

        Returns:
            Hits in the index's relevance order

        Raises:
            FeatureDisabledError: If keyword search is disabled
            ProviderError: If the search request fails
        """
        if not self.enabled:
            msg = "BM25 text search disabled via BM25_SEARCH_ENABLED=false"
            logger.info(msg)
            raise FeatureDisabledError(msg)
        if limit < 1:
            raise ConfigError(f"limit must be at least 1, got {limit}")

        pipeline = build_text_search_pipeline(self.index_name, query, fields, limit, filter)
        docs = await self.collection.aggregate(pipeline)

        hits = [to_search_hit(doc) for doc in docs]
        logger.info(
            f"Keyword search on {self.index_name} returned {len(hits)} hits "
            f"for: '{query[:50]}'"
        )
        return hits
