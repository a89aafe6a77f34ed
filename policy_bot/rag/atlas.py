"""
MongoDB Atlas Search backend.

Builds ``$search`` aggregation pipelines (``knn`` and ``text`` clauses,
optionally combined with an ``equals`` filter), runs them through ``motor``
with one client per call, and produces the index definitions that have to
be created on the cluster before these queries can run.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence, Union

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo.errors import PyMongoError

from policy_bot.config import settings
from policy_bot.errors import ConfigError, FeatureDisabledError, ProviderError
from policy_bot.rag.schemas import Chunk, IndexDescriptor, MetadataFilter, SearchHit
from policy_bot.utils.logger import get_logger

logger = get_logger(__name__)

ClientFactory = Callable[[], Any]

EMBEDDING_PATH = "embedding"
HIT_PROJECTION = {"content": 1, "metadata.source": 1, "score": {"$meta": "searchScore"}}


def motor_client_factory(uri: Optional[str] = None) -> ClientFactory:
    """
    Return a factory opening a fresh AsyncIOMotorClient per call.

    Raises:
        ConfigError: If no connection string is configured
    """
    uri = uri or settings.MONGODB_URI
    if not uri:
        raise ConfigError("MONGODB_URI is not set; Atlas Search backends need it")

    def factory() -> AsyncIOMotorClient:
        return AsyncIOMotorClient(uri)

    return factory


def build_search_stage(
    index_name: str, clause_name: str, clause: Dict[str, Any], filter: Optional[MetadataFilter] = None
) -> Dict[str, Any]:
    """
    Build a ``$search`` stage for a single operator clause.

    With a filter, the clause becomes the ``must`` of a ``compound``
    operator whose ``filter`` holds an ``equals`` on the filter path.

    Example:
        >>> build_search_stage("idx", "text", {"query": "leave", "path": "content"})
        {'$search': {'index': 'idx', 'text': {'query': 'leave', 'path': 'content'}}}
    """
    if filter is None:
        body = {clause_name: clause}
    else:
        body = {
            "compound": {
                "must": [{clause_name: clause}],
                "filter": [{"equals": {"path": filter.path, "value": filter.value}}],
            }
        }
    return {"$search": {"index": index_name, **body}}


def build_vector_search_pipeline(
    index_name: str,
    query_vector: Sequence[float],
    k: int,
    filter: Optional[MetadataFilter] = None,
) -> List[Dict[str, Any]]:
    knn = {"path": EMBEDDING_PATH, "vector": list(query_vector), "k": k}
    return [
        build_search_stage(index_name, "knn", knn, filter),
        {"$project": HIT_PROJECTION},
    ]


def build_text_search_pipeline(
    index_name: str,
    query: str,
    fields: Union[str, List[str]] = "content",
    limit: int = 10,
    filter: Optional[MetadataFilter] = None,
) -> List[Dict[str, Any]]:
    text = {"query": query, "path": fields}
    return [
        build_search_stage(index_name, "text", text, filter),
        {"$limit": limit},
        {"$project": HIT_PROJECTION},
    ]


def to_search_hit(doc: Dict[str, Any]) -> SearchHit:
    """Convert a projected aggregation document into a SearchHit."""
    return SearchHit(
        content=doc.get("content", ""),
        metadata=dict(doc.get("metadata") or {}),
        score=float(doc.get("score", 0.0)),
    )


class AtlasCollection:
    """
    Per-call access to the policy chunk collection.

    Each operation opens a client, runs, and closes it again; no pooled
    connection is held between calls.
    """

    def __init__(
        self,
        client_factory: Optional[ClientFactory] = None,
        db_name: Optional[str] = None,
        collection_name: Optional[str] = None,
    ):
        self._client_factory = client_factory or motor_client_factory()
        self.db_name = db_name or settings.MONGODB_DB_NAME
        self.collection_name = collection_name or settings.MONGODB_COLLECTION

    async def aggregate(self, pipeline: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        client = None
        try:
            client = self._client_factory()
            collection = client[self.db_name][self.collection_name]
            return await collection.aggregate(pipeline).to_list(length=None)
        except PyMongoError as e:
            raise ProviderError(f"Atlas Search query failed: {e}") from e
        finally:
            if client is not None:
                client.close()

    async def store_chunks(self, chunks: Sequence[Chunk]) -> int:
        """
        Replace the collection contents with the given embedded chunks.

        Returns:
            Number of documents inserted
        """
        documents = [
            {
                "chunk_id": chunk.id,
                "content": chunk.content,
                "metadata": dict(chunk.metadata),
                EMBEDDING_PATH: chunk.embedding,
            }
            for chunk in chunks
            if chunk.embedding is not None
        ]

        client = None
        try:
            client = self._client_factory()
            collection = client[self.db_name][self.collection_name]
            await collection.delete_many({})
            if documents:
                await collection.insert_many(documents)
        except PyMongoError as e:
            raise ProviderError(f"Storing chunks in MongoDB failed: {e}") from e
        finally:
            if client is not None:
                client.close()

        logger.info(
            f"Inserted {len(documents)} chunks into {self.db_name}.{self.collection_name}"
        )
        return len(documents)


class AtlasVectorIndex:
    """
    Nearest-neighbour search delegated to an Atlas Search ``knn`` index.

    Same contract as the local VectorStore; scores are Atlas search scores.

    Args:
        collection: Collection accessor
        index_name: Search index name (defaults to settings.vector_index_name)
        enabled: Vector search flag (defaults to settings.VECTOR_SEARCH_ENABLED)
    """

    def __init__(
        self,
        collection: Optional[AtlasCollection] = None,
        index_name: Optional[str] = None,
        enabled: Optional[bool] = None,
    ):
        self.collection = collection or AtlasCollection()
        self.index_name = index_name or settings.vector_index_name
        self.enabled = settings.VECTOR_SEARCH_ENABLED if enabled is None else enabled

    @property
    def is_ready(self) -> bool:
        return self.enabled

    async def nearest_neighbors(
        self,
        query_vector: Sequence[float],
        k: int,
        filter: Optional[MetadataFilter] = None,
    ) -> List[SearchHit]:
        if not self.enabled:
            msg = "Vector search disabled via VECTOR_SEARCH_ENABLED=false"
            logger.info(msg)
            raise FeatureDisabledError(msg)
        if k < 1:
            raise ConfigError(f"k must be at least 1, got {k}")

        pipeline = build_vector_search_pipeline(self.index_name, query_vector, k, filter)
        docs = await self.collection.aggregate(pipeline)

        hits = [to_search_hit(doc) for doc in docs]
        hits.sort(key=lambda hit: hit.score, reverse=True)

        logger.debug(f"Atlas vector search on {self.index_name} returned {len(hits)} hits")
        return hits[:k]


def build_vector_index_descriptor(
    db_name: Optional[str] = None,
    collection_name: Optional[str] = None,
    dimensions: int = 768,
    index_name: Optional[str] = None,
) -> IndexDescriptor:
    """Index definition for cosine ``knn`` search on the embedding field."""
    collection_name = collection_name or settings.MONGODB_COLLECTION
    return IndexDescriptor(
        name=index_name or settings.VECTOR_INDEX_NAME or f"{collection_name}_vector_search",
        database=db_name or settings.MONGODB_DB_NAME,
        collection_name=collection_name,
        mappings={
            "dynamic": False,
            "fields": {
                "content": {"type": "string"},
                EMBEDDING_PATH: {
                    "type": "knn",
                    "dimensions": dimensions,
                    "similarity": "cosine",
                },
            },
        },
    )


def build_keyword_index_descriptor(
    db_name: Optional[str] = None,
    collection_name: Optional[str] = None,
    index_name: Optional[str] = None,
) -> IndexDescriptor:
    """Index definition for BM25 text search with an exact-match source field."""
    collection_name = collection_name or settings.MONGODB_COLLECTION
    return IndexDescriptor(
        name=index_name or settings.BM25_INDEX_NAME or f"{collection_name}_bm25_keyword",
        database=db_name or settings.MONGODB_DB_NAME,
        collection_name=collection_name,
        mappings={
            "dynamic": False,
            "fields": {
                "content": {"type": "string", "analyzer": "lucene.standard"},
                "metadata": {
                    "type": "document",
                    "fields": {
                        "source": {"type": "string", "analyzer": "lucene.keyword"}
                    },
                },
            },
        },
    )
