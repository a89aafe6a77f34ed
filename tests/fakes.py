"""Test doubles for embedding providers, MongoDB clients and search indexes."""

from typing import Any, Dict, List, Optional

from policy_bot.errors import FeatureDisabledError, ProviderError
from policy_bot.rag.schemas import SearchHit

VOCABULARY = ("vacation", "sick", "dress", "remote", "expense")


def keyword_vector(text: str) -> List[float]:
    """Count vocabulary words, plus a constant so no vector is all zeros."""
    lowered = text.lower()
    return [float(lowered.count(word)) for word in VOCABULARY] + [0.1]


class KeywordEmbeddings:
    """Batch-capable embedding provider with predictable vectors."""

    def __init__(self):
        self.document_calls: List[List[str]] = []
        self.query_calls: List[str] = []

    async def aembed_documents(self, texts: List[str]) -> List[List[float]]:
        self.document_calls.append(list(texts))
        return [keyword_vector(t) for t in texts]

    async def aembed_query(self, text: str) -> List[float]:
        self.query_calls.append(text)
        return keyword_vector(text)


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        return list(self._docs)


class FakeCollection:
    def __init__(self, docs: Optional[List[Dict[str, Any]]] = None, error: Exception = None):
        self.docs = docs or []
        self.error = error
        self.pipelines: List[List[Dict[str, Any]]] = []
        self.inserted: List[Dict[str, Any]] = []
        self.deleted = 0

    def aggregate(self, pipeline):
        self.pipelines.append(pipeline)
        if self.error:
            raise self.error
        return FakeCursor(self.docs)

    async def delete_many(self, query):
        self.deleted += 1

    async def insert_many(self, documents):
        self.inserted.extend(documents)


class FakeMongoClient:
    def __init__(self, collection: FakeCollection):
        self.collection = collection
        self.closed = False
        self.accessed: List[str] = []

    def __getitem__(self, db_name):
        self.accessed.append(db_name)
        return {"vectors": self.collection, "policies": self.collection}

    def close(self):
        self.closed = True


class FakeClientFactory:
    """Client factory recording every client it opens."""

    def __init__(self, collection: FakeCollection):
        self.collection = collection
        self.clients: List[FakeMongoClient] = []

    def __call__(self) -> FakeMongoClient:
        client = FakeMongoClient(self.collection)
        self.clients.append(client)
        return client


class FakeKeywordIndex:
    """Keyword index returning canned hits, or failing."""

    def __init__(self, hits: Optional[List[SearchHit]] = None, enabled: bool = True, fail: bool = False):
        self.hits = hits or []
        self.enabled = enabled
        self.fail = fail
        self.queries: List[str] = []

    @property
    def is_ready(self) -> bool:
        return self.enabled

    async def search(self, query, fields="content", limit=10, filter=None):
        if not self.enabled:
            raise FeatureDisabledError("keyword search disabled")
        self.queries.append(query)
        if self.fail:
            raise ProviderError("keyword backend unreachable")
        return self.hits[:limit]


