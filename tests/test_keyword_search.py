"""Tests for BM25 keyword search."""

import pytest

from policy_bot.errors import ConfigError, FeatureDisabledError
from policy_bot.rag.atlas import AtlasCollection
from policy_bot.rag.keyword_search import KeywordSearchIndex
from policy_bot.rag.schemas import MetadataFilter
from fakes import FakeClientFactory, FakeCollection

DOCS = [
    {"content": "License update steps for the sandbox", "metadata": {"source": "admin.csv"}, "score": 3.2},
    {"content": "Sandbox refresh schedule", "metadata": {"source": "admin.csv"}, "score": 1.4},
]


def make_index(docs=None):
    fake = FakeCollection(docs if docs is not None else DOCS)
    factory = FakeClientFactory(fake)
    collection = AtlasCollection(factory, db_name="policy_bot", collection_name="vectors")
    return KeywordSearchIndex(collection, index_name="vectors_bm25_keyword", enabled=True), fake, factory


class TestKeywordSearch:
    """Tests for keyword search requests and results."""

    @pytest.mark.asyncio
    async def test_search_returns_hits(self):
        """Test hits come back in the index's order."""
        index, _, factory = make_index()

        hits = await index.search("license update sandbox", limit=5)

        assert [h.score for h in hits] == [3.2, 1.4]
        assert hits[0].metadata["source"] == "admin.csv"
        assert factory.clients[0].closed

    @pytest.mark.asyncio
    async def test_pipeline_shape(self):
        """Test the text stage, limit and projection."""
        index, fake, _ = make_index()

        await index.search("license", fields=["content"], limit=3)

        search, limit, project = fake.pipelines[0]
        assert search["$search"]["index"] == "vectors_bm25_keyword"
        assert search["$search"]["text"] == {"query": "license", "path": ["content"]}
        assert limit == {"$limit": 3}
        assert project["$project"]["metadata.source"] == 1

    @pytest.mark.asyncio
    async def test_filter_compound(self):
        """Test a filter is ANDed with the text clause."""
        index, fake, _ = make_index()

        await index.search(
            "license update sandbox",
            limit=5,
            filter=MetadataFilter(path="metadata.source", value="admin.csv"),
        )

        compound = fake.pipelines[0][0]["$search"]["compound"]
        assert compound["must"][0]["text"]["query"] == "license update sandbox"
        assert compound["filter"][0]["equals"] == {"path": "metadata.source", "value": "admin.csv"}

    @pytest.mark.asyncio
    async def test_no_results(self):
        """Test an empty result set."""
        index, _, _ = make_index([])

        assert await index.search("nothing matches") == []

    @pytest.mark.asyncio
    async def test_invalid_limit(self):
        """Test limit < 1 raises ConfigError."""
        index, _, _ = make_index()

        with pytest.raises(ConfigError):
            await index.search("license", limit=0)


class TestKeywordSearchDisabled:
    """Tests for the disabled keyword path."""

    @pytest.mark.asyncio
    async def test_disabled_raises_before_request(self):
        """Test a disabled index never opens a client."""
        fake = FakeCollection(DOCS)
        factory = FakeClientFactory(fake)
        index = KeywordSearchIndex(AtlasCollection(factory), enabled=False)

        with pytest.raises(FeatureDisabledError, match="BM25_SEARCH_ENABLED"):
            await index.search("license")

        assert factory.clients == []
        assert not index.is_ready

    def test_disabled_needs_no_mongodb(self, monkeypatch):
        """Test a disabled index can be built without MONGODB_URI."""
        from policy_bot.config import settings

        monkeypatch.setattr(settings, "MONGODB_URI", None)

        index = KeywordSearchIndex(enabled=False)

        assert index.collection is None
