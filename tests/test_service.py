"""Tests for service construction, ingestion and the CLI loop."""

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel

import cli_chat
from policy_bot.chat.service import build_keyword_index, create_policy_bot_service
from policy_bot.config import Settings, settings
from policy_bot.rag.atlas import AtlasCollection, AtlasVectorIndex
from policy_bot.rag.keyword_search import KeywordSearchIndex
from policy_bot.rag.vector_store import VectorStore
from fakes import FakeClientFactory, FakeCollection, KeywordEmbeddings


class TestSettings:
    """Tests for configuration defaults and derived values."""

    def test_index_names_derived_from_collection(self):
        """Test index names default to the collection name."""
        config = Settings(MONGODB_COLLECTION="policies", _env_file=None)

        assert config.vector_index_name == "policies_vector_search"
        assert config.bm25_index_name == "policies_bm25_keyword"

    def test_log_level_normalised(self):
        """Test log levels are upper-cased and validated."""
        assert Settings(LOG_LEVEL="debug", _env_file=None).LOG_LEVEL == "DEBUG"

        with pytest.raises(ValueError):
            Settings(LOG_LEVEL="chatty", _env_file=None)


class TestBuildKeywordIndex:
    """Tests for choosing the keyword index from settings."""

    def test_disabled(self, monkeypatch):
        monkeypatch.setattr(settings, "BM25_SEARCH_ENABLED", False)

        index = build_keyword_index()

        assert isinstance(index, KeywordSearchIndex)
        assert not index.enabled

    def test_without_mongodb(self, monkeypatch):
        monkeypatch.setattr(settings, "BM25_SEARCH_ENABLED", True)
        monkeypatch.setattr(settings, "MONGODB_URI", None)

        assert build_keyword_index() is None


class TestPolicyBotService:
    """Tests for building and ingesting."""

    @pytest.mark.asyncio
    async def test_local_backend(self, policy_dir, monkeypatch):
        """Test the local backend embeds and stores every chunk."""
        monkeypatch.setattr(settings, "VECTOR_BACKEND", "local")
        monkeypatch.setattr(settings, "VECTOR_SEARCH_ENABLED", True)
        provider = KeywordEmbeddings()

        service = await create_policy_bot_service(
            embedding_provider=provider,
            llm=FakeListChatModel(responses=["ok"]),
            data_dir=policy_dir,
            keyword_index=KeywordSearchIndex(enabled=False),
        )

        assert isinstance(service.vector_index, VectorStore)
        assert service.chunk_count == 2
        assert service.retriever.is_ready
        assert len(provider.document_calls) == 1

    @pytest.mark.asyncio
    async def test_local_backend_fills_keyword_collection(self, policy_dir, monkeypatch):
        """Test local ingestion also writes the collection keyword search reads."""
        monkeypatch.setattr(settings, "VECTOR_BACKEND", "local")
        monkeypatch.setattr(settings, "VECTOR_SEARCH_ENABLED", True)
        fake = FakeCollection()
        keyword_index = KeywordSearchIndex(
            AtlasCollection(FakeClientFactory(fake), "policy_bot", "vectors"), enabled=True
        )

        service = await create_policy_bot_service(
            embedding_provider=KeywordEmbeddings(),
            llm=FakeListChatModel(responses=["ok"]),
            data_dir=policy_dir,
            keyword_index=keyword_index,
        )

        assert service.chunk_count == 2
        assert service.atlas_collection is keyword_index.collection
        assert len(fake.inserted) == 2
        assert {doc["chunk_id"] for doc in fake.inserted} == {
            c.id for c in service.vector_index.chunks()
        }

    @pytest.mark.asyncio
    async def test_skip_ingest(self, policy_dir, monkeypatch):
        """Test ingestion can be deferred."""
        monkeypatch.setattr(settings, "VECTOR_BACKEND", "local")

        service = await create_policy_bot_service(
            embedding_provider=KeywordEmbeddings(),
            llm=FakeListChatModel(responses=["ok"]),
            data_dir=policy_dir,
            keyword_index=KeywordSearchIndex(enabled=False),
            ingest=False,
        )

        assert service.chunk_count == 0
        assert not service.retriever.is_ready

    @pytest.mark.asyncio
    async def test_atlas_backend_ingest(self, policy_dir, monkeypatch):
        """Test the Atlas backend writes embedded chunks to the collection."""
        monkeypatch.setattr(settings, "VECTOR_BACKEND", "atlas")
        monkeypatch.setattr(settings, "MONGODB_URI", "mongodb://localhost:27017")
        fake = FakeCollection()
        monkeypatch.setattr(
            "policy_bot.chat.service.AtlasCollection",
            lambda: AtlasCollection(FakeClientFactory(fake), "policy_bot", "vectors"),
        )

        service = await create_policy_bot_service(
            embedding_provider=KeywordEmbeddings(),
            llm=FakeListChatModel(responses=["ok"]),
            data_dir=policy_dir,
            keyword_index=KeywordSearchIndex(enabled=False),
        )

        assert isinstance(service.vector_index, AtlasVectorIndex)
        assert service.chunk_count is None
        assert len(fake.inserted) == 2
        assert all(len(doc["embedding"]) == 6 for doc in fake.inserted)


class TestCliChat:
    """Tests for the interactive loop."""

    @pytest.mark.asyncio
    async def test_chat_loop(self, monkeypatch, capsys):
        """Test questions are answered until 'exit'."""
        inputs = iter(["", "How many vacation days?", "exit"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(inputs))

        asked = []

        class Pipeline:
            async def answer(self, question):
                asked.append(question)
                return "20 days per year."

        class Service:
            pipeline = Pipeline()

        await cli_chat.chat_loop(Service())

        out = capsys.readouterr().out
        assert asked == ["How many vacation days?"]
        assert "Bot: 20 days per year." in out
        assert "Goodbye!" in out
