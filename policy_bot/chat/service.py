"""Construction of the retrieval and answering components."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from langchain_core.runnables import Runnable

from policy_bot.chat.memory import ConversationMemory
from policy_bot.chat.pipeline import AnswerPipeline
from policy_bot.config import settings
from policy_bot.llm import get_chat_model, get_embedding_model
from policy_bot.rag.atlas import AtlasCollection, AtlasVectorIndex
from policy_bot.rag.chunker import Chunker
from policy_bot.rag.document_loader import load_and_chunk_policies
from policy_bot.rag.embeddings import EmbeddingClient
from policy_bot.rag.keyword_search import KeywordSearchIndex
from policy_bot.rag.retriever import HybridRetriever
from policy_bot.rag.vector_store import VectorStore, initialize_vector_store
from policy_bot.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class PolicyBotService:
    """Everything a front end (CLI or API) needs to answer questions."""

    embedder: EmbeddingClient
    chunker: Chunker
    vector_index: Union[VectorStore, AtlasVectorIndex]
    retriever: HybridRetriever
    pipeline: AnswerPipeline
    data_dir: Optional[Path] = None
    atlas_collection: Optional[AtlasCollection] = None

    @property
    def chunk_count(self) -> Optional[int]:
        """Chunks held locally, None for the Atlas backend."""
        if isinstance(self.vector_index, VectorStore):
            return self.vector_index.count
        return None

    async def ingest(self) -> int:
        """
        Reload the policy documents and replace the indexed corpus.

        Queries running meanwhile keep using the previous corpus until the
        new one is installed.

        Returns:
            Number of chunks indexed
        """
        chunks = load_and_chunk_policies(self.data_dir, self.chunker)

        if isinstance(self.vector_index, VectorStore):
            if self.vector_index.enabled:
                await initialize_vector_store(chunks, self.embedder, self.vector_index)
                if self.atlas_collection is not None:
                    await self.atlas_collection.store_chunks(self.vector_index.chunks())
                return self.vector_index.count
            if self.atlas_collection is None:
                logger.info("Vector search disabled; skipping local ingestion")
                return 0

        vectors = await self.embedder.embed_batch([c.content for c in chunks])
        embedded = [c.with_embedding(v) for c, v in zip(chunks, vectors)]
        return await self.atlas_collection.store_chunks(embedded)


def build_keyword_index() -> Optional[KeywordSearchIndex]:
    """Keyword index when MongoDB is configured (or the path is switched off)."""
    if not settings.BM25_SEARCH_ENABLED:
        return KeywordSearchIndex(enabled=False)
    if not settings.mongodb_configured:
        logger.info("MONGODB_URI not set; keyword search not configured")
        return None
    return KeywordSearchIndex()


async def create_policy_bot_service(
    embedding_provider: Optional[Any] = None,
    llm: Optional[Runnable] = None,
    data_dir: Optional[Path] = None,
    keyword_index: Optional[KeywordSearchIndex] = None,
    ingest: bool = True,
) -> PolicyBotService:
    """
    Build and (optionally) populate the full question-answering stack.

    Providers default to the ones selected by settings.LLM_PROVIDER.

    Args:
        embedding_provider: LangChain-compatible embeddings
        llm: Chat model
        data_dir: Policy documents directory (defaults to settings.DATA_DIR)
        keyword_index: Keyword index (built from settings when omitted)
        ingest: Load, embed and index the documents now

    Raises:
        ConfigError: For invalid chunking settings or missing credentials
    """
    if embedding_provider is None:
        embedding_provider = get_embedding_model()
    if llm is None:
        llm = get_chat_model()

    embedder = EmbeddingClient(embedding_provider)
    chunker = Chunker()

    if keyword_index is None:
        keyword_index = build_keyword_index()

    atlas_collection = None
    if settings.VECTOR_BACKEND == "atlas":
        atlas_collection = AtlasCollection()
        vector_index: Union[VectorStore, AtlasVectorIndex] = AtlasVectorIndex(atlas_collection)
    else:
        vector_index = VectorStore()
        if keyword_index is not None and keyword_index.enabled:
            # keyword search reads the chunks ingestion writes
            atlas_collection = keyword_index.collection

    retriever = HybridRetriever(embedder, vector_index, keyword_index)
    pipeline = AnswerPipeline(
        retriever, llm, memory=ConversationMemory(settings.MAX_MEMORY_TURNS)
    )

    service = PolicyBotService(
        embedder=embedder,
        chunker=chunker,
        vector_index=vector_index,
        retriever=retriever,
        pipeline=pipeline,
        data_dir=data_dir,
        atlas_collection=atlas_collection,
    )

    if ingest:
        count = await service.ingest()
        logger.info(f"Policy bot ready ({count} chunks indexed, backend={settings.VECTOR_BACKEND})")

    return service
