"""RAG system components."""

from policy_bot.rag.chunker import Chunker, OverlappingTextSplitter
from policy_bot.rag.document_loader import (
    load_and_chunk_policies,
    load_policy_documents,
)
from policy_bot.rag.embeddings import EmbeddingClient
from policy_bot.rag.keyword_search import KeywordSearchIndex
from policy_bot.rag.retriever import (
    HybridRetriever,
    format_retrieved_context,
    merge_hits,
)
from policy_bot.rag.schemas import Chunk, IndexDescriptor, MetadataFilter, SearchHit
from policy_bot.rag.vector_store import VectorStore, initialize_vector_store

__all__ = [
    # data model
    "Chunk",
    "SearchHit",
    "MetadataFilter",
    "IndexDescriptor",
    # document loading
    "Chunker",
    "OverlappingTextSplitter",
    "load_policy_documents",
    "load_and_chunk_policies",
    # embeddings and indexes
    "EmbeddingClient",
    "VectorStore",
    "initialize_vector_store",
    "KeywordSearchIndex",
    # retrieval
    "HybridRetriever",
    "merge_hits",
    "format_retrieved_context",
]
