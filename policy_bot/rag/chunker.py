"""Splitting policy text into overlapping, source-tagged chunks."""

from typing import Any, Dict, Iterable, List, Optional

from langchain_core.documents import Document
from langchain_text_splitters import TextSplitter

from policy_bot.config import settings
from policy_bot.errors import ConfigError
from policy_bot.rag.schemas import Chunk
from policy_bot.utils.logger import get_logger

logger = get_logger(__name__)

# preferred cut points, strongest first
BREAK_SEPARATORS = ("\n\n", "\n", ". ", " ")


class OverlappingTextSplitter(TextSplitter):
    """
    Sliding-window splitter with an exact character overlap.

    Each window is at most ``chunk_size`` characters long. Inside a window
    the cut is moved back to the last paragraph, line, sentence or word
    boundary; with no boundary available the window is cut hard. The next
    window starts ``chunk_overlap`` characters before the previous cut, so
    two consecutive chunks always share exactly ``chunk_overlap`` characters.
    """

    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 100, **kwargs: Any):
        if chunk_size <= 0:
            raise ConfigError(f"chunk_size must be positive, got {chunk_size}")
        if chunk_overlap < 0:
            raise ConfigError(f"chunk_overlap must not be negative, got {chunk_overlap}")
        if chunk_overlap >= chunk_size:
            raise ConfigError(
                f"chunk_overlap ({chunk_overlap}) must be smaller than "
                f"chunk_size ({chunk_size})"
            )
        # slices are returned verbatim so the overlap stays exact
        kwargs.setdefault("strip_whitespace", False)
        super().__init__(chunk_size=chunk_size, chunk_overlap=chunk_overlap, **kwargs)

    def split_text(self, text: str) -> List[str]:
        if not text or not text.strip():
            return []

        size = self._chunk_size
        overlap = self._chunk_overlap

        if len(text) <= size:
            return [text]

        chunks: List[str] = []
        start = 0
        while True:
            end = start + size
            if end >= len(text):
                chunks.append(text[start:])
                break

            # the cut must leave more than `overlap` new characters
            end = self._find_break(text, start + overlap + 1, end)
            chunks.append(text[start:end])
            start = end - overlap

        return chunks

    @staticmethod
    def _find_break(text: str, lo: int, hi: int) -> int:
        for separator in BREAK_SEPARATORS:
            idx = text.rfind(separator, lo, hi)
            if idx != -1:
                return idx + len(separator)
        return hi


class Chunker:
    """
    Turns raw documents into :class:`Chunk` objects.

    Args:
        chunk_size: Maximum characters per chunk (defaults to settings.CHUNK_SIZE)
        chunk_overlap: Characters shared by consecutive chunks
            (defaults to settings.CHUNK_OVERLAP)

    Raises:
        ConfigError: If the overlap is not smaller than the chunk size

    Example:
        >>> chunker = Chunker(chunk_size=1000, chunk_overlap=100)
        >>> chunks = chunker.split("Vacation: 20 days/year.", "leave.txt")
        >>> chunks[0].metadata
        {'source': 'leave.txt', 'index': 0}
    """

    def __init__(
        self, chunk_size: Optional[int] = None, chunk_overlap: Optional[int] = None
    ):
        self.chunk_size = settings.CHUNK_SIZE if chunk_size is None else chunk_size
        self.chunk_overlap = (
            settings.CHUNK_OVERLAP if chunk_overlap is None else chunk_overlap
        )
        self._splitter = OverlappingTextSplitter(
            chunk_size=self.chunk_size, chunk_overlap=self.chunk_overlap
        )

    def split(
        self,
        raw_text: str,
        source_id: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> List[Chunk]:
        """
        Split one document into chunks indexed from zero.

        Args:
            raw_text: Full document text
            source_id: Provenance stored as ``metadata.source``
            metadata: Extra filterable fields copied onto every chunk

        Returns:
            List of chunks, empty for empty input
        """
        pieces = self._splitter.split_text(raw_text)

        chunks = []
        for index, piece in enumerate(pieces):
            chunk_metadata = dict(metadata or {})
            chunk_metadata["source"] = source_id
            chunk_metadata["index"] = index
            chunks.append(
                Chunk(id=f"{source_id}:{index}", content=piece, metadata=chunk_metadata)
            )

        logger.debug(f"Split {source_id} ({len(raw_text)} chars) into {len(chunks)} chunks")
        return chunks

    def split_documents(self, documents: Iterable[Document]) -> List[Chunk]:
        """
        Split a sequence of documents; chunk indices restart per source.

        Documents without a ``source`` in their metadata are tagged
        ``unknown``.
        """
        chunks: List[Chunk] = []
        document_count = 0

        for doc in documents:
            document_count += 1
            extra = {k: v for k, v in doc.metadata.items() if k not in ("source", "index")}
            source = doc.metadata.get("source", "unknown")
            chunks.extend(self.split(doc.page_content, source, extra))

        logger.info(
            f"Split {document_count} documents into {len(chunks)} chunks "
            f"(size={self.chunk_size}, overlap={self.chunk_overlap})"
        )
        return chunks
