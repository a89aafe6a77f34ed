"""Tests for text chunking."""

import pytest
from langchain_core.documents import Document

from policy_bot.errors import ConfigError
from policy_bot.rag.chunker import Chunker, OverlappingTextSplitter

LONG_TEXT = (
    "Employees receive 20 vacation days per year. Unused days expire in December. "
    "Sick leave is granted for up to 10 days. A doctor's note is required after three days.\n\n"
    "Parental leave lasts 16 weeks for primary caregivers. Secondary caregivers get 6 weeks.\n"
    "Bereavement leave is 5 days for immediate family members and 2 days otherwise. "
) * 4


class TestOverlappingTextSplitter:
    """Tests for the sliding-window splitter."""

    def test_empty_and_whitespace_input(self):
        """Test that empty text produces no chunks."""
        splitter = OverlappingTextSplitter(chunk_size=50, chunk_overlap=10)

        assert splitter.split_text("") == []
        assert splitter.split_text("   \n\n  ") == []

    def test_short_text_single_chunk(self):
        """Test text shorter than the window is returned whole."""
        splitter = OverlappingTextSplitter(chunk_size=1000, chunk_overlap=100)

        assert splitter.split_text("Vacation: 20 days/year.") == ["Vacation: 20 days/year."]

    def test_chunks_respect_size(self):
        """Test no chunk exceeds chunk_size."""
        splitter = OverlappingTextSplitter(chunk_size=120, chunk_overlap=20)
        chunks = splitter.split_text(LONG_TEXT)

        assert len(chunks) > 1
        assert all(0 < len(c) <= 120 for c in chunks)

    def test_exact_overlap(self):
        """Test consecutive chunks share exactly chunk_overlap characters."""
        overlap = 20
        splitter = OverlappingTextSplitter(chunk_size=120, chunk_overlap=overlap)
        chunks = splitter.split_text(LONG_TEXT)

        for previous, current in zip(chunks, chunks[1:]):
            assert previous[-overlap:] == current[:overlap]

    def test_chunks_cover_whole_text(self):
        """Test the text can be rebuilt from the chunks."""
        overlap = 15
        splitter = OverlappingTextSplitter(chunk_size=100, chunk_overlap=overlap)
        chunks = splitter.split_text(LONG_TEXT)

        rebuilt = chunks[0] + "".join(c[overlap:] for c in chunks[1:])
        assert rebuilt == LONG_TEXT

    def test_hard_cut_without_boundaries(self):
        """Test text without separators is cut at the window size."""
        splitter = OverlappingTextSplitter(chunk_size=10, chunk_overlap=3)
        chunks = splitter.split_text("x" * 25)

        assert chunks[0] == "x" * 10
        assert all(len(c) <= 10 for c in chunks)
        assert "".join([chunks[0]] + [c[3:] for c in chunks[1:]]) == "x" * 25

    def test_prefers_paragraph_break(self):
        """Test the cut moves back to a paragraph boundary."""
        splitter = OverlappingTextSplitter(chunk_size=40, chunk_overlap=5)
        text = "First paragraph is here.\n\nSecond paragraph follows after it."
        chunks = splitter.split_text(text)

        assert chunks[0] == "First paragraph is here.\n\n"

    @pytest.mark.parametrize(
        "size,overlap",
        [(0, 0), (-5, 0), (100, -1), (100, 100), (100, 150)],
    )
    def test_invalid_configuration(self, size, overlap):
        """Test invalid size/overlap combinations raise ConfigError."""
        with pytest.raises(ConfigError):
            OverlappingTextSplitter(chunk_size=size, chunk_overlap=overlap)


class TestChunker:
    """Tests for the Chunk-producing chunker."""

    def test_split_assigns_ids_and_metadata(self):
        """Test chunk ids and metadata carry source and index."""
        chunker = Chunker(chunk_size=120, chunk_overlap=20)
        chunks = chunker.split(LONG_TEXT, "leave_policy.txt", {"policy_type": "leave_policy"})

        assert len(chunks) > 1
        for i, chunk in enumerate(chunks):
            assert chunk.id == f"leave_policy.txt:{i}"
            assert chunk.metadata["source"] == "leave_policy.txt"
            assert chunk.metadata["index"] == i
            assert chunk.metadata["policy_type"] == "leave_policy"
            assert chunk.embedding is None

    def test_split_empty_text(self):
        """Test empty input yields no chunks."""
        assert Chunker(chunk_size=100, chunk_overlap=10).split("", "empty.txt") == []

    def test_indices_restart_per_document(self):
        """Test chunk indices restart for each source."""
        chunker = Chunker(chunk_size=120, chunk_overlap=20)
        docs = [
            Document(page_content=LONG_TEXT, metadata={"source": "a.txt"}),
            Document(page_content="Dress code: business casual.", metadata={"source": "b.txt"}),
        ]

        chunks = chunker.split_documents(docs)

        b_chunks = [c for c in chunks if c.source == "b.txt"]
        assert len(b_chunks) == 1
        assert b_chunks[0].metadata["index"] == 0
        assert b_chunks[0].id == "b.txt:0"
        assert chunks[0].id == "a.txt:0"

    def test_missing_source_is_unknown(self):
        """Test documents without a source are tagged 'unknown'."""
        chunks = Chunker(chunk_size=100, chunk_overlap=10).split_documents(
            [Document(page_content="Some policy text.")]
        )

        assert chunks[0].source == "unknown"

    def test_defaults_from_settings(self):
        """Test sizes default to the configured values."""
        from policy_bot.config import settings

        chunker = Chunker()

        assert chunker.chunk_size == settings.CHUNK_SIZE
        assert chunker.chunk_overlap == settings.CHUNK_OVERLAP

    def test_invalid_overlap(self):
        """Test overlap >= size fails at construction."""
        with pytest.raises(ConfigError):
            Chunker(chunk_size=50, chunk_overlap=50)
