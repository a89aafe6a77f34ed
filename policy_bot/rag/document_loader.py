"""Document loading and chunking for the RAG system."""

from pathlib import Path
from typing import Any, List, Optional

import pandas as pd
from langchain_core.documents import Document

from policy_bot.config import settings
from policy_bot.rag.chunker import Chunker
from policy_bot.rag.schemas import Chunk
from policy_bot.utils.logger import get_logger

logger = get_logger(__name__)

SUPPORTED_SUFFIXES = {".txt", ".md", ".csv"}


def _read_csv(path: Path, width: Optional[int] = None, on_bad_lines: Any = "error") -> pd.DataFrame:
    return pd.read_csv(
        path,
        header=None,
        names=list(range(width)) if width else None,
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=True,
        encoding="utf-8",
        engine="python",
        on_bad_lines=on_bad_lines,
    )


def flatten_csv(path: Path) -> tuple[str, int]:
    """
    Flatten a CSV file into text, one whitespace-joined line per row.

    Empty rows are dropped. Rows wider than the first one (unquoted commas
    in free text) keep all their fields. A file pandas cannot parse is
    returned as its raw text (counted as a single row).

    Args:
        path: CSV file

    Returns:
        Tuple of (text, number of rows kept)
    """
    wide_rows: List[int] = []

    def _record_width(fields: List[str]) -> None:
        wide_rows.append(len(fields))

    try:
        df = _read_csv(path, on_bad_lines=_record_width)
        if wide_rows:
            # the column count is taken from the first row; re-read at full width
            df = _read_csv(path, width=max(wide_rows))
    except pd.errors.EmptyDataError:
        return "", 0
    except pd.errors.ParserError as e:
        logger.warning(f"Could not parse {path.name} as CSV ({e}); using raw text")
        raw = path.read_text(encoding="utf-8")
        return raw, 1 if raw.strip() else 0

    rows = []
    for values in df.itertuples(index=False, name=None):
        # short rows are padded with NaN
        line = " ".join(v.strip() for v in values if isinstance(v, str) and v.strip())
        if line:
            rows.append(line)

    return "\n".join(rows), len(rows)


def load_policy_documents(data_dir: Optional[Path] = None) -> List[Document]:
    """
    Load all policy documents from the data directory.

    Reads .txt, .md and .csv files (sorted by name) and converts them into
    LangChain Document objects with metadata.

    Args:
        data_dir: Directory to scan (defaults to settings.DATA_DIR)

    Returns:
        List of Document objects with content and metadata

    Example:
        >>> docs = load_policy_documents()
        >>> docs[0].metadata['source']
        'code_of_conduct.txt'
    """
    data_dir = data_dir or settings.DATA_DIR

    if not data_dir.exists():
        logger.error(f"Policies directory not found: {data_dir}")
        return []

    documents = []

    for policy_file in sorted(data_dir.iterdir()):
        if not policy_file.is_file() or policy_file.suffix.lower() not in SUPPORTED_SUFFIXES:
            continue

        try:
            metadata = {
                "source": policy_file.name,
                "policy_type": policy_file.stem,
                "path": str(policy_file),
            }

            if policy_file.suffix.lower() == ".csv":
                content, row_count = flatten_csv(policy_file)
                metadata["rows"] = row_count
            else:
                content = policy_file.read_text(encoding="utf-8")

            if not content.strip():
                logger.warning(f"Skipping empty policy document: {policy_file.name}")
                continue

            documents.append(Document(page_content=content, metadata=metadata))
            logger.info(f"Loaded policy document: {policy_file.name} ({len(content)} chars)")

        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Error loading {policy_file.name}: {e}")

    logger.info(f"Loaded {len(documents)} policy documents")
    return documents


def load_and_chunk_policies(
    data_dir: Optional[Path] = None, chunker: Optional[Chunker] = None
) -> List[Chunk]:
    """
    Load policy documents and split them into chunks in one step.

    Returns:
        List of chunks ready for embedding
    """
    documents = load_policy_documents(data_dir)

    if not documents:
        logger.warning("No policy documents loaded")
        return []

    chunker = chunker or Chunker()
    chunks = chunker.split_documents(documents)

    logger.info(f"Ready to embed {len(chunks)} document chunks")
    return chunks
