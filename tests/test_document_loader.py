"""Tests for policy document loading."""

from policy_bot.rag.chunker import Chunker
from policy_bot.rag.document_loader import (
    flatten_csv,
    load_and_chunk_policies,
    load_policy_documents,
)


class TestFlattenCsv:
    """Tests for CSV flattening."""

    def test_rows_become_lines(self, tmp_path):
        """Test each row is whitespace-joined on its own line."""
        path = tmp_path / "expenses.csv"
        path.write_text("category,limit\nmeals,75\nhotel,250\n", encoding="utf-8")

        text, rows = flatten_csv(path)

        assert text == "category limit\nmeals 75\nhotel 250"
        assert rows == 3

    def test_blank_and_ragged_rows(self, tmp_path):
        """Test empty rows are dropped and short rows keep their values."""
        path = tmp_path / "ragged.csv"
        path.write_text("a,b,c\n\n,,\nd\n", encoding="utf-8")

        text, rows = flatten_csv(path)

        assert text == "a b c\nd"
        assert rows == 2
        assert "nan" not in text

    def test_row_wider_than_header(self, tmp_path):
        """Test an unquoted comma in a value keeps every field of the row."""
        path = tmp_path / "leave.csv"
        path.write_text(
            "policy,detail\nVacation,20 days per year, paid\nSick,10 days\n", encoding="utf-8"
        )

        text, rows = flatten_csv(path)

        assert text == "policy detail\nVacation 20 days per year paid\nSick 10 days"
        assert rows == 3

    def test_empty_file(self, tmp_path):
        """Test an empty CSV produces no text."""
        path = tmp_path / "empty.csv"
        path.write_text("", encoding="utf-8")

        assert flatten_csv(path) == ("", 0)


class TestLoadPolicyDocuments:
    """Tests for loading documents from a directory."""

    def test_load_policy_documents(self, policy_dir):
        """Test loading policy documents from directory."""
        docs = load_policy_documents(policy_dir)

        assert len(docs) == 2, "Should load 2 policy documents"

        # sorted by file name
        sources = [doc.metadata["source"] for doc in docs]
        assert sources == ["code_of_conduct.txt", "leave_policy.txt"]

    def test_document_metadata(self, policy_dir):
        """Test that documents have correct metadata."""
        for doc in load_policy_documents(policy_dir):
            assert "source" in doc.metadata
            assert "policy_type" in doc.metadata
            assert "path" in doc.metadata
            assert doc.metadata["policy_type"] == doc.metadata["source"].rsplit(".", 1)[0]

    def test_csv_and_markdown_supported(self, tmp_path):
        """Test .csv and .md files are loaded, other files ignored."""
        (tmp_path / "expenses.csv").write_text("meals,75\n", encoding="utf-8")
        (tmp_path / "remote.md").write_text("# Remote work\nThree days.", encoding="utf-8")
        (tmp_path / "logo.png").write_bytes(b"\x89PNG")

        docs = load_policy_documents(tmp_path)

        by_source = {d.metadata["source"]: d for d in docs}
        assert set(by_source) == {"expenses.csv", "remote.md"}
        assert by_source["expenses.csv"].page_content == "meals 75"
        assert by_source["expenses.csv"].metadata["rows"] == 1

    def test_empty_files_skipped(self, tmp_path):
        """Test empty documents are not loaded."""
        (tmp_path / "blank.txt").write_text("   \n", encoding="utf-8")

        assert load_policy_documents(tmp_path) == []

    def test_missing_directory(self, tmp_path):
        """Test a missing directory yields no documents."""
        assert load_policy_documents(tmp_path / "does_not_exist") == []

    def test_load_and_chunk_combined(self, policy_dir):
        """Test the combined load and chunk function."""
        chunks = load_and_chunk_policies(policy_dir, Chunker(chunk_size=30, chunk_overlap=5))

        assert len(chunks) > 2
        assert all(len(c.content) <= 30 for c in chunks)
        assert {c.source for c in chunks} == {"code_of_conduct.txt", "leave_policy.txt"}
