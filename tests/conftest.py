"""Shared fixtures for the policy bot tests (no network access)."""

import pytest

from fakes import KeywordEmbeddings


@pytest.fixture
def embeddings() -> KeywordEmbeddings:
    return KeywordEmbeddings()


@pytest.fixture
def policy_dir(tmp_path):
    """Small policy corpus on disk."""
    (tmp_path / "leave_policy.txt").write_text(
        "Vacation: employees receive 20 vacation days per year.", encoding="utf-8"
    )
    (tmp_path / "code_of_conduct.txt").write_text(
        "Dress code: business casual attire, casual dress on Fridays.", encoding="utf-8"
    )
    return tmp_path


@pytest.fixture(autouse=True)
def reset_sessions():
    from policy_bot.api.session import clear_all_sessions

    yield
    clear_all_sessions()
