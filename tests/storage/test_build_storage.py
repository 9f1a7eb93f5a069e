# mypy: ignore-errors
# tests/storage/test_build_storage.py
"""Tests for selecting a storage backend from settings."""

from sqlalchemy import inspect

from civictrack.core.settings import Settings
from civictrack.schemas import IssueCreate
from civictrack.storage import MemStorage, SqlStorage, build_storage


def test_memory_backend_is_default() -> None:
    storage = build_storage(Settings(STORAGE_BACKEND="memory"))
    assert isinstance(storage, MemStorage)


def test_sql_backend_creates_tables(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'civictrack.db'}"
    storage = build_storage(Settings(STORAGE_BACKEND="sql", DATABASE_URL=url))

    assert isinstance(storage, SqlStorage)
    issue = storage.create_issue(
        IssueCreate(
            title="Fallen tree",
            description="Tree blocking the park path",
            category="parks",
            latitude=48.85,
            longitude=2.35,
        )
    )
    assert storage.get_issue(issue.id) == issue


def test_sql_data_survives_a_new_storage(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'civictrack.db'}"
    settings = Settings(STORAGE_BACKEND="sql", DATABASE_URL=url)
    issue = build_storage(settings).create_issue(
        IssueCreate(
            title="Fallen tree",
            description="Tree blocking the park path",
            category="parks",
            latitude=48.85,
            longitude=2.35,
        )
    )

    reopened = build_storage(settings)
    assert reopened.get_issue(issue.id) == issue
    assert [entry.description for entry in reopened.list_status_history(issue.id)] == [
        "Issue reported"
    ]


def test_tables_match_models(engine) -> None:
    tables = set(inspect(engine).get_table_names())
    assert {"users", "issues", "comments", "votes", "follows", "status_history"} <= tables
