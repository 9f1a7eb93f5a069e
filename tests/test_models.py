# mypy: ignore-errors
# tests/test_models.py
"""Unit tests for the ORM models defined in civictrack.models.

These tests verify mapping details the storage layer relies on: table
names, the uniqueness rules on (issue, user) pairs, and the vote type check.
"""

import pytest
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from civictrack import models
from civictrack.db.time import utcnow


def test_table_names() -> None:
    """Model classes expose expected __tablename__ values."""
    assert models.User.__tablename__ == "users"
    assert models.Issue.__tablename__ == "issues"
    assert models.Comment.__tablename__ == "comments"
    assert models.Vote.__tablename__ == "votes"
    assert models.Follow.__tablename__ == "follows"
    assert models.StatusHistory.__tablename__ == "status_history"


def test_pair_tables_have_unique_constraints() -> None:
    """Votes and follows allow one row per (issue, user)."""
    for model in (models.Vote, models.Follow):
        unique = [
            {column.name for column in constraint.columns}
            for constraint in model.__table__.constraints
            if constraint.__class__.__name__ == "UniqueConstraint"
        ]
        assert {"issue_id", "user_id"} in unique


def _issue_row(issue_id: str = "issue-1") -> models.Issue:
    now = utcnow()
    return models.Issue(
        id=issue_id,
        title="Graffiti",
        description="Graffiti on the station wall",
        category="other",
        status="reported",
        latitude=1.0,
        longitude=2.0,
        images=[],
        upvotes=0,
        is_anonymous=False,
        flag_count=0,
        is_hidden=False,
        created_at=now,
        updated_at=now,
    )


def test_duplicate_vote_rejected_by_database(engine) -> None:
    with Session(engine) as session:
        session.add(_issue_row())
        session.add(models.Vote(id="v1", issue_id="issue-1", user_id="u", type="upvote", created_at=utcnow()))
        session.commit()

        session.add(models.Vote(id="v2", issue_id="issue-1", user_id="u", type="downvote", created_at=utcnow()))
        with pytest.raises(IntegrityError):
            session.commit()


def test_unknown_vote_type_rejected_by_database(engine) -> None:
    with Session(engine) as session:
        session.add(_issue_row())
        session.add(models.Vote(id="v1", issue_id="issue-1", user_id="u", type="sideways", created_at=utcnow()))
        with pytest.raises(IntegrityError):
            session.commit()


def test_images_round_trip_as_json(engine) -> None:
    with Session(engine) as session:
        row = _issue_row()
        row.images = ["a.jpg", "b.jpg"]
        session.add(row)
        session.commit()

    with Session(engine) as session:
        assert session.get(models.Issue, "issue-1").images == ["a.jpg", "b.jpg"]
