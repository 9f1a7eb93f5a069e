# src/civictrack/models/vote.py
"""Models capturing voting interactions on issues."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from civictrack.db.session import Base


class Vote(Base):
    """Per-user vote on an issue."""

    __tablename__ = "votes"
    __table_args__ = (
        CheckConstraint("type IN ('upvote', 'downvote')", name="ck_votes_type"),
        # One vote per user and issue; replacing a vote rewrites this row.
        UniqueConstraint("issue_id", "user_id", name="uq_votes_issue_user"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    issue_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("issues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    type: Mapped[str] = mapped_column(String(16), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
