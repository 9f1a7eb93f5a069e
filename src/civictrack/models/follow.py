# src/civictrack/models/follow.py
"""SQLAlchemy model for issue subscriptions."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from civictrack.db.session import Base


class Follow(Base):
    """A user's subscription to updates on an issue."""

    __tablename__ = "follows"
    __table_args__ = (UniqueConstraint("issue_id", "user_id", name="uq_follows_issue_user"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    issue_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("issues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(String(36), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
