# src/civictrack/models/status_history.py
"""Append-only audit trail of issue status transitions."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from civictrack.db.session import Base


class StatusHistory(Base):
    """One entry per status an issue has entered, including the initial one."""

    __tablename__ = "status_history"
    __table_args__ = (UniqueConstraint("issue_id", "seq", name="uq_status_history_issue_seq"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    issue_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("issues.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Position within the issue timeline; breaks ties between equal timestamps.
    seq: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
