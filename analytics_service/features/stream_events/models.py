"""SQLAlchemy models for the stream events feature."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from analytics_service.core.database import Base


class StreamEvent(Base):
    """One lifecycle event of a live stream, as recorded by the ingest pipeline.

    The table is append-mostly and listed newest-first, so the covering index
    matches the keyset ordering ``(timestamp, event_id)`` within a stream.
    """

    __tablename__ = "stream_event_log"
    __table_args__ = (
        Index(
            "ix_stream_event_log_tenant_stream_ts",
            "tenant_id",
            "stream_id",
            "timestamp",
            "event_id",
        ),
    )

    event_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    tenant_id: Mapped[str] = mapped_column(String(64), nullable=False)
    stream_id: Mapped[str] = mapped_column(String(128), nullable=False)
    node_id: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    event_type: Mapped[str] = mapped_column(String(64), nullable=False)
    status: Mapped[str | None] = mapped_column(String(64), nullable=True)
    downloaded_bytes: Mapped[int] = mapped_column(BigInteger(), nullable=False, default=0)
    uploaded_bytes: Mapped[int] = mapped_column(BigInteger(), nullable=False, default=0)

    def __repr__(self) -> str:
        return (
            f"<StreamEvent(event_id={self.event_id!r}, stream_id={self.stream_id!r}, "
            f"timestamp={self.timestamp!r})>"
        )
