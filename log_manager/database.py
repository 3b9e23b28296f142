"""Database setup and session management."""

import logging
from datetime import datetime
from typing import AsyncGenerator

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from log_manager.config import settings

logger = logging.getLogger(__name__)

AUDIT_TABLE_NAME = "log_db"


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class AuditLogRecord(Base):
    """One persisted audit entry.

    Columns mirror AuditEntry exactly. The autoincrement id doubles as the
    insertion order and is the default sort key for list views.
    """

    __tablename__ = AUDIT_TABLE_NAME

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    ip_address: Mapped[str] = mapped_column(String(45), default="")
    userid: Mapped[int] = mapped_column(Integer, default=0, index=True)
    event_time: Mapped[datetime] = mapped_column(DateTime, index=True)  # wall-clock in settings.timezone
    object_type: Mapped[str] = mapped_column(String(20), index=True)  # Post, Taxonomy, Media, User, Settings
    severity: Mapped[str] = mapped_column(String(10), default="notice", index=True)  # info, notice, warning, alert
    event_type: Mapped[str] = mapped_column(String(20), index=True)
    message: Mapped[str] = mapped_column(Text, default="")

    __table_args__ = (
        Index("ix_log_db_object_event", "object_type", "event_type"),
    )

    def to_dict(self) -> dict:
        """Convert to dictionary for API responses."""
        return {
            "id": self.id,
            "ip_address": self.ip_address,
            "userid": self.userid,
            "event_time": self.event_time.strftime("%Y-%m-%d %H:%M:%S") if self.event_time else None,
            "object_type": self.object_type,
            "severity": self.severity,
            "event_type": self.event_type,
            "message": self.message,
        }


# Engine and session factory
engine = create_async_engine(settings.database_url, echo=settings.debug)
async_session_factory = async_sessionmaker(engine, expire_on_commit=False)


async def init_db() -> None:
    """Create the audit table if it does not exist.

    create_all is idempotent; existing tables are never altered.
    """
    settings.data_dir.mkdir(parents=True, exist_ok=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info(f"Database initialized ({AUDIT_TABLE_NAME})")


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting database sessions."""
    async with async_session_factory() as session:
        yield session


async def close_db() -> None:
    """Close database connections gracefully."""
    await engine.dispose()
