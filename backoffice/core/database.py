"""Database setup for async SQLAlchemy 2.0."""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import datetime
from enum import Enum
from typing import Any, TypeVar
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime, MetaData, Uuid
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.ext.asyncio import AsyncAttrs, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from backoffice.core.config import Settings, get_settings
from backoffice.shared.exceptions import UnavailableException
from backoffice.shared.utils import utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# JSONB on PostgreSQL, plain JSON elsewhere (SQLite in tests).
JSONType = JSON().with_variant(JSONB(), "postgresql")

TRANSIENT_DB_ERRORS: tuple[type[BaseException], ...] = (
    OperationalError,
    PoolTimeoutError,
    TimeoutError,
)


def enum_values(enum_cls: type[Enum]) -> list[str]:
    """Persist enum values rather than member names."""
    return [member.value for member in enum_cls]


class Base(AsyncAttrs, DeclarativeBase):
    """Declarative base class for all ORM models."""

    metadata = MetaData(naming_convention=NAMING_CONVENTION)


class UUIDMixin:
    """Provide UUID primary key."""

    id: Mapped[UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True, default=uuid4)


class CreatedAtMixin:
    """Provide creation timestamp only (append-only tables)."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
        index=True,
    )


class TimestampMixin(CreatedAtMixin):
    """Provide UTC audit timestamps."""

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        onupdate=utc_now,
        nullable=False,
    )


class BaseModelMixin(UUIDMixin, TimestampMixin):
    """Base mixin used by all business entities."""


def build_connect_args(settings: Settings) -> dict[str, Any]:
    """Bounded waits on the backing store for the asyncpg driver."""
    if not settings.database_url.startswith("postgresql+asyncpg"):
        return {}
    statement_timeout_ms = int(settings.database_statement_timeout_seconds * 1000)
    return {
        "timeout": settings.database_connect_timeout_seconds,
        "command_timeout": settings.database_statement_timeout_seconds,
        "server_settings": {"statement_timeout": str(statement_timeout_ms)},
    }


settings = get_settings()
engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
    connect_args=build_connect_args(settings),
)
SessionLocal = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that provides one unit of work per request."""
    async with SessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def run_read_with_retry(
    session: AsyncSession,
    operation: Callable[[], Awaitable[T]],
) -> T:
    """Run an idempotent read, retrying once on a transient store failure.

    Each attempt runs in a SAVEPOINT, so a failed attempt is undone without
    expiring objects the request already loaded (such as the current actor).
    """

    async def _attempt() -> T:
        async with session.begin_nested():
            return await operation()

    try:
        return await _attempt()
    except TRANSIENT_DB_ERRORS as exc:
        logger.warning("Transient database error on read, retrying once: %s", exc)
        transaction = session.get_transaction()
        if transaction is not None and not transaction.is_active:
            # Connection-level failure: the outer transaction is unusable.
            await session.rollback()

    try:
        return await _attempt()
    except TRANSIENT_DB_ERRORS as exc:
        raise UnavailableException("Data store is temporarily unavailable") from exc


async def close_engine() -> None:
    """Close SQLAlchemy engine."""
    await engine.dispose()
