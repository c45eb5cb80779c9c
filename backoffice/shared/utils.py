"""Shared utility functions."""

from __future__ import annotations

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime) -> datetime:
    """Normalize datetime to UTC timezone."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def excerpt(text: str | None, limit: int = 200) -> str | None:
    """Trim long free text before storing it in audit details."""
    if text is None or len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


def like_pattern(term: str) -> str:
    """Build an escaped substring pattern for ILIKE with escape char ``\\``."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"
