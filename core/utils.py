from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Any, FrozenSet, Iterable, Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def to_decimal(value: Any) -> Optional[Decimal]:
    """Coerce a numeric value to Decimal, or None if absent or unparseable."""
    if value is None:
        return None
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


def normalize_tag(tag: Optional[str]) -> str:
    return tag.strip().casefold() if tag else ''


def tag_set(tags: Optional[Iterable[str]]) -> FrozenSet[str]:
    """Normalized, de-duplicated tag set. Blank tags are dropped."""
    if not tags:
        return frozenset()
    return frozenset(t for t in (normalize_tag(tag) for tag in tags) if t)
