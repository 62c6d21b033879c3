"""
Shared helpers for persisted record shapes.

Records are plain dicts with camelCase keys once they reach the record
store; the dataclasses in this package convert to and from that shape.
Timestamps are persisted as ISO-8601 strings.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

from django.utils import timezone
from django.utils.dateparse import parse_datetime

T = TypeVar('T')


def to_iso(value: datetime | None) -> str | None:
    """Render a datetime for persistence."""
    if value is None:
        return None
    return value.isoformat()


def from_iso(value: str | datetime | None) -> datetime | None:
    """Parse a persisted timestamp; naive values are taken as the current timezone."""
    if value in (None, ''):
        return None
    parsed = value if isinstance(value, datetime) else parse_datetime(value)
    if parsed is None:
        raise ValueError(f"Invalid timestamp: {value!r}")
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a filtered, ordered result set."""

    items: list[T] = field(default_factory=list)
    total: int = 0
    limit: int = 0
    offset: int = 0

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def has_more(self) -> bool:
        return self.offset + len(self.items) < self.total
