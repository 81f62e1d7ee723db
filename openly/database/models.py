"""Data models for Openly."""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping, Optional


def to_db_time(value: datetime) -> str:
    """Serialize a datetime as ISO-8601 UTC text for SQLite."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    # Fixed width so stored values compare correctly as text
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")


def from_db_time(value: Optional[str]) -> Optional[datetime]:
    """Parse ISO-8601 text stored by to_db_time."""
    if value is None:
        return None
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass
class Link:
    """A short link row."""

    id: int
    short_id: str
    long_url: str
    created_at: datetime

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "short_id": self.short_id,
            "long_url": self.long_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Link":
        """Create from a database row."""
        return cls(
            id=row["id"],
            short_id=row["short_id"],
            long_url=row["long_url"],
            created_at=from_db_time(row["created_at"]),
        )
