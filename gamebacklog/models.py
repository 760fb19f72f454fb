"""Data models for gamebacklog."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

PLACEHOLDER_IMAGE = "/img/placeholder.svg"

MIN_RATING = 1
MAX_RATING = 5


class Status(str, Enum):
    """Lifecycle state of a tracked game."""

    BACKLOG = "Backlog"
    CURRENTLY_PLAYING = "Currently Playing"
    PLAYED = "Played"
    FAVORITES = "Favorites"

    def __str__(self) -> str:
        return self.value


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


# Marks a GamePatch field the caller left alone.
UNSET: Any = _Unset()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid.uuid4().hex


def _fmt_dt(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt else None


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    # ISO strings written by browsers end in "Z".
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass
class GameRecord:
    """Represents one tracked title."""

    title: str
    status: Status = Status.BACKLOG
    rating: Optional[int] = None
    image_url: str = PLACEHOLDER_IMAGE
    id: str = field(default_factory=_new_id)
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    last_played_at: Optional[datetime] = None

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON-ready form used by the storage slot."""
        return {
            "id": self.id,
            "title": self.title,
            "status": self.status.value,
            "rating": self.rating,
            "imageUrl": self.image_url,
            "createdAt": _fmt_dt(self.created_at),
            "updatedAt": _fmt_dt(self.updated_at),
            "lastPlayedAt": _fmt_dt(self.last_played_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameRecord:
        """Build a record from its stored form.

        Raises ``KeyError``, ``TypeError`` or ``ValueError`` on malformed input.
        """
        title = data["title"]
        if not isinstance(title, str) or not title.strip():
            raise ValueError(f"Invalid title: {title!r}")
        rating = data.get("rating")
        if rating is not None and (
            isinstance(rating, bool)
            or not isinstance(rating, int)
            or not MIN_RATING <= rating <= MAX_RATING
        ):
            raise ValueError(f"Invalid rating: {rating!r}")
        created_at = _parse_dt(data.get("createdAt")) or _utcnow()
        return cls(
            id=str(data["id"]),
            title=title,
            status=Status(data.get("status", Status.BACKLOG.value)),
            rating=rating,
            image_url=data.get("imageUrl") or PLACEHOLDER_IMAGE,
            created_at=created_at,
            updated_at=_parse_dt(data.get("updatedAt")) or created_at,
            last_played_at=_parse_dt(data.get("lastPlayedAt")),
        )


@dataclass(frozen=True)
class GamePatch:
    """Partial update for a record: only ``status`` and ``rating`` may change.

    Fields left as ``UNSET`` keep their current value; ``rating=None`` clears
    the rating.
    """

    status: Any = UNSET
    rating: Any = UNSET

    def changes(self) -> dict[str, Any]:
        """Return the fields that were set on this patch."""
        return {
            name: value
            for name, value in (("status", self.status), ("rating", self.rating))
            if value is not UNSET
        }
