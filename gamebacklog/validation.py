"""Validation predicates for game records."""

from __future__ import annotations

from typing import Any

from gamebacklog.models import MAX_RATING, MIN_RATING, Status


def is_valid_rating(rating: Any) -> bool:
    """Return ``True`` for ``None`` or an integer between 1 and 5."""
    if rating is None:
        return True
    if isinstance(rating, bool) or not isinstance(rating, int):
        return False
    return MIN_RATING <= rating <= MAX_RATING


def is_valid_status(status: Any) -> bool:
    """Return ``True`` if *status* is a ``Status`` member or one of its values."""
    if isinstance(status, Status):
        return True
    return isinstance(status, str) and status in Status._value2member_map_
