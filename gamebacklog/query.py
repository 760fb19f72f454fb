"""Query engine: filter, sort and aggregate the game collection."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional

from gamebacklog.models import GameRecord, Status
from gamebacklog.validation import MAX_RATING, MIN_RATING

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)

RATINGS = tuple(range(MIN_RATING, MAX_RATING + 1))


class SortKey(str, Enum):
    LAST_ADDED = "lastAdded"
    LAST_PLAYED = "lastPlayed"
    RATING = "rating"
    TITLE_ASC = "titleAsc"
    TITLE_DESC = "titleDesc"

    @classmethod
    def parse(cls, value: str) -> SortKey:
        """Return the sort key for *value*, accepting ``titleAZ``/``titleZA``."""
        aliases = {"titleAZ": cls.TITLE_ASC, "titleZA": cls.TITLE_DESC}
        if value in aliases:
            return aliases[value]
        return cls(value)


@dataclass(frozen=True)
class QuerySpec:
    """Search, filter and sort parameters for one render."""

    search_text: str = ""
    status_scope: Optional[Status] = None
    favorites_only: bool = False
    sort_key: SortKey = SortKey.LAST_ADDED


def title_sort_key(title: str) -> str:
    """Case- and accent-insensitive key for ordering titles."""
    decomposed = unicodedata.normalize("NFKD", title.casefold())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def _sort(games: list[GameRecord], key: SortKey) -> list[GameRecord]:
    # sorted() is stable with reverse=True too, so ties keep insertion order.
    if key is SortKey.LAST_PLAYED:
        return sorted(games, key=lambda g: g.last_played_at or _EPOCH, reverse=True)
    if key is SortKey.RATING:
        return sorted(games, key=lambda g: g.rating or 0, reverse=True)
    if key is SortKey.TITLE_ASC:
        return sorted(games, key=lambda g: title_sort_key(g.title))
    if key is SortKey.TITLE_DESC:
        return sorted(games, key=lambda g: title_sort_key(g.title), reverse=True)
    return sorted(games, key=lambda g: g.created_at, reverse=True)


def query_and_sort(
    games: Iterable[GameRecord], spec: QuerySpec = QuerySpec()
) -> list[GameRecord]:
    """Return the records matching *spec*, ordered by its sort key.

    The input is never modified.
    """
    result = list(games)

    if spec.status_scope is not None:
        scope = Status(spec.status_scope)
        result = [g for g in result if g.status is scope]

    if spec.favorites_only:
        result = [g for g in result if g.status is Status.FAVORITES]

    needle = spec.search_text.strip().casefold()
    if needle:
        result = [g for g in result if needle in g.title.casefold()]

    return _sort(result, SortKey.parse(spec.sort_key))


# ------------------------------------------------------------------
# Aggregates
# ------------------------------------------------------------------


def status_tally(games: Iterable[GameRecord]) -> dict[Status, int]:
    """Return the number of records per status, zeros included."""
    tally = {status: 0 for status in Status}
    for game in games:
        tally[game.status] += 1
    return tally


def rating_histogram(games: Iterable[GameRecord]) -> dict[int, int]:
    """Return the number of records per rating 1-5; unrated records are skipped."""
    histogram = {r: 0 for r in RATINGS}
    for game in games:
        if game.rating in histogram:
            histogram[game.rating] += 1
    return histogram


def rating_percentages(histogram: dict[int, int]) -> dict[int, int]:
    """Return each rating's share of all rated records, rounded half up."""
    total = sum(histogram.values())
    if not total:
        return {r: 0 for r in histogram}
    return {r: (count * 200 + total) // (total * 2) for r, count in histogram.items()}
