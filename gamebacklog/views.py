"""View projections: everything a renderer needs for one refresh."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable

from gamebacklog.models import GameRecord, Status
from gamebacklog.query import (
    QuerySpec,
    SortKey,
    query_and_sort,
    rating_histogram,
    rating_percentages,
    status_tally,
)

PLAYING_SHELF_SIZE = 3
FAVORITES_SHELF_SIZE = 5

# Order of the slices in the status donut chart.
CHART_ORDER = (
    Status.PLAYED,
    Status.CURRENTLY_PLAYING,
    Status.BACKLOG,
    Status.FAVORITES,
)

_SORT_LABELS = {
    SortKey.LAST_ADDED: "Sort: Last added",
    SortKey.LAST_PLAYED: "Sort: Last played",
    SortKey.RATING: "Sort: Rating",
    SortKey.TITLE_ASC: "Sort: Title A-Z",
    SortKey.TITLE_DESC: "Sort: Title Z-A",
}


@dataclass
class CollectionView:
    """Pre-computed lists, shelves and chart series for one render."""

    sections: dict[Status, list[GameRecord]]
    playing_shelf: list[GameRecord]
    favorites_shelf: list[GameRecord]
    tally: dict[Status, int]
    histogram: dict[int, int]
    rating_percentages: dict[int, int]
    status_series: list[int] = field(default_factory=list)
    rating_series: list[int] = field(default_factory=list)

    @property
    def counts(self) -> dict[Status, int]:
        """Badge counts per status."""
        return dict(self.tally)

    @property
    def total(self) -> int:
        return sum(self.tally.values())


def sort_label(key: SortKey) -> str:
    """Return the label shown on the sort menu for *key*."""
    if key in _SORT_LABELS:
        return _SORT_LABELS[key]
    return "Sort"


def build_view(
    games: Iterable[GameRecord], spec: QuerySpec = QuerySpec()
) -> CollectionView:
    """Compute every list and aggregate for *games* under *spec*.

    Sections honour the whole spec; shelves only use its sort key; tallies
    and the histogram always cover the full collection.
    """
    games = list(games)
    sections = {
        status: query_and_sort(games, replace(spec, status_scope=status))
        for status in Status
    }
    shelf_spec = QuerySpec(sort_key=spec.sort_key)
    playing = query_and_sort(
        games, replace(shelf_spec, status_scope=Status.CURRENTLY_PLAYING)
    )
    favorites = query_and_sort(
        games, replace(shelf_spec, status_scope=Status.FAVORITES)
    )

    tally = status_tally(games)
    histogram = rating_histogram(games)
    return CollectionView(
        sections=sections,
        playing_shelf=playing[:PLAYING_SHELF_SIZE],
        favorites_shelf=favorites[:FAVORITES_SHELF_SIZE],
        tally=tally,
        histogram=histogram,
        rating_percentages=rating_percentages(histogram),
        status_series=[tally[s] for s in CHART_ORDER],
        rating_series=list(histogram.values()),
    )
