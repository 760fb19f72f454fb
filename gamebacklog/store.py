"""Collection store: the single write path for the game collection."""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol

from gamebacklog.db import Database
from gamebacklog.models import PLACEHOLDER_IMAGE, GamePatch, GameRecord, Status
from gamebacklog.storage import STORAGE_KEY, load_collection, save_collection
from gamebacklog.validation import is_valid_rating, is_valid_status

logger = logging.getLogger(__name__)

MSG_TITLE_REQUIRED = "Title is required"
MSG_DUPLICATE_TITLE = "Duplicate title"
MSG_INVALID_RATING = "Invalid rating"
MSG_INVALID_STATUS = "Invalid status"
MSG_SAVE_FAILED = "Could not save changes"


class CoverResolver(Protocol):
    async def resolve_cover(self, title: str) -> Optional[str]: ...


def _log_message(message: str) -> None:
    logger.info(message)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CollectionStore:
    """Owns the in-memory collection and persists it after every change.

    Parameters
    ----------
    db:
        The ``Database`` holding the storage slot.
    covers:
        Anything with an ``async resolve_cover(title)`` method.
    notify:
        Receives user-facing messages for rejected mutations.
    key:
        Storage slot name.
    clock:
        Returns the current time; overridable for tests.
    """

    def __init__(
        self,
        db: Database,
        covers: CoverResolver,
        notify: Optional[Callable[[str], None]] = None,
        key: str = STORAGE_KEY,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self._db = db
        self._covers = covers
        self._notify = notify or _log_message
        self._key = key
        self._clock = clock or _utcnow
        self._listeners: list[Callable[[], None]] = []
        self._games: list[GameRecord] = load_collection(db, key)

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def records(self) -> tuple[GameRecord, ...]:
        """Snapshot of the collection in insertion order."""
        return tuple(self._games)

    def __len__(self) -> int:
        return len(self._games)

    def get(self, game_id: str) -> Optional[GameRecord]:
        """Return the record with *game_id* or ``None`` if not found."""
        index = self._index_of(game_id)
        return None if index is None else self._games[index]

    def subscribe(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Call *callback* after every successful mutation.

        Returns a function that removes the subscription.
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    async def add_game(
        self,
        title: str,
        status: Status | str = Status.BACKLOG,
        rating: Optional[int] = None,
    ) -> Optional[GameRecord]:
        """Add a new game, fetching its cover first.

        Returns the new record, or ``None`` if the input was rejected.
        """
        clean = (title or "").strip()
        if not clean:
            return self._reject(MSG_TITLE_REQUIRED)
        if self._has_title(clean):
            return self._reject(MSG_DUPLICATE_TITLE)
        if not is_valid_rating(rating):
            return self._reject(MSG_INVALID_RATING)
        if not is_valid_status(status):
            return self._reject(MSG_INVALID_STATUS)
        status = Status(status)

        cover = await self._covers.resolve_cover(clean)

        # Another add may have finished while the lookup was in flight.
        if self._has_title(clean):
            return self._reject(MSG_DUPLICATE_TITLE)

        now = self._clock()
        game = GameRecord(
            title=clean,
            status=status,
            rating=rating,
            image_url=cover or PLACEHOLDER_IMAGE,
            created_at=now,
            updated_at=now,
            last_played_at=now if status is Status.PLAYED else None,
        )
        if not self._commit([*self._games, game]):
            return None
        logger.debug("Added %r (%s)", game.title, game.id)
        return game

    def update_game(self, game_id: str, patch: GamePatch) -> Optional[GameRecord]:
        """Apply *patch* to the record with *game_id*.

        Returns the updated record, or ``None`` when the id is unknown or the
        patch was rejected. Nothing is changed on rejection.
        """
        index = self._index_of(game_id)
        if index is None:
            return None
        current = self._games[index]
        changes = patch.changes()
        rating = changes.get("rating", current.rating)
        status = changes.get("status", current.status)

        if not is_valid_rating(rating):
            return self._reject(MSG_INVALID_RATING)
        if not is_valid_status(status):
            return self._reject(MSG_INVALID_STATUS)
        status = Status(status)

        now = self._clock()
        last_played_at = current.last_played_at
        if current.status is not Status.PLAYED and status is Status.PLAYED:
            last_played_at = now

        updated = dataclasses.replace(
            current,
            status=status,
            rating=rating,
            updated_at=max(now, current.updated_at),
            last_played_at=last_played_at,
        )
        if not self._commit(self._replaced(index, updated)):
            return None
        return updated

    def remove_game(self, game_id: str) -> bool:
        """Remove the record with *game_id*.

        Returns ``True`` if a record was removed. A missing id is not an error.
        """
        remaining = [g for g in self._games if g.id != game_id]
        removed = len(remaining) < len(self._games)
        if not self._commit(remaining):
            return False
        return removed

    async def refresh_cover(self, game_id: str) -> Optional[GameRecord]:
        """Look up the cover again and store it on the record.

        The record may be removed while the lookup runs; in that case nothing
        is written and ``None`` is returned.
        """
        game = self.get(game_id)
        if game is None:
            return None
        cover = await self._covers.resolve_cover(game.title)

        index = self._index_of(game_id)
        if index is None:
            logger.debug("Dropping cover for removed record %s", game_id)
            return None
        current = self._games[index]
        if not cover or cover == current.image_url:
            return current
        updated = dataclasses.replace(
            current,
            image_url=cover,
            updated_at=max(self._clock(), current.updated_at),
        )
        if not self._commit(self._replaced(index, updated)):
            return None
        return updated

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _index_of(self, game_id: str) -> Optional[int]:
        for i, game in enumerate(self._games):
            if game.id == game_id:
                return i
        return None

    def _has_title(self, title: str) -> bool:
        folded = title.casefold()
        return any(g.title.casefold() == folded for g in self._games)

    def _reject(self, message: str) -> None:
        self._notify(message)
        return None

    def _replaced(self, index: int, game: GameRecord) -> list[GameRecord]:
        games = list(self._games)
        games[index] = game
        return games

    def _commit(self, games: list[GameRecord]) -> bool:
        """Persist *games* and make them the collection; ``False`` if saving failed."""
        try:
            save_collection(self._db, games, self._key)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Could not save collection: %s", exc)
            self._notify(MSG_SAVE_FAILED)
            return False
        self._games = games
        for callback in list(self._listeners):
            callback()
        return True
