"""Load and save the game collection through a key/value slot."""

from __future__ import annotations

import json
import logging
from typing import Iterable

from gamebacklog.db import Database
from gamebacklog.models import GameRecord

logger = logging.getLogger(__name__)

STORAGE_KEY = "gbr.games.v1"


def load_collection(db: Database, key: str = STORAGE_KEY) -> list[GameRecord]:
    """Return the stored collection, or an empty list if it is missing or corrupt.

    Entries that cannot be decoded are skipped; nothing is raised.
    """
    try:
        raw = db.get(key)
    except Exception as exc:  # noqa: BLE001
        logger.warning("Could not read slot %r: %s", key, exc)
        return []
    if raw is None:
        return []

    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        logger.warning("Discarding unreadable collection in %r: %s", key, exc)
        return []
    if not isinstance(data, list):
        logger.warning("Discarding collection in %r: expected a list", key)
        return []

    records: list[GameRecord] = []
    seen: set[str] = set()
    for entry in data:
        try:
            record = GameRecord.from_dict(entry)
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            logger.warning("Skipping stored entry %r: %s", entry, exc)
            continue
        if record.id in seen:
            logger.warning("Skipping duplicate id %s", record.id)
            continue
        seen.add(record.id)
        records.append(record)
    return records


def save_collection(
    db: Database, records: Iterable[GameRecord], key: str = STORAGE_KEY
) -> None:
    """Serialise the whole collection and write it with one ``set`` call."""
    payload = json.dumps([r.to_dict() for r in records])
    db.set(key, payload.encode("utf-8"))
