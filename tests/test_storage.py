"""Tests for gamebacklog.storage (load/save of the collection)."""

import json

import pytest

from gamebacklog.db import Database
from gamebacklog.models import GameRecord, Status
from gamebacklog.storage import STORAGE_KEY, load_collection, save_collection


@pytest.fixture()
def db(tmp_path):
    database = Database(tmp_path / "test.db")
    yield database
    database.close()


class TestLoadCollection:
    def test_missing_slot_is_empty(self, db):
        assert load_collection(db) == []

    def test_malformed_json_is_empty(self, db):
        db.set(STORAGE_KEY, b"{not json")
        assert load_collection(db) == []

    def test_invalid_utf8_is_empty(self, db):
        db.set(STORAGE_KEY, b"\xff\xfe\x00")
        assert load_collection(db) == []

    def test_non_list_is_empty(self, db):
        db.set(STORAGE_KEY, b'{"id": "x"}')
        assert load_collection(db) == []

    def test_null_is_empty(self, db):
        db.set(STORAGE_KEY, b"null")
        assert load_collection(db) == []

    def test_bad_entries_are_skipped(self, db):
        payload = [
            {"id": "1", "title": "Good"},
            {"id": "2", "title": "Bad", "status": "Wishlist"},
            {"id": "3", "title": "Out of range", "rating": 42},
            "junk",
            {"id": "1", "title": "Same id"},
        ]
        db.set(STORAGE_KEY, json.dumps(payload).encode())
        games = load_collection(db)
        assert [g.title for g in games] == ["Good"]


class TestSaveCollection:
    def test_round_trip(self, db):
        games = [
            GameRecord(title="Hades", status=Status.PLAYED, rating=5),
            GameRecord(title="Celeste"),
        ]
        save_collection(db, games)
        assert load_collection(db) == games

    def test_writes_json_array(self, db):
        save_collection(db, [GameRecord(id="a", title="Tetris")])
        data = json.loads(db.get(STORAGE_KEY))
        assert data[0]["id"] == "a"
        assert data[0]["status"] == "Backlog"

    def test_custom_key(self, db):
        save_collection(db, [GameRecord(title="Tetris")], key="other")
        assert load_collection(db) == []
        assert len(load_collection(db, key="other")) == 1
