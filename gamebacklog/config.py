"""Runtime settings read from the environment (and an optional ``.env`` file)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

DEFAULT_DB = Path.home() / ".gamebacklog" / "gamebacklog.db"
DEFAULT_PORT = 3000
DEFAULT_COVER_URL = "http://localhost:3000"


@dataclass
class Settings:
    twitch_client_id: str = ""
    twitch_client_secret: str = ""
    port: int = DEFAULT_PORT
    db_path: Path = DEFAULT_DB
    cover_url: str = DEFAULT_COVER_URL

    @property
    def has_twitch_credentials(self) -> bool:
        return bool(self.twitch_client_id and self.twitch_client_secret)

    @classmethod
    def from_env(cls, dotenv: bool = True) -> Settings:
        """Build settings from environment variables.

        ``.env`` in the working directory is loaded first unless *dotenv* is
        false; variables already set in the environment win.
        """
        if dotenv:
            load_dotenv(find_dotenv(usecwd=True))
        port = os.environ.get("PORT", "")
        return cls(
            twitch_client_id=os.environ.get("TWITCH_CLIENT_ID", ""),
            twitch_client_secret=os.environ.get("TWITCH_CLIENT_SECRET", ""),
            port=int(port) if port.isdigit() else DEFAULT_PORT,
            db_path=Path(os.environ.get("GAMEBACKLOG_DB") or DEFAULT_DB),
            cover_url=os.environ.get("GAMEBACKLOG_COVER_URL") or DEFAULT_COVER_URL,
        )
