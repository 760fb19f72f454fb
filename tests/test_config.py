"""Tests for gamebacklog.config (Settings)."""

from pathlib import Path

from gamebacklog.config import DEFAULT_COVER_URL, DEFAULT_DB, DEFAULT_PORT, Settings


class TestSettingsFromEnv:
    def test_defaults(self, monkeypatch):
        for name in (
            "TWITCH_CLIENT_ID",
            "TWITCH_CLIENT_SECRET",
            "PORT",
            "GAMEBACKLOG_DB",
            "GAMEBACKLOG_COVER_URL",
        ):
            monkeypatch.delenv(name, raising=False)
        settings = Settings.from_env(dotenv=False)
        assert settings.port == DEFAULT_PORT
        assert settings.db_path == DEFAULT_DB
        assert settings.cover_url == DEFAULT_COVER_URL
        assert settings.has_twitch_credentials is False

    def test_reads_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TWITCH_CLIENT_ID", "id")
        monkeypatch.setenv("TWITCH_CLIENT_SECRET", "secret")
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("GAMEBACKLOG_DB", str(tmp_path / "g.db"))
        monkeypatch.setenv("GAMEBACKLOG_COVER_URL", "http://covers.test")
        settings = Settings.from_env(dotenv=False)
        assert settings.has_twitch_credentials is True
        assert settings.port == 8080
        assert settings.db_path == Path(tmp_path / "g.db")
        assert settings.cover_url == "http://covers.test"

    def test_bad_port_falls_back(self, monkeypatch):
        monkeypatch.setenv("PORT", "http")
        assert Settings.from_env(dotenv=False).port == DEFAULT_PORT

    def test_loads_dotenv_file(self, monkeypatch, tmp_path):
        monkeypatch.delenv("TWITCH_CLIENT_ID", raising=False)
        monkeypatch.chdir(tmp_path)
        (tmp_path / ".env").write_text("TWITCH_CLIENT_ID=from-file\n")
        assert Settings.from_env().twitch_client_id == "from-file"
