"""Tests for environment-driven configuration."""

import pytest

from jobtracker.config import Config


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "MONGODB_URI",
        "MONGODB_DB_NAME",
        "MONGODB_COLLECTION",
        "MONGODB_TIMEOUT_MS",
        "PORT",
        "SERVER_PORT",
        "SERVER_HOST",
        "CORS_ORIGINS",
        "BROADCAST_SEND_TIMEOUT",
        "BROADCAST_MAX_PENDING",
        "BROADCAST_SYNC_ADMISSIONS",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestConfigFromEnv:
    def test_requires_mongodb_uri(self, clean_env):
        with pytest.raises(ValueError, match="MONGODB_URI"):
            Config.from_env()

    def test_defaults(self, clean_env):
        clean_env.setenv("MONGODB_URI", "mongodb://db:27017")
        config = Config.from_env()

        assert config.mongo.uri == "mongodb://db:27017"
        assert config.mongo.db_name == "jobtracker"
        assert config.mongo.collection == "applications"
        assert config.mongo.timeout_ms == 5000
        assert config.server.port == 3001
        assert config.server.cors_origins == ["*"]
        assert config.broadcast.send_timeout == 5.0
        assert config.broadcast.max_pending == 100
        assert config.broadcast.sync_admissions is False
        assert config.LOG_LEVEL == "INFO"

    def test_overrides(self, clean_env):
        clean_env.setenv("MONGODB_URI", "mongodb://db:27017")
        clean_env.setenv("MONGODB_DB_NAME", "tracker_test")
        clean_env.setenv("PORT", "8080")
        clean_env.setenv("CORS_ORIGINS", "http://localhost:5173/, https://jobs.example.com")
        clean_env.setenv("BROADCAST_SYNC_ADMISSIONS", "TRUE")
        clean_env.setenv("BROADCAST_MAX_PENDING", "10")
        config = Config.from_env()

        assert config.mongo.db_name == "tracker_test"
        assert config.server.port == 8080
        assert config.server.cors_origins == ["http://localhost:5173", "https://jobs.example.com"]
        assert config.broadcast.sync_admissions is True
        assert config.broadcast.max_pending == 10

    def test_server_port_used_when_port_unset(self, clean_env):
        clean_env.setenv("MONGODB_URI", "mongodb://db:27017")
        clean_env.setenv("SERVER_PORT", "9000")
        assert Config.from_env().server.port == 9000
