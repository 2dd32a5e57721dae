"""
Configuration Management

Centralized configuration management using environment variables
with proper validation and type safety.
"""

import os
from typing import List
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv


# Load environment variables from .env in project root, then from the working directory
_project_root = Path(__file__).resolve().parent.parent
_env_path = _project_root / ".env"
if _env_path.exists():
    load_dotenv(dotenv_path=str(_env_path))
load_dotenv()


@dataclass
class MongoConfig:
    """MongoDB configuration"""
    uri: str
    db_name: str = "jobtracker"
    collection: str = "applications"
    timeout_ms: int = 5000  # Server selection timeout; a stalled store call fails after this


@dataclass
class ServerConfig:
    """HTTP server configuration"""
    host: str = "0.0.0.0"
    port: int = 3001
    cors_origins: List[str] = field(default_factory=lambda: ["*"])


@dataclass
class BroadcastConfig:
    """Live update fan-out configuration"""
    send_timeout: float = 5.0  # Seconds before a slow observer is dropped
    max_pending: int = 100  # Per-observer queue bound
    sync_admissions: bool = False  # Publish records admitted by sync as NEW_APPLICATION


@dataclass
class Config:
    """Main application configuration"""

    # MongoDB configuration
    mongo: MongoConfig

    # Server configuration
    server: ServerConfig = field(default_factory=ServerConfig)

    # Broadcast hub
    broadcast: BroadcastConfig = field(default_factory=BroadcastConfig)

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FORMAT: str = os.getenv(
        "LOG_FORMAT",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    @classmethod
    def from_env(cls) -> "Config":
        """
        Create configuration from environment variables.

        Returns:
            Configured Config instance

        Raises:
            ValueError: If required environment variables are missing or malformed
        """
        mongodb_uri = os.getenv("MONGODB_URI")
        if not mongodb_uri:
            raise ValueError("MONGODB_URI environment variable is required")

        cors_origins = [
            o.strip().rstrip("/")
            for o in os.getenv("CORS_ORIGINS", "*").split(",")
            if o.strip()
        ]

        return cls(
            mongo=MongoConfig(
                uri=mongodb_uri,
                db_name=os.getenv("MONGODB_DB_NAME") or "jobtracker",
                collection=os.getenv("MONGODB_COLLECTION") or "applications",
                timeout_ms=int(os.getenv("MONGODB_TIMEOUT_MS", "5000")),
            ),
            server=ServerConfig(
                host=os.getenv("SERVER_HOST", "0.0.0.0"),
                # Hosting platforms provide PORT; fall back to SERVER_PORT
                port=int(os.getenv("PORT") or os.getenv("SERVER_PORT", "3001")),
                cors_origins=cors_origins or ["*"],
            ),
            broadcast=BroadcastConfig(
                send_timeout=float(os.getenv("BROADCAST_SEND_TIMEOUT", "5.0")),
                max_pending=int(os.getenv("BROADCAST_MAX_PENDING", "100")),
                sync_admissions=os.getenv("BROADCAST_SYNC_ADMISSIONS", "false").lower() == "true",
            ),
            LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
            LOG_FORMAT=os.getenv(
                "LOG_FORMAT",
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            ),
        )


def get_config() -> Config:
    """
    Get configuration from environment variables.

    Returns:
        Configuration instance
    """
    return Config.from_env()
