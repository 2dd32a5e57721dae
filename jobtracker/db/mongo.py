"""
MongoDB database connection and helpers.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import ConnectionFailure

from jobtracker.config import Config
from jobtracker.utils.exceptions import StoreUnavailableError


_client: Optional[MongoClient] = None

# Records carry their own string `id`; Mongo's ObjectId never leaves the store
RECORD_PROJECTION = {"_id": 0}


def get_database(config: Config) -> Database:
    """Get MongoDB database instance, creating the shared client on first use."""
    global _client
    if _client is None:
        _client = MongoClient(
            config.mongo.uri,
            serverSelectionTimeoutMS=config.mongo.timeout_ms,
        )
    return _client.get_database(config.mongo.db_name)


def get_applications_collection(config: Config) -> Collection:
    return get_database(config)[config.mongo.collection]


def close_database() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None


def ensure_indexes(col: Collection) -> None:
    """Indexes backing the duplicate lookup, newest-first listing and id uniqueness."""
    col.create_index([("company", ASCENDING), ("position", ASCENDING), ("jobUrl", ASCENDING)])
    col.create_index([("createdAt", DESCENDING)])
    col.create_index("id", unique=True)


def strip_mongo_id(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Return a copy of the document without Mongo's '_id'. Returns None if doc is None."""
    if doc is None:
        return None
    d = dict(doc)
    d.pop("_id", None)
    return d


@contextmanager
def store_errors(action: str) -> Iterator[None]:
    """Translate driver connectivity failures into StoreUnavailableError."""
    try:
        yield
    except ConnectionFailure as e:
        raise StoreUnavailableError(f"MongoDB unreachable while {action}: {e}", "mongo") from e
