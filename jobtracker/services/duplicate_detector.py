"""
Identity-duplicate detection.

Two applications are the same identity when company and position match
case-insensitively and their job URLs are equal, where a missing URL on both
sides counts as equal.
"""

import re
from typing import Any, Dict, Iterable, Mapping, Optional, Set, Tuple

from pymongo.collection import Collection

from jobtracker.db.mongo import RECORD_PROJECTION, strip_mongo_id


def _fold(value: Any) -> str:
    return str(value or "").strip().lower()


def _url(record: Mapping[str, Any]) -> str:
    return str(record.get("jobUrl") or "").strip()


def identity_key(record: Mapping[str, Any]) -> Tuple[str, str, str]:
    """(lowercase company, lowercase position, jobUrl) for a record."""
    return (_fold(record.get("company")), _fold(record.get("position")), _url(record))


def is_identity_duplicate(candidate: Mapping[str, Any], existing: Mapping[str, Any]) -> bool:
    if _fold(candidate.get("company")) != _fold(existing.get("company")):
        return False
    if _fold(candidate.get("position")) != _fold(existing.get("position")):
        return False
    # Covers the both-absent case: two empty URLs compare equal
    return _url(candidate) == _url(existing)


class DuplicateIndex:
    """In-memory identity index over a set of records."""

    def __init__(self, records: Iterable[Mapping[str, Any]] = ()):
        self._keys: Set[Tuple[str, str, str]] = set()
        for record in records:
            self.add(record)

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, record: Mapping[str, Any]) -> bool:
        return identity_key(record) in self._keys

    def add(self, record: Mapping[str, Any]) -> None:
        self._keys.add(identity_key(record))


def _exact_ci(value: Any) -> Dict[str, str]:
    return {"$regex": f"^{re.escape(str(value or '').strip())}$", "$options": "i"}


def find_store_duplicate(col: Collection, candidate: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Look up an identity-duplicate of `candidate` in the live store.

    The query narrows by company/position; the URL rule is applied here so that
    missing and empty URLs are treated alike.
    """
    query = {
        "company": _exact_ci(candidate.get("company")),
        "position": _exact_ci(candidate.get("position")),
    }
    for doc in col.find(query, RECORD_PROJECTION):
        if is_identity_duplicate(candidate, doc):
            return strip_mongo_id(doc)
    return None
