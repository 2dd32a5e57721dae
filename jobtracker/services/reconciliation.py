"""
Sync reconciliation.

Compares a client's cached snapshot with the store: returns the stored records
the client lacks and admits the client records the store lacks. Admission is
idempotent; a record whose id is already stored, or which duplicates a stored
identity, is skipped without error.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from pymongo import DESCENDING
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError

from jobtracker.db.mongo import RECORD_PROJECTION, store_errors
from jobtracker.services.broadcast_hub import ChangeEvent, ChangeListener
from jobtracker.services.duplicate_detector import DuplicateIndex, find_store_duplicate
from jobtracker.services.record_validator import validate_application_data
from jobtracker.utils.datetime_utils import now_iso
from jobtracker.utils.exceptions import ValidationError
from jobtracker.utils.logger import get_logger
from jobtracker.utils.metrics import SYNC_ADMITTED

logger = get_logger(__name__)


@dataclass
class SyncResult:
    missing_from_client: List[Dict[str, Any]] = field(default_factory=list)
    admitted_from_client: List[Dict[str, Any]] = field(default_factory=list)
    skipped: int = 0

    @property
    def admitted_count(self) -> int:
        return len(self.admitted_from_client)


def _client_id(record: Any) -> Optional[str]:
    if not isinstance(record, dict):
        return None
    value = record.get("id")
    if isinstance(value, str) and value.strip():
        return value
    return None


class ReconciliationEngine:
    """Merges client snapshots into the store"""

    def __init__(self, col: Collection, write_lock: Optional[threading.Lock] = None):
        self.col = col
        # Shared with the create path so check-then-insert never interleaves
        self.write_lock = write_lock or threading.Lock()

    def _load_store(self) -> List[Dict[str, Any]]:
        with store_errors("loading applications for sync"):
            return list(self.col.find({}, RECORD_PROJECTION).sort("createdAt", DESCENDING))

    def reconcile(
        self, client_snapshot: Iterable[Any], notify: Optional[ChangeListener] = None
    ) -> SyncResult:
        """
        Reconcile one client snapshot.

        `notify`, when given, receives a NEW_APPLICATION event for each admitted
        record while the write lock is held.
        """
        client_records = list(client_snapshot or [])
        client_ids = {cid for cid in map(_client_id, client_records) if cid}

        store_records = self._load_store()
        store_ids = {r.get("id") for r in store_records}

        result = SyncResult(
            missing_from_client=[r for r in store_records if r.get("id") not in client_ids],
        )

        candidates = []
        for record in client_records:
            cid = _client_id(record)
            if cid is None:
                logger.warning("[Sync] Skipping client record without an id")
                result.skipped += 1
            elif cid not in store_ids:
                candidates.append(record)

        # Stored duplicates are checked live per candidate; the index only covers this batch
        index = DuplicateIndex()
        for candidate in candidates:
            admitted = self._admit(candidate, index, notify)
            if admitted is None:
                result.skipped += 1
            else:
                result.admitted_from_client.append(admitted)

        if result.admitted_count:
            SYNC_ADMITTED.inc(result.admitted_count)
        logger.info(
            f"[Sync] client={len(client_records)} store={len(store_records)} "
            f"missing_from_client={len(result.missing_from_client)} "
            f"admitted={result.admitted_count} skipped={result.skipped}"
        )
        return result

    def _admit(
        self,
        client_record: Dict[str, Any],
        index: DuplicateIndex,
        notify: Optional[ChangeListener] = None,
    ) -> Optional[Dict[str, Any]]:
        """Validate, re-check against the live store and insert one client record."""
        record_id = client_record["id"]
        try:
            canonical = validate_application_data(client_record)
        except ValidationError as e:
            logger.warning(f"[Sync] Skipping invalid client record {record_id}: {e.message}")
            return None

        if canonical in index:
            logger.info(f"[Sync] Skipping {record_id}: duplicate within this batch")
            return None

        with self.write_lock, store_errors(f"admitting {record_id}"):
            if self.col.find_one({"id": record_id}, RECORD_PROJECTION) is not None:
                logger.info(f"[Sync] Skipping {record_id}: id already stored")
                return None
            if find_store_duplicate(self.col, canonical) is not None:
                logger.info(f"[Sync] Skipping {record_id}: duplicate of a stored application")
                return None

            # Client timestamps are not trusted
            now = now_iso()
            record = {"id": record_id, **canonical, "createdAt": now, "updatedAt": now}
            try:
                self.col.insert_one(dict(record))
            except DuplicateKeyError:
                logger.info(f"[Sync] Skipping {record_id}: id inserted concurrently")
                return None
            if notify is not None:
                notify(ChangeEvent.created(record))

        index.add(record)
        return record
