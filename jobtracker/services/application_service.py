"""
Application Service

Handles job application CRUD and sync operations with MongoDB.
"""

import threading
import uuid
from typing import Any, Dict, Iterable, List, Optional

from pymongo import DESCENDING
from pymongo.collection import Collection

from jobtracker.config import Config
from jobtracker.db.mongo import (
    RECORD_PROJECTION,
    ensure_indexes,
    get_applications_collection,
    store_errors,
)
from jobtracker.services.broadcast_hub import ChangeEvent, ChangeListener
from jobtracker.services.duplicate_detector import find_store_duplicate
from jobtracker.services.reconciliation import ReconciliationEngine, SyncResult
from jobtracker.services.record_validator import sanitize_update_fields, validate_application_data
from jobtracker.utils.datetime_utils import now_iso
from jobtracker.utils.exceptions import ConflictError, NotFoundError
from jobtracker.utils.logger import get_logger

logger = get_logger(__name__)


class ApplicationService:
    """Service for managing job application records"""

    def __init__(self, config: Config, col: Optional[Collection] = None):
        self.config = config
        self.col = col if col is not None else get_applications_collection(config)
        self.write_lock = threading.Lock()
        self.reconciler = ReconciliationEngine(self.col, self.write_lock)

    def ensure_store(self) -> int:
        """Create indexes and return the record count. Raises StoreUnavailableError if unreachable."""
        with store_errors("initializing the applications collection"):
            ensure_indexes(self.col)
            count = self.col.count_documents({})
        logger.info(f"[ApplicationService] Store ready: {count} application(s)")
        return count

    def list_applications(self) -> List[Dict[str, Any]]:
        """All applications, newest first."""
        with store_errors("listing applications"):
            return list(self.col.find({}, RECORD_PROJECTION).sort("createdAt", DESCENDING))

    def count_applications(self) -> int:
        with store_errors("counting applications"):
            return self.col.count_documents({})

    def create_application(self, payload: Any, notify: Optional[ChangeListener] = None) -> Dict[str, Any]:
        """
        Validate and store a new application.

        `notify` is called with the NEW_APPLICATION event while the write lock
        is still held, so listeners see changes in store order.

        Raises:
            ValidationError: If the payload is invalid
            ConflictError: If an identity-duplicate is already stored
        """
        job_data = validate_application_data(payload)

        with self.write_lock, store_errors("saving application"):
            if find_store_duplicate(self.col, job_data) is not None:
                logger.info(
                    f"[ApplicationService] Duplicate rejected: "
                    f"{job_data['company']!r} / {job_data['position']!r}"
                )
                raise ConflictError("This application already exists", "ApplicationService")

            now = now_iso()
            application = {
                "id": str(uuid.uuid4()),
                **job_data,
                "createdAt": now,
                "updatedAt": now,
            }
            self.col.insert_one(dict(application))
            if notify is not None:
                notify(ChangeEvent.created(application))

        logger.info(f"[ApplicationService] Application saved: {application['id']}")
        return application

    def update_application(
        self, application_id: str, updates: Any, notify: Optional[ChangeListener] = None
    ) -> Dict[str, Any]:
        """
        Overwrite fields of a stored application and refresh updatedAt.

        Company/position are not re-validated here.

        Raises:
            ValidationError: If the update is not an object or names an invalid field
            NotFoundError: If no application has this id
        """
        fields = sanitize_update_fields(updates)

        with self.write_lock, store_errors(f"updating {application_id}"):
            fields["updatedAt"] = now_iso()
            result = self.col.update_one({"id": application_id}, {"$set": fields})
            if result.matched_count == 0:
                raise NotFoundError(f"Application {application_id} not found", "ApplicationService")
            updated = self.col.find_one({"id": application_id}, RECORD_PROJECTION)
            if updated is None:
                # Deleted between the update and the read
                raise NotFoundError(f"Application {application_id} not found", "ApplicationService")
            if notify is not None:
                notify(ChangeEvent.updated(updated))

        logger.info(f"[ApplicationService] Application updated: {application_id} ({len(fields) - 1} field(s))")
        return updated

    def delete_application(self, application_id: str, notify: Optional[ChangeListener] = None) -> None:
        """
        Raises:
            NotFoundError: If no application has this id
        """
        with self.write_lock, store_errors(f"deleting {application_id}"):
            result = self.col.delete_one({"id": application_id})
            if result.deleted_count == 0:
                raise NotFoundError(f"Application {application_id} not found", "ApplicationService")
            if notify is not None:
                notify(ChangeEvent.deleted(application_id))
        logger.info(f"[ApplicationService] Application deleted: {application_id}")

    def sync_applications(
        self, client_snapshot: Iterable[Any], notify: Optional[ChangeListener] = None
    ) -> SyncResult:
        return self.reconciler.reconcile(client_snapshot, notify)
