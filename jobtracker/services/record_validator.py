"""
Application payload validation.

Sanitizes untrusted key-value payloads into canonical application records
(everything except `id`, `createdAt` and `updatedAt`).
"""

from typing import Any, Dict, List, Mapping, Optional

from jobtracker.services.text_normalizer import format_job_description
from jobtracker.utils.datetime_utils import today_iso
from jobtracker.utils.exceptions import ValidationError

DEFAULT_STATUS = "Applied"

TEXT_FIELDS = ("company", "position", "location", "salary", "jobUrl", "notes")

# Fields a partial update may never overwrite
IMMUTABLE_FIELDS = ("_id", "id", "createdAt")


def _text(payload: Mapping[str, Any], name: str) -> str:
    value = payload.get(name)
    if value is None:
        return ""
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise ValidationError(f"Field '{name}' must be text", "validator")
    return str(value).strip()


def validate_application_data(payload: Any, today: Optional[str] = None) -> Dict[str, Any]:
    """
    Validate and sanitize an incoming application payload.

    Args:
        payload: Untrusted mapping (request body or client-held record)
        today: Override for the appliedDate default (ISO date)

    Returns:
        Canonical record with every data field present

    Raises:
        ValidationError: If the payload is not a mapping, a field is not text,
            or both company and position are empty
    """
    if not isinstance(payload, Mapping):
        raise ValidationError("Application payload must be an object", "validator")

    sanitized = {name: _text(payload, name) for name in TEXT_FIELDS}
    sanitized["description"] = format_job_description(_text(payload, "description"))
    sanitized["appliedDate"] = _text(payload, "appliedDate") or today or today_iso()
    sanitized["status"] = _text(payload, "status") or DEFAULT_STATUS

    if not sanitized["company"] and not sanitized["position"]:
        raise ValidationError("Missing required fields: company or position", "validator")

    return sanitized


def sanitize_update_fields(updates: Any) -> Dict[str, Any]:
    """Drop immutable fields from a partial update; other fields are stored as given."""
    if not isinstance(updates, Mapping):
        raise ValidationError("Update payload must be an object", "validator")

    cleaned = {}
    for key, value in updates.items():
        if key in IMMUTABLE_FIELDS:
            continue
        if not isinstance(key, str) or not key or key.startswith("$") or "." in key:
            raise ValidationError(f"Invalid field name: {key!r}", "validator")
        cleaned[key] = value
    return cleaned


def client_snapshot_from_payload(payload: Any) -> List[Any]:
    """The `frontendApplications` list of a sync request; a missing list is empty.

    Entries are returned as given so that malformed ones can be skipped one by one.
    """
    if payload is None:
        return []
    if not isinstance(payload, Mapping):
        raise ValidationError("Sync payload must be an object", "validator")
    records = payload.get("frontendApplications")
    if records is None:
        return []
    if not isinstance(records, list):
        raise ValidationError("frontendApplications must be a list", "validator")
    return records
