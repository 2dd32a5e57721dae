import asyncio
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from starlette.concurrency import run_in_threadpool

from jobtracker.schemas.applications import (
    ApplicationListResponse,
    ApplicationResponse,
    DeleteApplicationResponse,
    ErrorResponse,
    SyncResponse,
)
from jobtracker.services.application_service import ApplicationService
from jobtracker.services.broadcast_hub import BroadcastHub
from jobtracker.services.container import config, get_application_service, get_broadcast_hub
from jobtracker.services.record_validator import client_snapshot_from_payload
from jobtracker.utils.exceptions import JobTrackerError
from jobtracker.utils.logger import get_logger

logger = get_logger(__name__)

# Job application CRUD and sync endpoints
router = APIRouter(prefix="/api/applications", tags=["Applications"])

_errors = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    409: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}

_SYNC_EXAMPLE = {
    "frontendApplications": [
        {"id": "7c1f6a0e-2b1d-4f7e-9d2a-4f0b3c9e8a11", "company": "Acme", "position": "Engineer"}
    ]
}


def _internal_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"[API] Failed to {action}: {str(e)}", exc_info=True)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}",
    )


@router.get("", response_model=ApplicationListResponse, responses=_errors)
async def list_applications(service: ApplicationService = Depends(get_application_service)):
    """All applications, newest first."""
    try:
        applications = await run_in_threadpool(service.list_applications)
    except JobTrackerError:
        raise
    except Exception as e:
        raise _internal_error("fetch applications", e)
    return ApplicationListResponse(applications=applications)


@router.post("/sync", response_model=SyncResponse, responses=_errors)
async def sync_applications(
    payload: Any = Body(None, examples=[_SYNC_EXAMPLE]),
    service: ApplicationService = Depends(get_application_service),
    hub: BroadcastHub = Depends(get_broadcast_hub),
):
    """
    Reconcile a client's cached records with the store.

    Returns the stored records the client is missing and admits client-only
    records that do not duplicate a stored application. Malformed entries are
    skipped.
    """
    notify = hub.threadsafe_listener(asyncio.get_running_loop()) if config.broadcast.sync_admissions else None
    try:
        client_snapshot = client_snapshot_from_payload(payload)
        result = await run_in_threadpool(service.sync_applications, client_snapshot, notify)
    except JobTrackerError:
        raise
    except Exception as e:
        raise _internal_error("sync applications", e)

    return SyncResponse(
        newApplications=result.missing_from_client,
        admittedApplications=result.admitted_from_client,
        syncedCount=result.admitted_count,
    )


@router.post("", response_model=ApplicationResponse, responses=_errors)
async def create_application(
    payload: Any = Body(None),
    service: ApplicationService = Depends(get_application_service),
    hub: BroadcastHub = Depends(get_broadcast_hub),
):
    """
    Create a job application.

    Rejects payloads that are not objects or lack both company and position
    (400) and identity-duplicates of a stored application (409).
    """
    try:
        if isinstance(payload, dict):
            logger.info(f"[API] Received job application: {payload.get('company')!r} / {payload.get('position')!r}")
        application = await run_in_threadpool(
            service.create_application, payload, hub.threadsafe_listener(asyncio.get_running_loop())
        )
    except JobTrackerError:
        raise
    except Exception as e:
        raise _internal_error("save application", e)

    logger.info(f"[API] ✅ Application saved: {application['id']}")
    return ApplicationResponse(data=application, message="Application saved successfully")


@router.put("/{application_id}", response_model=ApplicationResponse, responses=_errors)
async def update_application(
    application_id: str,
    updates: Any = Body(None),
    service: ApplicationService = Depends(get_application_service),
    hub: BroadcastHub = Depends(get_broadcast_hub),
):
    """Overwrite fields of an application (everything except id and createdAt)."""
    try:
        application = await run_in_threadpool(
            service.update_application,
            application_id,
            updates,
            hub.threadsafe_listener(asyncio.get_running_loop()),
        )
    except JobTrackerError:
        raise
    except Exception as e:
        raise _internal_error("update application", e)

    return ApplicationResponse(data=application)


@router.delete("/{application_id}", response_model=DeleteApplicationResponse, responses=_errors)
async def delete_application(
    application_id: str,
    service: ApplicationService = Depends(get_application_service),
    hub: BroadcastHub = Depends(get_broadcast_hub),
):
    try:
        await run_in_threadpool(
            service.delete_application, application_id, hub.threadsafe_listener(asyncio.get_running_loop())
        )
    except JobTrackerError:
        raise
    except Exception as e:
        raise _internal_error("delete application", e)

    return DeleteApplicationResponse(message="Application deleted successfully")
