"""
Job application request/response schemas.

Records are passed through as plain dicts: partial updates may store
arbitrary fields, so the response models do not constrain them.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class ApplicationListResponse(BaseModel):
    success: bool = True
    applications: List[Dict[str, Any]]


class ApplicationResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any]
    message: Optional[str] = None


class SyncResponse(BaseModel):
    success: bool = True
    newApplications: List[Dict[str, Any]]  # Stored records the client did not have
    admittedApplications: List[Dict[str, Any]] = []  # Client records added to the store
    syncedCount: int


class DeleteApplicationResponse(BaseModel):
    success: bool = True
    message: str


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    applications: int
    database: str = "MongoDB"


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    message: Optional[str] = None


__all__ = [
    "ApplicationListResponse",
    "ApplicationResponse",
    "SyncResponse",
    "DeleteApplicationResponse",
    "HealthResponse",
    "ErrorResponse",
]
