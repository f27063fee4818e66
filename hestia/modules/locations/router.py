from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hestia.core.auth import get_current_username
from hestia.core.db import get_db
from hestia.schemas.base import SuccessResponse
from hestia.schemas.locations import (
    LocationSettingsRequest,
    LocationSettingsResponse,
    LocationUpdateRequest,
    SharedLocation,
    LocationPermissionRequest,
    LocationPermissionEntry,
)
from . import service

router = APIRouter(prefix="/api", tags=["locations"])


# ------------------------------------------------------------------
# SETTINGS
# ------------------------------------------------------------------

@router.post("/location-settings", response_model=SuccessResponse)
def save_settings(
    payload: LocationSettingsRequest,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    service.update_settings(
        db,
        username,
        payload.is_enabled,
        payload.sharing_mode,
        payload.duration_minutes,
    )
    return {"success": True}


@router.get("/location-settings/current", response_model=LocationSettingsResponse)
def current_settings(
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    is_enabled, sharing_mode = service.get_settings(db, username)
    return {"success": True, "isEnabled": is_enabled, "sharingMode": sharing_mode}


# ------------------------------------------------------------------
# SAMPLES
# ------------------------------------------------------------------

@router.post("/location", response_model=SuccessResponse)
def save_location(
    payload: LocationUpdateRequest,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    service.update_location(
        db,
        username,
        payload.latitude,
        payload.longitude,
        payload.accuracy,
    )
    return {"success": True, "message": "Location updated successfully"}


@router.get("/connected-users-locations", response_model=list[SharedLocation])
def shared_locations(
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    return service.connected_locations(db, username)


# ------------------------------------------------------------------
# PERMISSIONS
# ------------------------------------------------------------------

@router.post("/location-permissions", response_model=SuccessResponse)
def save_permission(
    payload: LocationPermissionRequest,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    service.set_location_permission(db, username, payload.viewer_username, payload.approved)
    verb = "shared with" if payload.approved else "hidden from"
    return {"success": True, "message": f"Location {verb} {payload.viewer_username}"}


@router.get("/location-permissions", response_model=list[LocationPermissionEntry])
def list_permissions(
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    return service.list_location_permissions(db, username)
