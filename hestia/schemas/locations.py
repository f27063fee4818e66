from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from hestia.schemas.base import CamelRequest
from hestia.schemas.enums import SharingMode


# ---------- settings ----------
class LocationSettingsRequest(CamelRequest):
    is_enabled: bool = Field(..., alias="isEnabled")
    sharing_mode: SharingMode = Field(..., alias="sharingMode")
    duration_minutes: Optional[int] = Field(None, alias="durationMinutes", gt=0)


class LocationSettingsResponse(BaseModel):
    success: bool = True
    isEnabled: bool
    sharingMode: SharingMode


# ---------- samples ----------
class LocationUpdateRequest(BaseModel):
    # range checks live in the service so direct callers get them too
    latitude: float
    longitude: float
    accuracy: Optional[float] = None


class SharedLocation(BaseModel):
    username: str
    latitude: float
    longitude: float
    accuracy: Optional[float]
    timestamp: datetime
    profile_pic: Optional[str]
    sharing_mode: SharingMode


# ---------- permissions ----------
class LocationPermissionRequest(CamelRequest):
    viewer_username: str = Field(..., alias="viewerUsername", min_length=1)
    approved: bool = True


class LocationPermissionEntry(BaseModel):
    username: str
    is_approved: bool
