from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from hestia.schemas.base import CamelRequest


class NotificationCreateRequest(CamelRequest):
    recipient: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1)
    action_type: str = Field(..., alias="actionType", min_length=1, max_length=50)


class NotificationOut(BaseModel):
    id: int
    sender_username: str
    message: str
    timestamp: datetime
    action_type: str
    profile_pic: Optional[str] = None
