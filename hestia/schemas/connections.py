from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from hestia.schemas.base import CamelRequest
from hestia.schemas.enums import ConnectionStatus


class ConnectRequest(CamelRequest):
    target_username: str = Field(..., alias="targetUsername", min_length=1)


class ConnectRespondRequest(CamelRequest):
    # username of the user who sent the request
    requester_id: str = Field(..., alias="requesterId", min_length=1)
    accepted: bool


class DisconnectRequest(CamelRequest):
    target_username: str = Field(..., alias="targetUsername", min_length=1)


class ConnectionStatusResponse(BaseModel):
    status: ConnectionStatus


class ConnectionUser(BaseModel):
    username: str
    profile_pic: Optional[str] = None


class MessageSendRequest(CamelRequest):
    recipient: str = Field(..., min_length=1)
    message: str = Field(..., min_length=1, max_length=2000)


class MessageOut(BaseModel):
    id: int
    sender_username: str
    message_text: str
    timestamp: datetime
    is_sender: bool


class ChatOut(BaseModel):
    username: str
    last_message_time: datetime
