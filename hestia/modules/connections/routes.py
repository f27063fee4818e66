from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from hestia.core.auth import get_current_username
from hestia.core.db import get_db
from hestia.schemas.base import SuccessResponse
from hestia.schemas.connections import (
    ConnectRequest,
    ConnectRespondRequest,
    DisconnectRequest,
    ConnectionStatusResponse,
    ConnectionUser,
    MessageSendRequest,
    MessageOut,
    ChatOut,
)
from .service import (
    request_connection,
    respond_to_connection,
    disconnect,
    connection_status,
    list_connections,
    send_message,
    list_messages,
    list_chats,
)

router = APIRouter(prefix="/api", tags=["connections"])


@router.post("/connect", response_model=SuccessResponse)
def connect_request(
    payload: ConnectRequest,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    request_connection(db, username, payload.target_username)
    return {"success": True, "message": "Connection request sent successfully"}


@router.post("/connect/respond", response_model=SuccessResponse)
def connect_respond(
    payload: ConnectRespondRequest,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    respond_to_connection(db, username, payload.requester_id, payload.accepted)
    verb = "accepted" if payload.accepted else "declined"
    return {"success": True, "message": f"Connection request {verb} successfully"}


@router.post("/disconnect", response_model=SuccessResponse)
def connect_remove(
    payload: DisconnectRequest,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    disconnect(db, username, payload.target_username)
    return {"success": True, "message": "Connection removed successfully"}


@router.get("/connection-status/{target_username}", response_model=ConnectionStatusResponse)
def connect_status(
    target_username: str,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    return {"status": connection_status(db, username, target_username)}


@router.get("/connections", response_model=list[ConnectionUser])
def connect_list(
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    return list_connections(db, username)


@router.get("/chats", response_model=list[ChatOut])
def message_chats(
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    return list_chats(db, username)


@router.get("/messages/{other_username}", response_model=list[MessageOut])
def message_list(
    other_username: str,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    return list_messages(db, username, other_username)


@router.post("/messages", response_model=SuccessResponse)
def message_send(
    payload: MessageSendRequest,
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    send_message(db, username, payload.recipient, payload.message)
    return {"success": True, "message": "Message sent successfully"}
