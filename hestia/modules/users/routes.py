from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import Response
from loguru import logger
from sqlalchemy.orm import Session

from hestia.core.auth import create_access_token, get_current_username
from hestia.core.db import get_db
from hestia.schemas.base import SuccessResponse
from hestia.schemas.users import (
    RegisterRequest,
    LoginRequest,
    LoginResponse,
    CurrentUserResponse,
    ProfileResponse,
    ProfilePictureResponse,
    SearchUserResponse,
)
from hestia.services.media import encode_picture
from . import service

router = APIRouter(tags=["users"])


# ----------------------------
# ACCOUNTS
# ----------------------------
@router.post("/register", response_model=SuccessResponse, status_code=201)
def register(
    payload: RegisterRequest,
    db: Session = Depends(get_db),
):
    service.register(
        db,
        payload.email,
        payload.username,
        payload.password,
        payload.confirm_password,
    )
    return {"success": True, "message": "User registered successfully"}


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    db: Session = Depends(get_db),
):
    user = service.authenticate(db, payload.username, payload.password)
    logger.info(f"Login | username={user.username}")

    return LoginResponse(
        message="Login successful",
        username=user.username,
        access_token=create_access_token(user.username),
    )


@router.get("/api/current-user", response_model=CurrentUserResponse)
def current_user(username: str = Depends(get_current_username)):
    return {"username": username}


# ----------------------------
# PROFILE
# ----------------------------
@router.get("/api/get-profile", response_model=ProfileResponse)
def get_profile(
    username: Optional[str] = None,
    current: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    return service.get_profile(db, username or current)


@router.post("/api/edit-profile", response_model=SuccessResponse)
async def edit_profile(
    name: Optional[str] = Form(None),
    intro: Optional[str] = Form(None),
    profile_pic: Optional[UploadFile] = File(None),
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    picture = await profile_pic.read() if profile_pic else None
    # resize and session work are blocking
    await run_in_threadpool(service.update_profile, db, username, name, intro, picture or None)
    return {"success": True, "message": "Profile updated successfully"}


@router.get("/api/profile-pic/{username}")
def profile_picture(
    username: str,
    db: Session = Depends(get_db),
):
    return Response(content=service.get_profile_picture(db, username), media_type="image/png")


@router.get("/api/current-user-profile", response_model=ProfilePictureResponse)
def current_user_profile(
    username: str = Depends(get_current_username),
    db: Session = Depends(get_db),
):
    user = service.require_user(db, username)
    if not user.profile_pic:
        return {"success": False, "error": "No profile picture found"}
    return {"success": True, "profile_pic": encode_picture(user.profile_pic)}


@router.get("/api/search-user", response_model=SearchUserResponse)
def search_user(
    username: str,
    db: Session = Depends(get_db),
):
    found = service.search_user(db, username)
    if not found:
        return {"success": False, "message": "User not found"}
    return {"success": True, "username": found}
