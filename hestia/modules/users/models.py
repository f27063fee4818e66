from sqlalchemy import Column, Integer, String, Text, LargeBinary, DateTime
from sqlalchemy.sql import func

from hestia.core.db import Base
from hestia.core.sharing_config import DEFAULT_INTRO


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)

    name = Column(String(255), nullable=True)
    intro = Column(Text, nullable=True, default=DEFAULT_INTRO)

    # 200x200 PNG, see services/media.py
    profile_pic = Column(LargeBinary, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
