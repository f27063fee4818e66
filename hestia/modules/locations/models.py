from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Boolean,
    DateTime,
    ForeignKey,
    CheckConstraint,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from hestia.core.db import Base


class LocationSetting(Base):
    __tablename__ = "location_settings"

    username = Column(String(50), ForeignKey("users.username"), primary_key=True)
    is_enabled = Column(Boolean, nullable=False, default=False)
    sharing_mode = Column(
        String(20),
        CheckConstraint(
            "sharing_mode IN ('off','always','timed')",
            name="location_settings_mode_check",
        ),
        nullable=False,
        default="off",
    )
    # only read when sharing_mode = 'timed'
    sharing_until = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class LocationSample(Base):
    __tablename__ = "location_data"

    # single row per user: the latest sample replaces the previous one
    username = Column(String(50), ForeignKey("users.username"), primary_key=True)
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    accuracy = Column(Float, nullable=True)
    timestamp = Column(DateTime, nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint("latitude >= -90 AND latitude <= 90", name="valid_latitude"),
        CheckConstraint("longitude >= -180 AND longitude <= 180", name="valid_longitude"),
    )


class LocationPermission(Base):
    __tablename__ = "location_sharing_permissions"

    id = Column(Integer, primary_key=True, index=True)
    # requester may see target's location when is_approved
    requester_username = Column(String(50), ForeignKey("users.username"), nullable=False, index=True)
    target_username = Column(String(50), ForeignKey("users.username"), nullable=False, index=True)
    is_approved = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("requester_username", "target_username", name="location_permission_pair_key"),
    )
