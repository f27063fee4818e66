from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, CheckConstraint, UniqueConstraint
from sqlalchemy.sql import func
from hestia.core.db import Base


class Connection(Base):
    """
    One row per connected pair, stored low/high so (a, b) and (b, a)
    are the same row.
    """
    __tablename__ = "connections"

    id = Column(Integer, primary_key=True, index=True)
    user_low = Column(String(50), ForeignKey("users.username"), nullable=False, index=True)
    user_high = Column(String(50), ForeignKey("users.username"), nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())

    __table_args__ = (
        UniqueConstraint("user_low", "user_high", name="connections_pair_key"),
        CheckConstraint("user_low <> user_high", name="connections_no_self_check"),
    )


class Message(Base):
    __tablename__ = "messages"

    id = Column(Integer, primary_key=True, index=True)
    sender_username = Column(String(50), ForeignKey("users.username"), nullable=False, index=True)
    recipient_username = Column(String(50), ForeignKey("users.username"), nullable=False, index=True)
    message_text = Column(Text, nullable=False)
    timestamp = Column(DateTime, nullable=False, index=True)
