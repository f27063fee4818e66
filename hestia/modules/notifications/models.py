from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index
from sqlalchemy.sql import func

from hestia.core.db import Base


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    recipient_username = Column(String(50), ForeignKey("users.username"), nullable=False)
    sender_username = Column(String(50), ForeignKey("users.username"), nullable=False)
    message = Column(Text, nullable=False)
    timestamp = Column(DateTime, nullable=False, server_default=func.now())
    action_type = Column(String(50), nullable=False)

    __table_args__ = (
        Index("idx_notifications_recipient", "recipient_username", "timestamp"),
        Index("idx_notifications_pair_action", "sender_username", "recipient_username", "action_type"),
    )
