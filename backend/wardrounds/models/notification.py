from sqlalchemy import Column, Integer, String, Text, DateTime, Boolean
from sqlalchemy.sql import func
from wardrounds.database import Base


class NotificationQueue(Base):
    __tablename__ = "notification_queue"

    id = Column(Integer, primary_key=True, autoincrement=True)
    kd_dokter = Column(String(20), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    body = Column(Text, nullable=False)
    no_rawat = Column(String(17))
    status = Column(String(10), nullable=False, default="pending", index=True)  # "pending" | "sent" | "failed"
    error_message = Column(Text)
    created_at = Column(DateTime, server_default=func.now(), index=True)
    sent_at = Column(DateTime)


class PushToken(Base):
    __tablename__ = "fcm_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    token = Column(String(512), unique=True, nullable=False)
    user_id = Column(String(50))
    kd_dokter = Column(String(20), index=True)
    device_type = Column(String(50))
    user_agent = Column(Text)
    platform = Column(String(50))
    active = Column(Boolean, default=True)
    last_used = Column(DateTime)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime)
