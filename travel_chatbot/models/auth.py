import uuid

from sqlalchemy import Column, String, Text, DateTime, func

from .base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(320), unique=True, nullable=False, index=True)
    password_hash = Column(Text, nullable=True)  # null for accounts created by an identity provider
    first_name = Column(String(255))
    last_name = Column(String(255))
    profile_image_url = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
