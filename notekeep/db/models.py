"""SQLAlchemy models for the embedded document store."""
from __future__ import annotations

from sqlalchemy import Column, DateTime, String, Text, func

from .session import Base


class StoredDocument(Base):
    __tablename__ = "documents"

    key = Column(String(512), primary_key=True)
    content = Column(Text, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
