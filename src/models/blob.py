"""Database model for the key-value blob slots the store persists into."""

from typing import Optional

from sqlalchemy import Column
from sqlalchemy import DateTime
from sqlalchemy import String
from sqlalchemy import Text
from sqlalchemy import select
from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from src.modules.database import Base


class Blob(Base):
    """A single named blob of serialized data."""

    __tablename__ = "blobs"

    key = Column(String(200), primary_key=True)
    value = Column(Text, nullable=False)

    # Timestamps
    updated_at = Column(
        DateTime, default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<Blob(key={self.key}, size={len(self.value or '')})>"

    @staticmethod
    def get_by_key(session: Session, key: str) -> Optional["Blob"]:
        """Get a blob by key."""
        result = session.execute(select(Blob).where(Blob.key == key))
        return result.scalar_one_or_none()

    @staticmethod
    def upsert(session: Session, key: str, value: str) -> "Blob":
        """Create the blob or replace its value."""
        blob = Blob.get_by_key(session, key)
        if blob is None:
            blob = Blob(key=key, value=value)
            session.add(blob)
        else:
            blob.value = value
        return blob
