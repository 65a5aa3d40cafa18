from sqlalchemy import Column, String, DateTime, Text
from datetime import datetime
from .database import Base


# Storage keys. The store is a plain key/value table holding JSON text
RECORDS_KEY = "records"
QUOTATIONS_KEY = "quotations"
DRAFT_KEY = "quotation_draft_v1"


class StorageEntry(Base):
    """One JSON document per key. Records and quotations are each a JSON list under one key."""
    __tablename__ = "storage_entries"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
