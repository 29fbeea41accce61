# rxprint/models/client_storage.py
from datetime import datetime

from sqlalchemy import Column, DateTime, String, Text

from rxprint.db.base import Base


class ClientStorageItem(Base):
    """
    One key -> JSON blob, the durable half of client storage.

    Holds the print settings under a single well-known key and the durable
    copy of the last finalized prescription.
    """

    __tablename__ = "client_storage"

    key = Column(String(128), primary_key=True)
    value = Column(Text, nullable=False)

    updated_at = Column(DateTime,
                        default=datetime.utcnow,
                        onupdate=datetime.utcnow)
