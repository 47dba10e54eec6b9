from sqlalchemy import Column, String, Text, DateTime
from sqlalchemy.sql import func
from infra.db.session import Base

class KeyValueEntry(Base):
    __tablename__ = "kv_entries"
    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
