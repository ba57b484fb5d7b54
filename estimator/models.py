from sqlalchemy import Column, DateTime, Integer, JSON, String
from datetime import datetime
from .database import Base


class SavedEstimate(Base):
    """One persisted estimate snapshot per storage key."""
    __tablename__ = "saved_estimates"

    id = Column(Integer, primary_key=True, index=True)
    storage_key = Column(String, unique=True, nullable=False, index=True)
    snapshot_json = Column(JSON, nullable=False)  # EstimateSnapshot, JSON mode
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
