from sqlalchemy import Column, Integer, String, Enum, DateTime, Float, Text, Boolean, JSON, Index
from datetime import datetime
import uuid
from models.base import Base, SyncDirection, RunStatus


class SyncRun(Base):
    """
    Audit trail of import and export invocations.

    One row per call of the import or export orchestrator, written once the
    call has finished so it never interferes with per-item rollbacks.
    """
    __tablename__ = "requestdesk_sync_runs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    run_id = Column(String(36), default=lambda: str(uuid.uuid4()), unique=True, nullable=False)

    direction = Column(Enum(SyncDirection), nullable=False, index=True)
    status = Column(Enum(RunStatus), nullable=False, index=True)
    triggered_by = Column(String(50), nullable=True)

    # Timestamps
    started_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    completed_at = Column(DateTime, nullable=True)
    duration_seconds = Column(Float, nullable=True)

    # Statistics
    records_fetched = Column(Integer, default=0)
    records_created = Column(Integer, default=0)
    records_updated = Column(Integer, default=0)
    records_failed = Column(Integer, default=0)
    has_more = Column(Boolean, default=False)

    # Error tracking
    error_message = Column(Text, nullable=True)
    error_details = Column(JSON, nullable=True)

    __table_args__ = (
        Index("idx_sync_run_direction_started", "direction", "started_at"),
    )
