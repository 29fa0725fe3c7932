from sqlalchemy import JSON, Column, DateTime, Float, Integer, String
from .db import Base

# -----------------------------
# ORM models (tables) for snapshot history
# -----------------------------
class Snapshot(Base):
    __tablename__ = "snapshots"
    # One normalized copy of the sheet per day
    date           = Column(String(10), primary_key=True)        # YYYY-MM-DD
    taken_at       = Column(DateTime(timezone=True), nullable=False)
    headers        = Column(JSON, nullable=False)                # header row, in sheet order
    records        = Column(JSON, nullable=False)                # NormalizedRecord.to_dict() list
    row_count      = Column(Integer, nullable=False, default=0)

    # Summary columns, kept so range queries don't load every record
    hrt_count      = Column(Integer, nullable=False, default=0)
    trt_count      = Column(Integer, nullable=False, default=0)
    provider_count = Column(Integer, nullable=False, default=0)
    error_count    = Column(Integer, nullable=False, default=0)
    avg_wait_days  = Column(Float)

    def __repr__(self):
        return f"<Snapshot(date={self.date}, rows={self.row_count})>"
