from sqlalchemy import Column, String, DateTime, JSON
from app.core.database import Base
from app.models.tournament_model import utc_now

class TournamentRecord(Base):
    __tablename__ = "tournaments"

    # One row per tournament; the whole aggregate lives in `data`
    id = Column(String, primary_key=True, index=True)
    data = Column(JSON, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utc_now, onupdate=utc_now)
