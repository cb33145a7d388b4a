from fastapi import Depends
from sqlalchemy.orm import Session

from app.core.database import SessionLocal
from app.services.tournament_store import TournamentStore

def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def get_tournament_store(db: Session = Depends(get_db)) -> TournamentStore:
    return TournamentStore(db)
