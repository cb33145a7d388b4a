import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.models.tournament import TournamentRecord
from app.models.tournament_model import TournamentModel

logger = logging.getLogger(__name__)

class TournamentStore:
    """
    Single-table key-value store: one row per tournament id holding the whole aggregate.

    Writes replace the full record, so concurrent writers to the same tournament
    resolve as last-write-wins. Database errors propagate to the caller.
    """

    def __init__(self, db: Session):
        self.db = db

    def get(self, tournament_id: str) -> Optional[TournamentModel]:
        record = self.db.get(TournamentRecord, tournament_id)
        if record is None:
            return None
        return TournamentModel.model_validate(record.data)

    def list(self) -> List[TournamentModel]:
        records = self.db.query(TournamentRecord).order_by(TournamentRecord.updated_at).all()
        return [TournamentModel.model_validate(record.data) for record in records]

    def put(self, tournament: TournamentModel) -> TournamentModel:
        data = tournament.model_dump(mode="json")
        record = self.db.get(TournamentRecord, tournament.id)
        if record is None:
            record = TournamentRecord(id=tournament.id, data=data)
            self.db.add(record)
        else:
            record.data = data
        self.db.commit()
        logger.debug("Stored tournament %s", tournament.id)
        return tournament

    def merge(self, tournaments: List[TournamentModel]) -> int:
        """Stores every given tournament, replacing records with the same id. Returns how many were replaced."""
        replaced = 0
        latest = {t.id: t for t in tournaments}
        for tournament in latest.values():
            data = tournament.model_dump(mode="json")
            record = self.db.get(TournamentRecord, tournament.id)
            if record is None:
                self.db.add(TournamentRecord(id=tournament.id, data=data))
            else:
                record.data = data
                replaced += 1
        self.db.commit()
        logger.info("Merged %d tournaments (%d replaced)", len(latest), replaced)
        return replaced

    def delete(self, tournament_id: str) -> bool:
        record = self.db.get(TournamentRecord, tournament_id)
        if record is None:
            return False
        self.db.delete(record)
        self.db.commit()
        logger.debug("Deleted tournament %s", tournament_id)
        return True
