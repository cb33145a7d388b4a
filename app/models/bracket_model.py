from uuid import uuid4
from typing import Optional

from pydantic import BaseModel, Field

class MatchModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    round_number: int # 1 is the earliest round
    position: int # 1-indexed, dense within the round

    participant1_id: Optional[str] = None
    participant2_id: Optional[str] = None

    participant1_score: int = 0
    participant2_score: int = 0

    winner_id: Optional[str] = None

    # Set when the occupant was backfilled from the losers of the previous round
    wild_card_participant1: bool = False
    wild_card_participant2: bool = False

    class Config:
        from_attributes = True

    @property
    def occupant_ids(self) -> list:
        return [pid for pid in (self.participant1_id, self.participant2_id) if pid]

    @property
    def is_full(self) -> bool:
        return bool(self.participant1_id and self.participant2_id)

    @property
    def is_bye(self) -> bool:
        return len(self.occupant_ids) == 1

    def has_participant(self, participant_id: str) -> bool:
        return participant_id in self.occupant_ids

    def loser(self) -> Optional[tuple]:
        """(participant_id, score) of the non-winning side of a decided two-occupant match."""
        if not self.is_full or not self.winner_id:
            return None
        if self.winner_id == self.participant1_id:
            return self.participant2_id, self.participant2_score
        return self.participant1_id, self.participant1_score

    def clear(self):
        self.participant1_id = None
        self.participant2_id = None
        self.participant1_score = 0
        self.participant2_score = 0
        self.winner_id = None
        self.wild_card_participant1 = False
        self.wild_card_participant2 = False
