from datetime import datetime, timezone
from typing import Optional, List
from uuid import uuid4
from enum import Enum

from pydantic import BaseModel, Field

from app.models.bracket_model import MatchModel


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ScoringMode(str, Enum):
    HIGHER_SCORE = "higher_score"
    LOWER_SCORE = "lower_score"
    BEST_OF = "best_of"

class SeedingMode(str, Enum):
    RANDOM = "random"
    SEEDED = "seeded"

class ParticipantStatus(str, Enum):
    CHAMPION = "champion"
    ELIMINATED = "eliminated"
    ADVANCED = "advanced"
    PLAYING = "playing"
    BYE = "bye"
    WAITING = "waiting"


class ParticipantModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    game_points: int = 0 # Last observed score, used for seeding and tie-breaks

    class Config:
        from_attributes = True


class TournamentModel(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    name: str
    game: str
    scoring_mode: ScoringMode = ScoringMode.HIGHER_SCORE
    score_label: str = "Points"
    target_score: Optional[int] = None # Only meaningful for BEST_OF
    seeding_mode: SeedingMode = SeedingMode.RANDOM
    is_started: bool = False

    participants: List[ParticipantModel] = Field(default_factory=list) # Creation order
    matches: List[MatchModel] = Field(default_factory=list)

    current_round: int = 1
    total_rounds: int = 0
    finalized_rounds: List[int] = Field(default_factory=list)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    class Config:
        from_attributes = True

    def get_participant(self, participant_id: Optional[str]) -> Optional[ParticipantModel]:
        if not participant_id:
            return None
        return next((p for p in self.participants if p.id == participant_id), None)

    def get_match(self, match_id: str) -> Optional[MatchModel]:
        return next((m for m in self.matches if m.id == match_id), None)

    def participant_name(self, participant_id: Optional[str]) -> str:
        participant = self.get_participant(participant_id)
        return participant.name if participant else "TBD"


class GameRule(BaseModel):
    scoring_mode: ScoringMode
    score_label: str
    target_score: Optional[int] = None
