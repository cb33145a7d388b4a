from pydantic import BaseModel, Field
from typing import Optional, List

from app.models.tournament_model import ParticipantModel, ScoringMode, SeedingMode, TournamentModel

class TournamentCreate(BaseModel):
    name: str = Field(..., description="Tournament name (2-100 characters)")
    game: str = Field(..., description="Game title; known titles come with a scoring preset")
    # Leave scoring fields out to use the game's preset
    scoring_mode: Optional[ScoringMode] = None
    score_label: Optional[str] = None
    target_score: Optional[int] = Field(None, ge=1)
    seeding_mode: Optional[SeedingMode] = None

class TournamentSettingsUpdate(BaseModel):
    scoring_mode: ScoringMode
    target_score: Optional[int] = Field(None, ge=1)
    seeding_mode: Optional[SeedingMode] = None

class ImportResult(BaseModel):
    imported: int
    replaced: int = 0 # Records that already existed under the same id
    tournaments: List[TournamentModel]

# --- Bracket overview ---

class MatchOverview(BaseModel):
    match_id: str
    position: int
    participant1_name: str
    participant2_name: str
    status_text: str

class RoundOverview(BaseModel):
    round_number: int
    label: str
    is_finalized: bool
    matches: List[MatchOverview]

class BracketOverview(BaseModel):
    tournament_id: str
    current_round: int
    total_rounds: int
    scoring_description: Optional[str] = None # Only for best_of with a target
    champion: Optional[ParticipantModel] = None
    rounds: List[RoundOverview]
