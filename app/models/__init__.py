from app.core.database import Base

# Import all models here to ensure they are registered with Base
from .tournament import TournamentRecord
from .bracket_model import MatchModel
from .tournament_model import (
    GameRule,
    ParticipantModel,
    ParticipantStatus,
    ScoringMode,
    SeedingMode,
    TournamentModel,
)

# Tables are created by app.core.database.init_db() at application startup.
