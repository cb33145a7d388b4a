from pydantic import BaseModel, Field

class MatchScoreUpdate(BaseModel):
    participant1_score: int = Field(..., ge=0, description="Score for the participant in slot 1")
    participant2_score: int = Field(..., ge=0, description="Score for the participant in slot 2")
