from pydantic import BaseModel, Field

from app.models.tournament_model import ParticipantStatus

class ParticipantCreate(BaseModel):
    name: str = Field(..., description="Display name, 2-50 characters, unique within the tournament")

class ParticipantUpdate(BaseModel):
    name: str

class ParticipantStatusRead(BaseModel):
    participant_id: str
    name: str
    status: ParticipantStatus
