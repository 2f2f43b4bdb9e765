from pydantic import BaseModel, Field
from typing import Optional


class ParticipantBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    tag: Optional[str] = Field(None, max_length=50)


class ParticipantCreate(ParticipantBase):
    pass


class ParticipantUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    tag: Optional[str] = Field(None, max_length=50)


class ParticipantRead(ParticipantBase):
    id: str
    tournament_id: str
    seed_position: Optional[int] = None

    class Config:
        from_attributes = True
