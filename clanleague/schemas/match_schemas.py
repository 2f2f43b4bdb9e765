from pydantic import BaseModel, Field
from typing import Optional, List

from .participant_schemas import ParticipantRead


class ScoreSubmission(BaseModel):
    participant1_score: int
    participant2_score: int


class LeagueMatchRead(BaseModel):
    id: str
    tournament_id: str
    match_number: int
    participant1: ParticipantRead
    participant2: ParticipantRead
    participant1_score: Optional[int] = None
    participant2_score: Optional[int] = None
    status: str

    class Config:
        from_attributes = True


class PlayoffMatchRead(BaseModel):
    id: str
    tournament_id: str
    round: str
    match_number: int
    participant1: ParticipantRead
    participant2: ParticipantRead
    winner: Optional[ParticipantRead] = None
    participant1_score: Optional[int] = None
    participant2_score: Optional[int] = None
    status: str

    class Config:
        from_attributes = True


class BracketRound(BaseModel):
    round: str
    matches: List[PlayoffMatchRead] = Field(default_factory=list)


class BracketRead(BaseModel):
    tournament_id: str
    status: str
    current_phase: Optional[str] = None
    rounds: List[BracketRound] = Field(default_factory=list)
    champion: Optional[ParticipantRead] = None
