from pydantic import BaseModel

from .participant_schemas import ParticipantRead


class StandingRead(BaseModel):
    rank: int
    participant: ParticipantRead
    wins: int
    losses: int
    points: int
    games_played: int
    crowns_for: int
    crowns_against: int
    crown_difference: int
    qualified: bool = False
