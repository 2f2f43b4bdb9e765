from pydantic import BaseModel, Field, field_validator
from typing import Optional, List
from datetime import datetime

from .participant_schemas import ParticipantCreate, ParticipantRead


def _clean_rules(rules):
    if rules is None:
        return rules
    return [rule.strip() for rule in rules if rule and rule.strip()]


class TournamentBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    rules: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Tournament name cannot be empty")
        return v.strip()

    @field_validator("rules")
    @classmethod
    def drop_blank_rules(cls, v):
        return _clean_rules(v)


class TournamentCreate(TournamentBase):
    participants: List[ParticipantCreate] = Field(default_factory=list)


class TournamentUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    rules: Optional[List[str]] = None

    @field_validator("rules")
    @classmethod
    def drop_blank_rules(cls, v):
        return _clean_rules(v)


class TournamentRead(TournamentBase):
    id: str
    status: str
    current_phase: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TournamentDetail(TournamentRead):
    participants: List[ParticipantRead] = Field(default_factory=list)
