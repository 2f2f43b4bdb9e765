import datetime
import uuid
from enum import Enum

from sqlalchemy import Column, String, Text, JSON, DateTime
from sqlalchemy.orm import relationship

from clanleague.core.database import Base


class TournamentStatus(str, Enum):
    SETUP = "setup"
    LEAGUE = "league"
    PLAYOFFS = "playoffs"
    COMPLETED = "completed"


class TournamentPhase(str, Enum):
    LEAGUE = "league"
    ROUND_OF_16 = "round_of_16"
    QUARTER = "quarter"
    SEMI = "semi"
    FINAL = "final"


class Tournament(Base):
    __tablename__ = "tournaments"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    rules = Column(JSON, nullable=False, default=list)  # ordered list of rule strings
    status = Column(String, nullable=False, default=TournamentStatus.SETUP.value)
    current_phase = Column(String, nullable=True)  # null until fixtures exist
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    participants = relationship(
        "Participant", back_populates="tournament",
        cascade="all, delete-orphan", passive_deletes=True,
        order_by="Participant.seed_position",
    )
    league_matches = relationship(
        "LeagueMatch", back_populates="tournament",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    standings = relationship(
        "StandingsRecord", back_populates="tournament",
        cascade="all, delete-orphan", passive_deletes=True,
    )
    playoff_matches = relationship(
        "PlayoffMatch", back_populates="tournament",
        cascade="all, delete-orphan", passive_deletes=True,
    )
