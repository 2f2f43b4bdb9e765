import datetime
import uuid
from enum import Enum

from sqlalchemy import Column, String, Integer, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship

from clanleague.core.database import Base
from .league_match import MatchStatus  # playoff rows share the pending/completed lifecycle


class PlayoffRound(str, Enum):
    ROUND_OF_16 = "round_of_16"
    QUARTER = "quarter"
    SEMI = "semi"
    FINAL = "final"


class PlayoffMatch(Base):
    __tablename__ = "playoff_matches"
    __table_args__ = (
        UniqueConstraint("tournament_id", "round", "match_number", name="uq_playoff_round_match_number"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    tournament_id = Column(String, ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False, index=True)
    round = Column(String, nullable=False)
    match_number = Column(Integer, nullable=False)
    participant1_id = Column(String, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    participant2_id = Column(String, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    winner_id = Column(String, ForeignKey("participants.id", ondelete="CASCADE"), nullable=True)
    participant1_score = Column(Integer, nullable=True)
    participant2_score = Column(Integer, nullable=True)
    status = Column(String, nullable=False, default=MatchStatus.PENDING.value)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    tournament = relationship("Tournament", back_populates="playoff_matches")
    participant1 = relationship("Participant", foreign_keys=[participant1_id])
    participant2 = relationship("Participant", foreign_keys=[participant2_id])
    winner = relationship("Participant", foreign_keys=[winner_id])
