import datetime
import uuid
from enum import Enum

from sqlalchemy import Column, String, Integer, ForeignKey, DateTime, UniqueConstraint
from sqlalchemy.orm import relationship

from clanleague.core.database import Base


class MatchStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class LeagueMatch(Base):
    __tablename__ = "league_matches"
    __table_args__ = (
        UniqueConstraint("tournament_id", "match_number", name="uq_league_match_number"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    tournament_id = Column(String, ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False, index=True)
    match_number = Column(Integer, nullable=False)
    participant1_id = Column(String, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    participant2_id = Column(String, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    participant1_score = Column(Integer, nullable=True)
    participant2_score = Column(Integer, nullable=True)
    status = Column(String, nullable=False, default=MatchStatus.PENDING.value)
    created_at = Column(DateTime, default=datetime.datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    tournament = relationship("Tournament", back_populates="league_matches")
    participant1 = relationship("Participant", foreign_keys=[participant1_id])
    participant2 = relationship("Participant", foreign_keys=[participant2_id])
