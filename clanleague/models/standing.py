import uuid

from sqlalchemy import Column, String, Integer, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship

from clanleague.core.database import Base

# Counter columns of a standings row, in display order
STANDING_COUNTERS = (
    "wins",
    "losses",
    "points",
    "games_played",
    "crowns_for",
    "crowns_against",
    "crown_difference",
)


class StandingsRecord(Base):
    __tablename__ = "league_standings"
    __table_args__ = (
        UniqueConstraint("tournament_id", "participant_id", name="uq_standing_participant"),
    )

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    tournament_id = Column(String, ForeignKey("tournaments.id", ondelete="CASCADE"), nullable=False, index=True)
    participant_id = Column(String, ForeignKey("participants.id", ondelete="CASCADE"), nullable=False)
    wins = Column(Integer, nullable=False, default=0)
    losses = Column(Integer, nullable=False, default=0)
    points = Column(Integer, nullable=False, default=0)
    games_played = Column(Integer, nullable=False, default=0)
    crowns_for = Column(Integer, nullable=False, default=0)
    crowns_against = Column(Integer, nullable=False, default=0)
    crown_difference = Column(Integer, nullable=False, default=0)

    tournament = relationship("Tournament", back_populates="standings")
    participant = relationship("Participant")
