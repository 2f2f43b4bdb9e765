import logging
from typing import List, Tuple

from clanleague.core.exceptions import InsufficientParticipants, TournamentNotFound
from clanleague.models import Participant, StandingsRecord, Tournament
from clanleague.store.datastore import DataStore

logger = logging.getLogger(__name__)

MIN_QUALIFIERS = 4


def qualifier_count(total_participants: int) -> int:
    """How many participants advance to the playoffs for a league of this size."""
    if total_participants < MIN_QUALIFIERS:
        raise InsufficientParticipants(
            f"At least {MIN_QUALIFIERS} participants with standings are required, got {total_participants}."
        )
    if total_participants >= 16:
        return 16
    if total_participants >= 8:
        return 8
    return 4


def ranking_key(record: StandingsRecord):
    seed = record.participant.seed_position if record.participant is not None else None
    # Ties beyond points and crown difference keep registration order
    return (-record.points, -record.crown_difference, seed if seed is not None else float("inf"))


def rank_standings(records: List[StandingsRecord]) -> List[StandingsRecord]:
    return sorted(records, key=ranking_key)


def select_qualifiers(records: List[StandingsRecord]) -> List[Tuple[int, Participant]]:
    """Ranked (rank, participant) pairs for the top K of the standings."""
    k = qualifier_count(len(records))
    ranked = rank_standings(records)
    return [(rank, record.participant) for rank, record in enumerate(ranked[:k], start=1)]


class QualifierService:
    def __init__(self, store: DataStore):
        self.store = store

    def _records(self, tournament_id: str) -> List[StandingsRecord]:
        if self.store.get(Tournament, tournament_id) is None:
            raise TournamentNotFound(f"Tournament with ID {tournament_id} not found.")
        return self.store.query(StandingsRecord, tournament_id=tournament_id)

    def get_standings(self, tournament_id: str) -> List[dict]:
        """The full league table, ranked, with qualification marked when determinable."""
        ranked = rank_standings(self._records(tournament_id))
        try:
            k = qualifier_count(len(ranked))
        except InsufficientParticipants:
            k = 0
        return [
            {
                "rank": rank,
                "participant": record.participant,
                "wins": record.wins,
                "losses": record.losses,
                "points": record.points,
                "games_played": record.games_played,
                "crowns_for": record.crowns_for,
                "crowns_against": record.crowns_against,
                "crown_difference": record.crown_difference,
                "qualified": rank <= k,
            }
            for rank, record in enumerate(ranked, start=1)
        ]

    def get_qualifiers(self, tournament_id: str) -> List[Tuple[int, Participant]]:
        qualifiers = select_qualifiers(self._records(tournament_id))
        logger.debug("Tournament %s qualifiers: %s", tournament_id, [p.id for _, p in qualifiers])
        return qualifiers
