import logging
from typing import List, Sequence, Tuple

from clanleague.core.config import settings
from clanleague.core.exceptions import (
    AlreadyGenerated,
    DuplicateRow,
    InvalidInput,
    InvalidParticipantCount,
    TournamentNotFound,
)
from clanleague.core.security import AuthorizedContext, require_context
from clanleague.models import (
    LeagueMatch,
    MatchStatus,
    Participant,
    StandingsRecord,
    Tournament,
    TournamentPhase,
    TournamentStatus,
)
from clanleague.services.notification_service import EventPublisher, FixturesGenerated, event_bus
from clanleague.store.datastore import DataStore

logger = logging.getLogger(__name__)


def round_robin_pairs(participant_ids: Sequence[str]) -> List[Tuple[int, str, str]]:
    """
    Every unordered pair of participants exactly once, as (match_number, p1, p2).

    Pairs are enumerated lexicographically over the positions in
    ``participant_ids`` (i < j), so match 1 is always the first two
    participants and numbering is 1-based and contiguous.
    """
    if len(set(participant_ids)) != len(participant_ids):
        raise InvalidInput("Participant ids must be distinct.")

    fixtures = []
    match_number = 0
    n = len(participant_ids)
    for i in range(n - 1):
        for j in range(i + 1, n):
            match_number += 1
            fixtures.append((match_number, participant_ids[i], participant_ids[j]))
    return fixtures


class FixtureService:
    def __init__(self, store: DataStore, events: EventPublisher = event_bus, min_participants: int = None):
        self.store = store
        self.events = events
        self.min_participants = min_participants or settings.MIN_PARTICIPANTS

    def generate_fixtures(self, ctx: AuthorizedContext, tournament_id: str) -> List[LeagueMatch]:
        """
        Creates the full league schedule and zeroed standings, then opens the league.
        """
        require_context(ctx)
        tournament = self.store.get(Tournament, tournament_id)
        if tournament is None:
            raise TournamentNotFound(f"Tournament with ID {tournament_id} not found.")

        if tournament.status != TournamentStatus.SETUP.value:
            raise AlreadyGenerated(f"Fixtures already generated: tournament is in '{tournament.status}'.")
        if self.store.count(LeagueMatch, tournament_id=tournament_id) > 0:
            # Matches inserted by a call that failed before opening the league
            logger.warning("Tournament %s has fixtures but is still in setup, finishing generation", tournament_id)
            return self._open_league(tournament_id)

        participants = self.store.query(
            Participant, order_by=["seed_position", "created_at"], tournament_id=tournament_id
        )
        if len(participants) < self.min_participants:
            raise InvalidParticipantCount(
                f"At least {self.min_participants} participants are required, got {len(participants)}."
            )

        participant_ids = [p.id for p in participants]
        match_rows = [
            {
                "tournament_id": tournament_id,
                "match_number": match_number,
                "participant1_id": p1,
                "participant2_id": p2,
                "status": MatchStatus.PENDING.value,
            }
            for match_number, p1, p2 in round_robin_pairs(participant_ids)
        ]

        try:
            self.store.insert_many(LeagueMatch, match_rows)
        except DuplicateRow as e:
            # Another request generated the schedule between our check and insert
            raise AlreadyGenerated("League fixtures have already been generated for this tournament.") from e

        logger.info("Generated %d league fixtures for tournament %s", len(match_rows), tournament_id)
        return self._open_league(tournament_id)

    def _open_league(self, tournament_id: str) -> List[LeagueMatch]:
        """Zeroed standings for every participant, then the move from setup to league."""
        participants = self.store.query(Participant, tournament_id=tournament_id)
        self._ensure_standings(tournament_id, [p.id for p in participants])

        opened = self.store.update(
            Tournament, tournament_id,
            {"status": TournamentStatus.LEAGUE.value, "current_phase": TournamentPhase.LEAGUE.value},
            expected={"status": TournamentStatus.SETUP.value},
        )
        matches = self.store.query(LeagueMatch, order_by=["match_number"], tournament_id=tournament_id)
        if opened:
            self.events.publish(FixturesGenerated(tournament_id=tournament_id, match_count=len(matches)))
        return matches

    def _ensure_standings(self, tournament_id: str, participant_ids: List[str]):
        existing = {s.participant_id for s in self.store.query(StandingsRecord, tournament_id=tournament_id)}
        rows = [
            {"tournament_id": tournament_id, "participant_id": pid}
            for pid in participant_ids if pid not in existing
        ]
        if rows:
            try:
                self.store.insert_many(StandingsRecord, rows)
            except DuplicateRow:
                logger.warning("Standings rows for tournament %s were created concurrently", tournament_id)
