"""
League standings ledger.

Standings are plain sums over completed league matches, so applying results
one at a time and replaying every completed match from scratch must agree
regardless of order. ``result_deltas`` is the single definition of what one
result contributes; both paths go through it.
"""
import logging
from typing import Dict, List, Optional, Tuple

from clanleague.core.config import LeagueDrawPolicy, settings
from clanleague.core.exceptions import (
    AlreadyCompleted,
    InvalidScore,
    MatchNotFound,
    TournamentNotFound,
)
from clanleague.core.security import AuthorizedContext, require_context
from clanleague.models import LeagueMatch, MatchStatus, Participant, StandingsRecord, Tournament
from clanleague.models.standing import STANDING_COUNTERS
from clanleague.services.notification_service import (
    EventPublisher,
    MatchCompleted,
    StandingsChanged,
    event_bus,
)
from clanleague.store.datastore import DataStore

logger = logging.getLogger(__name__)

POINTS_PER_WIN = 3


def validate_scores(score1, score2):
    for score in (score1, score2):
        # bool is an int subclass but never a valid score
        if isinstance(score, bool) or not isinstance(score, int):
            raise InvalidScore(f"Scores must be integers, got {score!r}.")
        if score < 0:
            raise InvalidScore(f"Scores cannot be negative, got {score}.")


def participant1_won(score1: int, score2: int) -> bool:
    # A tie falls to participant 2, matching the legacy strict comparison
    return score1 > score2


def result_deltas(score1: int, score2: int) -> Tuple[Dict[str, int], Dict[str, int]]:
    """Counter increments for (participant1, participant2) produced by one result."""
    p1_won = participant1_won(score1, score2)

    def side(won: bool, crowns_for: int, crowns_against: int) -> Dict[str, int]:
        return {
            "wins": 1 if won else 0,
            "losses": 0 if won else 1,
            "points": POINTS_PER_WIN if won else 0,
            "games_played": 1,
            "crowns_for": crowns_for,
            "crowns_against": crowns_against,
            "crown_difference": crowns_for - crowns_against,
        }

    return side(p1_won, score1, score2), side(not p1_won, score2, score1)


def compute_standings(participant_ids: List[str], completed_matches) -> Dict[str, Dict[str, int]]:
    """Totals per participant from scratch, replaying matches by match_number."""
    totals = {pid: {counter: 0 for counter in STANDING_COUNTERS} for pid in participant_ids}
    for match in sorted(completed_matches, key=lambda m: m.match_number):
        d1, d2 = result_deltas(match.participant1_score, match.participant2_score)
        for pid, deltas in ((match.participant1_id, d1), (match.participant2_id, d2)):
            row = totals.setdefault(pid, {counter: 0 for counter in STANDING_COUNTERS})
            for counter, value in deltas.items():
                row[counter] += value
    return totals


class StandingsService:
    def __init__(self, store: DataStore, events: EventPublisher = event_bus,
                 draw_policy: Optional[LeagueDrawPolicy] = None):
        self.store = store
        self.events = events
        self.draw_policy = LeagueDrawPolicy(draw_policy or settings.LEAGUE_DRAW_POLICY)

    def submit_league_result(self, ctx: AuthorizedContext, tournament_id: str, match_id: str,
                             participant1_score: int, participant2_score: int) -> LeagueMatch:
        require_context(ctx)
        match = self.store.get(LeagueMatch, match_id)
        if match is None or match.tournament_id != tournament_id:
            raise MatchNotFound(f"League match {match_id} not found in tournament {tournament_id}.")

        validate_scores(participant1_score, participant2_score)
        if participant1_score == participant2_score and self.draw_policy == LeagueDrawPolicy.REJECT:
            raise InvalidScore("League matches cannot end in a draw.")

        if match.status != MatchStatus.PENDING.value:
            raise AlreadyCompleted(f"League match {match.match_number} has already been completed.")

        participant1_id, participant2_id = match.participant1_id, match.participant2_id

        # Claiming the match first makes a lost race harmless and an interrupted
        # submission repairable by recalculate_standings.
        claimed = self.store.update(
            LeagueMatch, match_id,
            {
                "participant1_score": participant1_score,
                "participant2_score": participant2_score,
                "status": MatchStatus.COMPLETED.value,
            },
            expected={"status": MatchStatus.PENDING.value},
        )
        if not claimed:
            raise AlreadyCompleted(f"League match {match_id} has already been completed.")

        d1, d2 = result_deltas(participant1_score, participant2_score)
        for participant_id, deltas in ((participant1_id, d1), (participant2_id, d2)):
            self._apply_deltas(tournament_id, participant_id, deltas)

        winner_id = participant1_id if participant1_won(participant1_score, participant2_score) else participant2_id
        logger.debug("League match %s scored %d-%d, winner %s",
                     match_id, participant1_score, participant2_score, winner_id)

        self.events.publish(MatchCompleted(tournament_id=tournament_id, match_id=match_id,
                                           round="league", winner_id=winner_id))
        self.events.publish(StandingsChanged(tournament_id=tournament_id))
        return self.store.get(LeagueMatch, match_id)

    def _apply_deltas(self, tournament_id: str, participant_id: str, deltas: Dict[str, int]):
        records = self.store.query(StandingsRecord, tournament_id=tournament_id, participant_id=participant_id)
        if records:
            self.store.increment(StandingsRecord, records[0].id, deltas)
        else:
            # Missing row: create it with this result as its first contribution
            logger.warning("No standings row for participant %s in tournament %s, creating one",
                           participant_id, tournament_id)
            self.store.insert_many(StandingsRecord, [
                dict(tournament_id=tournament_id, participant_id=participant_id, **deltas)
            ])

    def recalculate_standings(self, ctx: AuthorizedContext, tournament_id: str) -> List[StandingsRecord]:
        """
        Rebuild every standings row from the completed league matches.

        Safe to run at any time and any number of times; this is the repair
        path for a submission interrupted between its individual writes.
        """
        require_context(ctx)
        if self.store.get(Tournament, tournament_id) is None:
            raise TournamentNotFound(f"Tournament with ID {tournament_id} not found.")

        participants = self.store.query(Participant, order_by=["seed_position"], tournament_id=tournament_id)
        completed = self.store.query(
            LeagueMatch, order_by=["match_number"],
            tournament_id=tournament_id, status=MatchStatus.COMPLETED.value,
        )
        for match in completed:
            if match.participant1_score == match.participant2_score:
                logger.warning("Completed league match %s is tied %d-%d, crediting participant 2",
                               match.id, match.participant1_score, match.participant2_score)

        totals = compute_standings([p.id for p in participants], completed)

        existing = {s.participant_id: s for s in self.store.query(StandingsRecord, tournament_id=tournament_id)}
        missing = [
            dict(tournament_id=tournament_id, participant_id=pid, **values)
            for pid, values in totals.items() if pid not in existing
        ]
        for pid, record in existing.items():
            values = totals.get(pid, {counter: 0 for counter in STANDING_COUNTERS})
            self.store.update(StandingsRecord, record.id, values)
        if missing:
            self.store.insert_many(StandingsRecord, missing)

        logger.info("Recalculated standings for tournament %s from %d completed match(es)",
                    tournament_id, len(completed))
        self.events.publish(StandingsChanged(tournament_id=tournament_id))
        return self.store.query(StandingsRecord, tournament_id=tournament_id)
