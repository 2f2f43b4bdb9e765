import logging
from typing import Dict, List, Optional, Sequence, Tuple

from clanleague.core.exceptions import (
    AlreadyCompleted,
    AlreadyGenerated,
    DrawNotAllowed,
    DuplicateRow,
    LeagueIncomplete,
    MatchNotFound,
    RoundAlreadyExists,
    TournamentNotFound,
)
from clanleague.core.security import AuthorizedContext, require_context
from clanleague.models import (
    LeagueMatch,
    MatchStatus,
    Participant,
    PlayoffMatch,
    PlayoffRound,
    Tournament,
    TournamentStatus,
)
from clanleague.services.notification_service import (
    BracketGenerated,
    EventPublisher,
    MatchCompleted,
    RoundAdvanced,
    TournamentCompleted,
    event_bus,
)
from clanleague.services.qualifier_service import QualifierService
from clanleague.services.standings_service import validate_scores
from clanleague.store.datastore import DataStore

logger = logging.getLogger(__name__)

# Playoff rounds in the order they are played
ROUND_SEQUENCE = [
    PlayoffRound.ROUND_OF_16,
    PlayoffRound.QUARTER,
    PlayoffRound.SEMI,
    PlayoffRound.FINAL,
]

FIRST_ROUND_BY_QUALIFIERS = {
    4: PlayoffRound.SEMI,
    8: PlayoffRound.QUARTER,
    16: PlayoffRound.ROUND_OF_16,
}


def bracket_order(bracket_size: int) -> List[int]:
    """
    Standard bracket order of seeds, read in consecutive pairs.

    For 8: [1, 8, 4, 5, 2, 7, 3, 6], i.e. 1v8, 4v5, 2v7, 3v6. Seeds 1 and 2
    sit in opposite halves, so with no upsets they only meet in the final.
    """
    if bracket_size < 2 or bracket_size & (bracket_size - 1):
        raise ValueError(f"Bracket size must be a power of two >= 2, got {bracket_size}.")
    if bracket_size == 2:
        return [1, 2]

    upper_half = bracket_order(bracket_size // 2)
    result = []
    for seed in upper_half:
        result.extend([seed, bracket_size + 1 - seed])
    return result


def next_round(round_name: str) -> Optional[PlayoffRound]:
    position = ROUND_SEQUENCE.index(PlayoffRound(round_name))
    if position + 1 < len(ROUND_SEQUENCE):
        return ROUND_SEQUENCE[position + 1]
    return None


def seed_first_round(ranked_ids: Sequence[str]) -> List[Tuple[int, str, str]]:
    """(match_number, participant1, participant2) for the opening playoff round.

    ``ranked_ids[0]`` is rank 1; the higher seed always takes the participant1 slot.
    """
    order = bracket_order(len(ranked_ids))
    pairs = []
    for match_number, i in enumerate(range(0, len(order), 2), start=1):
        high_seed, low_seed = order[i], order[i + 1]
        pairs.append((match_number, ranked_ids[high_seed - 1], ranked_ids[low_seed - 1]))
    return pairs


def pair_winners(completed_round: Sequence[PlayoffMatch]) -> List[Tuple[int, str, str]]:
    """Winner of match 1 vs winner of match 2, 3 vs 4, ... numbered from 1."""
    ordered = sorted(completed_round, key=lambda m: m.match_number)
    winners = [m.winner_id for m in ordered]
    return [
        (match_number, winners[i], winners[i + 1])
        for match_number, i in enumerate(range(0, len(winners), 2), start=1)
    ]


class BracketService:
    def __init__(self,
                 store: DataStore,
                 events: EventPublisher = event_bus,
                 qualifier_service: QualifierService = None
                ):
        self.store = store
        self.events = events
        self.qualifier_service = qualifier_service or QualifierService(store)

    def _get_tournament(self, tournament_id: str) -> Tournament:
        tournament = self.store.get(Tournament, tournament_id)
        if tournament is None:
            raise TournamentNotFound(f"Tournament with ID {tournament_id} not found.")
        return tournament

    def _round_rows(self, tournament_id: str, round_name: str, pairs) -> List[Dict]:
        return [
            {
                "tournament_id": tournament_id,
                "round": PlayoffRound(round_name).value,
                "match_number": match_number,
                "participant1_id": p1,
                "participant2_id": p2,
                "status": MatchStatus.PENDING.value,
            }
            for match_number, p1, p2 in pairs
        ]

    def generate_playoff_bracket(self, ctx: AuthorizedContext, tournament_id: str) -> List[PlayoffMatch]:
        """
        Seeds the opening playoff round from the final league table.

        Invoked once, after every league match is completed. If an earlier call
        inserted the playoff rows but never moved the tournament out of
        ``league``, calling it again finishes that transition.
        """
        require_context(ctx)
        tournament = self._get_tournament(tournament_id)

        existing = self.store.query(PlayoffMatch, tournament_id=tournament_id)
        if existing:
            if tournament.status == TournamentStatus.LEAGUE.value:
                return self._resume_playoffs(tournament_id, existing)
            raise AlreadyGenerated("The playoff bracket has already been generated for this tournament.")
        if tournament.status == TournamentStatus.COMPLETED.value:
            raise AlreadyGenerated("The tournament is already completed.")

        league_matches = self.store.query(LeagueMatch, tournament_id=tournament_id)
        if not league_matches:
            raise LeagueIncomplete("League fixtures have not been generated yet.")
        pending = [m for m in league_matches if m.status != MatchStatus.COMPLETED.value]
        if pending:
            raise LeagueIncomplete(f"{len(pending)} league match(es) are still pending.")

        qualifiers = self.qualifier_service.get_qualifiers(tournament_id)
        ranked_ids = [participant.id for _, participant in qualifiers]
        first_round = FIRST_ROUND_BY_QUALIFIERS[len(ranked_ids)]

        rows = self._round_rows(tournament_id, first_round, seed_first_round(ranked_ids))
        try:
            self.store.insert_many(PlayoffMatch, rows)
        except DuplicateRow as e:
            raise AlreadyGenerated("The playoff bracket has already been generated for this tournament.") from e

        self.store.update(
            Tournament, tournament_id,
            {"status": TournamentStatus.PLAYOFFS.value, "current_phase": first_round.value},
        )
        logger.info("Generated %s bracket with %d qualifiers for tournament %s",
                    first_round.value, len(ranked_ids), tournament_id)
        self.events.publish(BracketGenerated(tournament_id=tournament_id, round=first_round.value,
                                             qualifier_ids=tuple(ranked_ids)))

        return self.store.query(PlayoffMatch, order_by=["match_number"],
                                tournament_id=tournament_id, round=first_round.value)

    def submit_playoff_result(self, ctx: AuthorizedContext, tournament_id: str, match_id: str,
                              participant1_score: int, participant2_score: int) -> PlayoffMatch:
        require_context(ctx)
        match = self.store.get(PlayoffMatch, match_id)
        if match is None or match.tournament_id != tournament_id:
            raise MatchNotFound(f"Playoff match {match_id} not found in tournament {tournament_id}.")

        validate_scores(participant1_score, participant2_score)
        if participant1_score == participant2_score:
            # For single elimination, a winner must be decided.
            raise DrawNotAllowed("Playoff matches cannot be a draw. A winner must be determined.")

        if match.status != MatchStatus.PENDING.value:
            raise AlreadyCompleted(f"Playoff match {match.round} #{match.match_number} has already been completed.")

        round_name = match.round
        winner_id = match.participant1_id if participant1_score > participant2_score else match.participant2_id

        claimed = self.store.update(
            PlayoffMatch, match_id,
            {
                "participant1_score": participant1_score,
                "participant2_score": participant2_score,
                "winner_id": winner_id,
                "status": MatchStatus.COMPLETED.value,
            },
            expected={"status": MatchStatus.PENDING.value},
        )
        if not claimed:
            raise AlreadyCompleted(f"Playoff match {match_id} has already been completed.")

        logger.debug("Playoff match %s (%s) scored %d-%d, winner %s",
                     match_id, round_name, participant1_score, participant2_score, winner_id)
        self.events.publish(MatchCompleted(tournament_id=tournament_id, match_id=match_id,
                                           round=round_name, winner_id=winner_id))

        self._advance_if_round_complete(tournament_id, round_name)
        return self.store.get(PlayoffMatch, match_id)

    def sync_bracket(self, ctx: AuthorizedContext, tournament_id: str) -> Optional[str]:
        """
        Re-run round progression for the tournament's current phase.

        Repairs a submission that recorded its result but was interrupted before
        creating the next round, moving ``current_phase`` or completing the
        tournament, and a bracket generation that never left ``league``.
        Returns the phase afterwards.
        """
        require_context(ctx)
        tournament = self._get_tournament(tournament_id)
        if tournament.status == TournamentStatus.LEAGUE.value:
            existing = self.store.query(PlayoffMatch, tournament_id=tournament_id)
            if existing:
                self._resume_playoffs(tournament_id, existing)
                tournament = self._get_tournament(tournament_id)

        # Each pass moves the phase forward at most one round
        checked = None
        while (tournament.status == TournamentStatus.PLAYOFFS.value
               and tournament.current_phase and tournament.current_phase != checked):
            checked = tournament.current_phase
            self._advance_if_round_complete(tournament_id, checked)
            tournament = self._get_tournament(tournament_id)
        return tournament.current_phase

    def _resume_playoffs(self, tournament_id: str, existing: Sequence[PlayoffMatch]) -> List[PlayoffMatch]:
        """Finish a bracket generation that inserted its rows but never opened the playoffs."""
        first_round = min((PlayoffRound(m.round) for m in existing), key=ROUND_SEQUENCE.index)
        latest_round = max((PlayoffRound(m.round) for m in existing), key=ROUND_SEQUENCE.index)

        opened = self.store.update(
            Tournament, tournament_id,
            {"status": TournamentStatus.PLAYOFFS.value, "current_phase": latest_round.value},
            expected={"status": TournamentStatus.LEAGUE.value},
        )
        if opened:
            logger.warning("Tournament %s had playoff rows but was still in league, opened playoffs at %s",
                           tournament_id, latest_round.value)
            ranked_ids = [participant.id for _, participant in self.qualifier_service.get_qualifiers(tournament_id)]
            self.events.publish(BracketGenerated(tournament_id=tournament_id, round=first_round.value,
                                                 qualifier_ids=tuple(ranked_ids)))
            self._advance_if_round_complete(tournament_id, latest_round.value)

        return self.store.query(PlayoffMatch, order_by=["match_number"],
                                tournament_id=tournament_id, round=first_round.value)

    def _advance_if_round_complete(self, tournament_id: str, round_name: str):
        round_matches = self.store.query(PlayoffMatch, order_by=["match_number"],
                                         tournament_id=tournament_id, round=round_name)
        if not round_matches or any(m.status != MatchStatus.COMPLETED.value for m in round_matches):
            return

        following = next_round(round_name)
        if following is None:
            self._complete_tournament(tournament_id, round_matches[0].winner_id)
            return

        try:
            self._create_round(tournament_id, following, pair_winners(round_matches))
        except RoundAlreadyExists as e:
            logger.warning("%s Not creating it again.", e.message)

        # Conditional on the phase so a repeated or concurrent advance moves it once
        advanced = self.store.update(
            Tournament, tournament_id,
            {"current_phase": following.value},
            expected={"current_phase": PlayoffRound(round_name).value},
        )
        if not advanced:
            return
        logger.info("Tournament %s advanced to %s", tournament_id, following.value)
        self.events.publish(RoundAdvanced(tournament_id=tournament_id, round=following.value))

    def _create_round(self, tournament_id: str, round_name: PlayoffRound, pairs):
        if self.store.count(PlayoffMatch, tournament_id=tournament_id, round=round_name.value) > 0:
            raise RoundAlreadyExists(f"Round {round_name.value} already exists for tournament {tournament_id}.")
        try:
            self.store.insert_many(PlayoffMatch, self._round_rows(tournament_id, round_name, pairs))
        except DuplicateRow as e:
            # A concurrent submission inserted the round between the check and the insert
            raise RoundAlreadyExists(
                f"Round {round_name.value} was created concurrently for tournament {tournament_id}."
            ) from e

    def _complete_tournament(self, tournament_id: str, champion_id: str):
        completed = self.store.update(
            Tournament, tournament_id,
            {"status": TournamentStatus.COMPLETED.value, "current_phase": PlayoffRound.FINAL.value},
            expected={"status": TournamentStatus.PLAYOFFS.value},
        )
        if not completed:
            logger.warning("Tournament %s was already completed", tournament_id)
            return
        logger.info("Tournament %s completed, champion %s", tournament_id, champion_id)
        self.events.publish(TournamentCompleted(tournament_id=tournament_id, champion_id=champion_id))

    def get_bracket(self, tournament_id: str) -> Dict:
        tournament = self._get_tournament(tournament_id)
        matches = self.store.query(PlayoffMatch, order_by=["match_number"], tournament_id=tournament_id)
        rounds = []
        for round_name in ROUND_SEQUENCE:
            round_matches = [m for m in matches if m.round == round_name.value]
            if round_matches:
                rounds.append({"round": round_name.value, "matches": round_matches})
        return {
            "tournament_id": tournament_id,
            "status": tournament.status,
            "current_phase": tournament.current_phase,
            "rounds": rounds,
            "champion": self.get_champion(tournament_id),
        }

    def get_champion(self, tournament_id: str) -> Optional[Participant]:
        finals = self.store.query(PlayoffMatch, tournament_id=tournament_id, round=PlayoffRound.FINAL.value)
        if not finals or finals[0].status != MatchStatus.COMPLETED.value:
            return None
        return finals[0].winner
