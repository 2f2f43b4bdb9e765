import logging
from typing import List, Optional

from clanleague.core.config import settings
from clanleague.core.exceptions import (
    InvalidParticipantCount,
    ParticipantLocked,
    ParticipantNotFound,
    TournamentNotFound,
)
from clanleague.core.security import AuthorizedContext, require_context
from clanleague.models import (
    LeagueMatch,
    Participant,
    PlayoffMatch,
    Tournament,
    TournamentStatus,
)
from clanleague.schemas import participant_schemas, tournament_schemas
from clanleague.services.bracket_service import ROUND_SEQUENCE
from clanleague.store.datastore import DataStore

logger = logging.getLogger(__name__)


class TournamentService:
    def __init__(self, store: DataStore, max_participants: int = None):
        self.store = store
        self.max_participants = max_participants or settings.MAX_PARTICIPANTS

    def create_tournament(self, ctx: AuthorizedContext, tournament: tournament_schemas.TournamentCreate) -> Tournament:
        require_context(ctx)
        if len(tournament.participants) > self.max_participants:
            raise InvalidParticipantCount(
                f"A tournament holds at most {self.max_participants} participants, got {len(tournament.participants)}."
            )

        tournament_id, = self.store.insert_many(Tournament, [{
            "name": tournament.name,
            "description": tournament.description or None,
            "rules": tournament.rules,
            "status": TournamentStatus.SETUP.value,
            "current_phase": None,
        }])

        if tournament.participants:
            self.store.insert_many(Participant, [
                {
                    "tournament_id": tournament_id,
                    "name": p.name.strip(),
                    "tag": (p.tag or "").strip() or None,
                    "seed_position": index,
                }
                for index, p in enumerate(tournament.participants, start=1)
            ])

        logger.info("Created tournament %s (%s) with %d participant(s)",
                    tournament_id, tournament.name, len(tournament.participants))
        return self.get_tournament(tournament_id)

    def list_tournaments(self) -> List[Tournament]:
        return self.store.query(Tournament, order_by=["-created_at"])

    def get_tournament(self, tournament_id: str) -> Tournament:
        tournament = self.store.get(Tournament, tournament_id)
        if tournament is None:
            raise TournamentNotFound(f"Tournament with ID {tournament_id} not found.")
        return tournament

    def update_tournament(self, ctx: AuthorizedContext, tournament_id: str,
                          tournament_update: tournament_schemas.TournamentUpdate) -> Tournament:
        require_context(ctx)
        self.get_tournament(tournament_id)

        update_data = tournament_update.model_dump(exclude_unset=True)
        if "name" in update_data and update_data["name"] is not None:
            update_data["name"] = update_data["name"].strip()
        if "description" in update_data:
            update_data["description"] = update_data["description"] or None
        if update_data:
            self.store.update(Tournament, tournament_id, update_data)
        return self.get_tournament(tournament_id)

    def delete_tournament(self, ctx: AuthorizedContext, tournament_id: str) -> bool:
        require_context(ctx)
        self.get_tournament(tournament_id)
        # Participants, matches and standings go with it
        deleted = self.store.delete(Tournament, tournament_id)
        logger.info("Deleted tournament %s", tournament_id)
        return deleted

    # --- Participants ---

    def list_participants(self, tournament_id: str) -> List[Participant]:
        self.get_tournament(tournament_id)
        return self.store.query(Participant, order_by=["seed_position", "created_at"], tournament_id=tournament_id)

    def _fixtures_exist(self, tournament: Tournament) -> bool:
        return (tournament.status != TournamentStatus.SETUP.value
                or self.store.count(LeagueMatch, tournament_id=tournament.id) > 0)

    def add_participant(self, ctx: AuthorizedContext, tournament_id: str,
                        participant: participant_schemas.ParticipantCreate) -> Participant:
        require_context(ctx)
        tournament = self.get_tournament(tournament_id)
        if self._fixtures_exist(tournament):
            raise ParticipantLocked("Participants cannot be added once league fixtures exist.")

        current = self.list_participants(tournament_id)
        if len(current) >= self.max_participants:
            raise InvalidParticipantCount(f"A tournament holds at most {self.max_participants} participants.")

        next_seed = max((p.seed_position or 0 for p in current), default=0) + 1
        participant_id, = self.store.insert_many(Participant, [{
            "tournament_id": tournament_id,
            "name": participant.name.strip(),
            "tag": (participant.tag or "").strip() or None,
            "seed_position": next_seed,
        }])
        return self.store.get(Participant, participant_id)

    def get_participant(self, tournament_id: str, participant_id: str) -> Participant:
        participant = self.store.get(Participant, participant_id)
        if participant is None or participant.tournament_id != tournament_id:
            raise ParticipantNotFound(f"Participant {participant_id} not found in tournament {tournament_id}.")
        return participant

    def update_participant(self, ctx: AuthorizedContext, tournament_id: str, participant_id: str,
                           participant_update: participant_schemas.ParticipantUpdate) -> Participant:
        require_context(ctx)
        self.get_participant(tournament_id, participant_id)

        update_data = participant_update.model_dump(exclude_unset=True)
        if "name" in update_data:
            if update_data["name"] is None:
                del update_data["name"]
            else:
                update_data["name"] = update_data["name"].strip()
        if "tag" in update_data:
            update_data["tag"] = (update_data["tag"] or "").strip() or None
        if update_data:
            self.store.update(Participant, participant_id, update_data)
        return self.store.get(Participant, participant_id)

    def delete_participant(self, ctx: AuthorizedContext, tournament_id: str, participant_id: str) -> bool:
        """
        Remove a participant while the tournament is still being set up.

        Once fixtures exist the schedule and standings reference the
        participant, so deletion is refused rather than forfeiting matches.
        """
        require_context(ctx)
        tournament = self.get_tournament(tournament_id)
        self.get_participant(tournament_id, participant_id)
        if self._fixtures_exist(tournament):
            raise ParticipantLocked("Participants cannot be removed once league fixtures exist.")
        return self.store.delete(Participant, participant_id)

    # --- Matches ---

    def list_league_matches(self, tournament_id: str, status: Optional[str] = None) -> List[LeagueMatch]:
        self.get_tournament(tournament_id)
        filters = {"tournament_id": tournament_id}
        if status:
            filters["status"] = status
        return self.store.query(LeagueMatch, order_by=["match_number"], **filters)

    def list_playoff_matches(self, tournament_id: str, round_name: Optional[str] = None) -> List[PlayoffMatch]:
        self.get_tournament(tournament_id)
        filters = {"tournament_id": tournament_id}
        if round_name:
            filters["round"] = round_name
        matches = self.store.query(PlayoffMatch, order_by=["match_number"], **filters)
        round_index = {r.value: i for i, r in enumerate(ROUND_SEQUENCE)}
        return sorted(matches, key=lambda m: (round_index.get(m.round, len(round_index)), m.match_number))
