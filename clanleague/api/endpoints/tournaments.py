from typing import List

from fastapi import APIRouter, Depends, status

from clanleague.api.dependencies import (
    get_bracket_service,
    get_fixture_service,
    get_qualifier_service,
    get_standings_service,
    get_tournament_service,
    http_error,
)
from clanleague.core.exceptions import TournamentError
from clanleague.core.security import AuthorizedContext
from clanleague.schemas import (
    match_schemas,
    participant_schemas,
    standing_schemas,
    tournament_schemas,
)
from clanleague.services.auth_service import get_authorized_context
from clanleague.services.bracket_service import BracketService
from clanleague.services.fixture_service import FixtureService
from clanleague.services.qualifier_service import QualifierService
from clanleague.services.standings_service import StandingsService
from clanleague.services.tournament_service import TournamentService

# Plain def routes: the SQLAlchemy session blocks, so FastAPI runs them in its threadpool.
router = APIRouter()


# --- Tournament CRUD ---

@router.post("", response_model=tournament_schemas.TournamentDetail, status_code=status.HTTP_201_CREATED)
def create_tournament(
    tournament_in: tournament_schemas.TournamentCreate,
    ctx: AuthorizedContext = Depends(get_authorized_context),
    service: TournamentService = Depends(get_tournament_service),
):
    """
    Creates a tournament in the setup phase.

    - **name**: 1-100 characters.
    - **description** (optional): free text shown on the public page.
    - **rules** (optional): ordered rule strings; blank entries are dropped.
    - **participants** (optional): initial roster, seeded in the given order.
    """
    try:
        return service.create_tournament(ctx, tournament_in)
    except TournamentError as e:
        raise http_error(e)


@router.get("", response_model=List[tournament_schemas.TournamentRead])
def list_tournaments(service: TournamentService = Depends(get_tournament_service)):
    return service.list_tournaments()


@router.get("/{tournament_id}", response_model=tournament_schemas.TournamentDetail)
def get_tournament(tournament_id: str, service: TournamentService = Depends(get_tournament_service)):
    try:
        return service.get_tournament(tournament_id)
    except TournamentError as e:
        raise http_error(e)


@router.patch("/{tournament_id}", response_model=tournament_schemas.TournamentDetail)
def update_tournament(
    tournament_id: str,
    tournament_update: tournament_schemas.TournamentUpdate,
    ctx: AuthorizedContext = Depends(get_authorized_context),
    service: TournamentService = Depends(get_tournament_service),
):
    try:
        return service.update_tournament(ctx, tournament_id, tournament_update)
    except TournamentError as e:
        raise http_error(e)


@router.delete("/{tournament_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_tournament(
    tournament_id: str,
    ctx: AuthorizedContext = Depends(get_authorized_context),
    service: TournamentService = Depends(get_tournament_service),
):
    try:
        service.delete_tournament(ctx, tournament_id)
    except TournamentError as e:
        raise http_error(e)


# --- Participants ---

@router.get("/{tournament_id}/participants", response_model=List[participant_schemas.ParticipantRead])
def list_participants(tournament_id: str, service: TournamentService = Depends(get_tournament_service)):
    try:
        return service.list_participants(tournament_id)
    except TournamentError as e:
        raise http_error(e)


@router.post("/{tournament_id}/participants", response_model=participant_schemas.ParticipantRead,
             status_code=status.HTTP_201_CREATED)
def add_participant(
    tournament_id: str,
    participant_in: participant_schemas.ParticipantCreate,
    ctx: AuthorizedContext = Depends(get_authorized_context),
    service: TournamentService = Depends(get_tournament_service),
):
    try:
        return service.add_participant(ctx, tournament_id, participant_in)
    except TournamentError as e:
        raise http_error(e)


@router.patch("/{tournament_id}/participants/{participant_id}",
              response_model=participant_schemas.ParticipantRead)
def update_participant(
    tournament_id: str,
    participant_id: str,
    participant_update: participant_schemas.ParticipantUpdate,
    ctx: AuthorizedContext = Depends(get_authorized_context),
    service: TournamentService = Depends(get_tournament_service),
):
    try:
        return service.update_participant(ctx, tournament_id, participant_id, participant_update)
    except TournamentError as e:
        raise http_error(e)


@router.delete("/{tournament_id}/participants/{participant_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_participant(
    tournament_id: str,
    participant_id: str,
    ctx: AuthorizedContext = Depends(get_authorized_context),
    service: TournamentService = Depends(get_tournament_service),
):
    try:
        service.delete_participant(ctx, tournament_id, participant_id)
    except TournamentError as e:
        raise http_error(e)


# --- League phase ---

@router.post("/{tournament_id}/fixtures", response_model=List[match_schemas.LeagueMatchRead],
             status_code=status.HTTP_201_CREATED)
def generate_fixtures(
    tournament_id: str,
    ctx: AuthorizedContext = Depends(get_authorized_context),
    service: FixtureService = Depends(get_fixture_service),
):
    """Generates the round-robin schedule and opens the league."""
    try:
        return service.generate_fixtures(ctx, tournament_id)
    except TournamentError as e:
        raise http_error(e)


@router.get("/{tournament_id}/standings", response_model=List[standing_schemas.StandingRead])
def get_standings(tournament_id: str, service: QualifierService = Depends(get_qualifier_service)):
    try:
        return service.get_standings(tournament_id)
    except TournamentError as e:
        raise http_error(e)


@router.post("/{tournament_id}/standings/recalculate", response_model=List[standing_schemas.StandingRead])
def recalculate_standings(
    tournament_id: str,
    ctx: AuthorizedContext = Depends(get_authorized_context),
    service: StandingsService = Depends(get_standings_service),
    qualifier_service: QualifierService = Depends(get_qualifier_service),
):
    """Rebuilds the league table from completed matches. Safe to repeat."""
    try:
        service.recalculate_standings(ctx, tournament_id)
        return qualifier_service.get_standings(tournament_id)
    except TournamentError as e:
        raise http_error(e)


# --- Playoffs ---

@router.post("/{tournament_id}/playoffs", response_model=List[match_schemas.PlayoffMatchRead],
             status_code=status.HTTP_201_CREATED)
def generate_playoff_bracket(
    tournament_id: str,
    ctx: AuthorizedContext = Depends(get_authorized_context),
    service: BracketService = Depends(get_bracket_service),
):
    """Seeds the opening playoff round once every league match is completed."""
    try:
        return service.generate_playoff_bracket(ctx, tournament_id)
    except TournamentError as e:
        raise http_error(e)


@router.get("/{tournament_id}/bracket", response_model=match_schemas.BracketRead)
def get_bracket(tournament_id: str, service: BracketService = Depends(get_bracket_service)):
    try:
        return service.get_bracket(tournament_id)
    except TournamentError as e:
        raise http_error(e)


@router.post("/{tournament_id}/bracket/sync", response_model=match_schemas.BracketRead)
def sync_bracket(
    tournament_id: str,
    ctx: AuthorizedContext = Depends(get_authorized_context),
    service: BracketService = Depends(get_bracket_service),
):
    try:
        service.sync_bracket(ctx, tournament_id)
        return service.get_bracket(tournament_id)
    except TournamentError as e:
        raise http_error(e)
