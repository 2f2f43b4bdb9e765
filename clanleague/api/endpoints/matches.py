from typing import List, Optional

from fastapi import APIRouter, Depends

from clanleague.api.dependencies import (
    get_bracket_service,
    get_standings_service,
    get_tournament_service,
    http_error,
)
from clanleague.core.exceptions import TournamentError
from clanleague.core.security import AuthorizedContext
from clanleague.schemas import match_schemas
from clanleague.services.auth_service import get_authorized_context
from clanleague.services.bracket_service import BracketService
from clanleague.services.standings_service import StandingsService
from clanleague.services.tournament_service import TournamentService

# Plain def routes: the SQLAlchemy session blocks, so FastAPI runs them in its threadpool.
router = APIRouter()


@router.get("/{tournament_id}/league-matches", response_model=List[match_schemas.LeagueMatchRead])
def list_league_matches(
    tournament_id: str,
    status: Optional[str] = None,
    service: TournamentService = Depends(get_tournament_service),
):
    try:
        return service.list_league_matches(tournament_id, status=status)
    except TournamentError as e:
        raise http_error(e)


@router.post("/{tournament_id}/league-matches/{match_id}/result", response_model=match_schemas.LeagueMatchRead)
def submit_league_result(
    tournament_id: str,
    match_id: str,
    result_in: match_schemas.ScoreSubmission,
    ctx: AuthorizedContext = Depends(get_authorized_context),
    service: StandingsService = Depends(get_standings_service),
):
    try:
        return service.submit_league_result(
            ctx, tournament_id, match_id, result_in.participant1_score, result_in.participant2_score
        )
    except TournamentError as e:
        raise http_error(e)


@router.get("/{tournament_id}/playoff-matches", response_model=List[match_schemas.PlayoffMatchRead])
def list_playoff_matches(
    tournament_id: str,
    round: Optional[str] = None,
    service: TournamentService = Depends(get_tournament_service),
):
    try:
        return service.list_playoff_matches(tournament_id, round_name=round)
    except TournamentError as e:
        raise http_error(e)


@router.post("/{tournament_id}/playoff-matches/{match_id}/result", response_model=match_schemas.PlayoffMatchRead)
def submit_playoff_result(
    tournament_id: str,
    match_id: str,
    result_in: match_schemas.ScoreSubmission,
    ctx: AuthorizedContext = Depends(get_authorized_context),
    service: BracketService = Depends(get_bracket_service),
):
    """Records a playoff result; completing a round creates the next one."""
    try:
        return service.submit_playoff_result(
            ctx, tournament_id, match_id, result_in.participant1_score, result_in.participant2_score
        )
    except TournamentError as e:
        raise http_error(e)
