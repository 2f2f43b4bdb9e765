from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session

from clanleague.core.database import get_db
from clanleague.core.exceptions import TournamentError
from clanleague.services.bracket_service import BracketService
from clanleague.services.fixture_service import FixtureService
from clanleague.services.notification_service import event_bus
from clanleague.services.qualifier_service import QualifierService
from clanleague.services.standings_service import StandingsService
from clanleague.services.tournament_service import TournamentService
from clanleague.store.datastore import DataStore, SqlAlchemyDataStore


def get_store(db: Session = Depends(get_db)) -> DataStore:
    return SqlAlchemyDataStore(db)


def get_tournament_service(store: DataStore = Depends(get_store)) -> TournamentService:
    return TournamentService(store)


def get_fixture_service(store: DataStore = Depends(get_store)) -> FixtureService:
    return FixtureService(store, events=event_bus)


def get_standings_service(store: DataStore = Depends(get_store)) -> StandingsService:
    return StandingsService(store, events=event_bus)


def get_qualifier_service(store: DataStore = Depends(get_store)) -> QualifierService:
    return QualifierService(store)


def get_bracket_service(store: DataStore = Depends(get_store)) -> BracketService:
    return BracketService(store, events=event_bus)


def http_error(e: TournamentError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message)
