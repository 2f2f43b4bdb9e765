"""
Shared pytest fixtures: an in-memory SQLite database per test, the store on
top of it, an authorized context and small builders for tournaments at
various stages.
"""
from contextlib import contextmanager
from datetime import datetime
from unittest.mock import patch

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from clanleague.core.config import LeagueDrawPolicy
from clanleague.core.database import build_engine
from clanleague.core.exceptions import StoreError
from clanleague.core.security import AuthorizedContext
from clanleague.models import Base, LeagueMatch, MatchStatus, Tournament
from clanleague.schemas.participant_schemas import ParticipantCreate
from clanleague.schemas.tournament_schemas import TournamentCreate
from clanleague.services.bracket_service import BracketService
from clanleague.services.fixture_service import FixtureService
from clanleague.services.notification_service import EventPublisher
from clanleague.services.standings_service import StandingsService
from clanleague.services.tournament_service import TournamentService
from clanleague.store.datastore import SqlAlchemyDataStore


@pytest.fixture
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(db_session):
    return SqlAlchemyDataStore(db_session)


@pytest.fixture
def tournament_update_fails_once(store):
    """
    Context manager under which the next update of a Tournament row raises
    StoreError, as if the connection dropped mid-operation. Other writes go through.
    """
    @contextmanager
    def _failing():
        real_update = store.update
        armed = [True]

        def update(model, row_id, patch_values, expected=None):
            if model is Tournament and armed[0]:
                armed[0] = False
                raise StoreError("Store failure updating tournaments: connection reset")
            return real_update(model, row_id, patch_values, expected=expected)

        with patch.object(store, "update", side_effect=update):
            yield
    return _failing


@pytest.fixture
def ctx():
    return AuthorizedContext(subject="admin", issued_at=datetime(2026, 1, 1))


@pytest.fixture
def events():
    """Publisher that records every event it sees."""
    publisher = EventPublisher()
    publisher.received = []
    publisher.subscribe(publisher.received.append)
    return publisher


@pytest.fixture
def tournament_service(store):
    return TournamentService(store)


@pytest.fixture
def fixture_service(store, events):
    return FixtureService(store, events=events)


@pytest.fixture
def standings_service(store, events):
    return StandingsService(store, events=events, draw_policy=LeagueDrawPolicy.REJECT)


@pytest.fixture
def bracket_service(store, events):
    return BracketService(store, events=events)


@pytest.fixture
def make_tournament(tournament_service, ctx):
    """Create a setup-phase tournament with participants named P1..Pn (or the given names)."""
    def _make(count=4, names=None, name="Clan Cup"):
        names = names or [f"P{i}" for i in range(1, count + 1)]
        data = TournamentCreate(
            name=name,
            description="Weekly clan tournament",
            rules=["Best of one", "", "No emotes"],
            participants=[ParticipantCreate(name=n, tag=f"#{n}") for n in names],
        )
        return tournament_service.create_tournament(ctx, data)
    return _make


@pytest.fixture
def league_tournament(make_tournament, fixture_service, ctx):
    """A tournament in the league phase with fixtures generated."""
    def _make(count=4, names=None):
        tournament = make_tournament(count=count, names=names)
        fixture_service.generate_fixtures(ctx, tournament.id)
        return tournament
    return _make


@pytest.fixture
def play_league(store, standings_service, ctx):
    """
    Complete every pending league match. The participant with the lower seed
    position wins 3-1, so the final table follows seed order exactly.
    """
    def _play(tournament_id):
        matches = store.query(LeagueMatch, order_by=["match_number"],
                              tournament_id=tournament_id, status=MatchStatus.PENDING.value)
        for match in matches:
            match_id = match.id
            seed1 = match.participant1.seed_position
            seed2 = match.participant2.seed_position
            if seed1 < seed2:
                standings_service.submit_league_result(ctx, tournament_id, match_id, 3, 1)
            else:
                standings_service.submit_league_result(ctx, tournament_id, match_id, 1, 3)
    return _play
