import pytest

from clanleague.core.exceptions import DuplicateRow
from clanleague.models import LeagueMatch, MatchStatus, StandingsRecord, Tournament


@pytest.fixture
def tournament_id(store):
    tournament_id, = store.insert_many(Tournament, [{"name": "Store Cup", "rules": []}])
    return tournament_id


class TestSqlAlchemyDataStore:

    def test_insert_many_returns_ids(self, store):
        ids = store.insert_many(Tournament, [{"name": "A"}, {"name": "B"}])

        assert len(ids) == 2
        assert {store.get(Tournament, i).name for i in ids} == {"A", "B"}

    def test_get_missing_returns_none(self, store):
        assert store.get(Tournament, "nope") is None

    def test_query_filters_and_orders(self, store):
        store.insert_many(Tournament, [
            {"name": "b", "status": "setup"},
            {"name": "a", "status": "setup"},
            {"name": "c", "status": "league"},
        ])

        assert [t.name for t in store.query(Tournament, order_by=["name"], status="setup")] == ["a", "b"]
        assert [t.name for t in store.query(Tournament, order_by=["-name"])] == ["c", "b", "a"]
        assert store.count(Tournament, status="league") == 1

    def test_conditional_update(self, store, tournament_id):
        assert store.update(Tournament, tournament_id, {"status": "league"}, expected={"status": "setup"}) is True
        # The guard no longer holds
        assert store.update(Tournament, tournament_id, {"status": "setup"}, expected={"status": "setup"}) is False
        assert store.get(Tournament, tournament_id).status == "league"

    def test_update_missing_row(self, store):
        assert store.update(Tournament, "nope", {"name": "x"}) is False

    def test_increment_is_relative(self, store, make_tournament):
        tournament = make_tournament(count=4)
        participant = tournament.participants[0]
        record_id, = store.insert_many(StandingsRecord, [
            {"tournament_id": tournament.id, "participant_id": participant.id}
        ])

        store.increment(StandingsRecord, record_id, {"wins": 1, "points": 3, "crown_difference": -2})
        store.increment(StandingsRecord, record_id, {"wins": 1, "points": 3, "crown_difference": 1})

        record = store.get(StandingsRecord, record_id)
        assert (record.wins, record.points, record.crown_difference, record.losses) == (2, 6, -1, 0)

    def test_unique_constraint_raises_duplicate_row(self, store, make_tournament):
        tournament = make_tournament(count=4)
        p1, p2 = tournament.participants[:2]
        row = {
            "tournament_id": tournament.id, "match_number": 1,
            "participant1_id": p1.id, "participant2_id": p2.id,
            "status": MatchStatus.PENDING.value,
        }
        store.insert_many(LeagueMatch, [row])

        with pytest.raises(DuplicateRow):
            store.insert_many(LeagueMatch, [dict(row)])
        # Session is usable again after the rollback
        assert store.count(LeagueMatch, tournament_id=tournament.id) == 1

    def test_duplicate_batch_inserts_nothing(self, store, make_tournament):
        tournament = make_tournament(count=4)
        p1, p2 = tournament.participants[:2]
        rows = [
            {"tournament_id": tournament.id, "match_number": 7,
             "participant1_id": p1.id, "participant2_id": p2.id}
            for _ in range(2)
        ]

        with pytest.raises(DuplicateRow):
            store.insert_many(LeagueMatch, rows)
        assert store.count(LeagueMatch, tournament_id=tournament.id) == 0

    def test_delete(self, store, tournament_id):
        assert store.delete(Tournament, tournament_id) is True
        assert store.get(Tournament, tournament_id) is None
        assert store.delete(Tournament, tournament_id) is False
