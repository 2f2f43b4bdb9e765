"""
A four-clan tournament from registration to champion, driven through the
services the way the API drives them.
"""
from clanleague.models import LeagueMatch
from clanleague.services.notification_service import (
    BracketGenerated,
    FixturesGenerated,
    MatchCompleted,
    RoundAdvanced,
    TournamentCompleted,
)
from clanleague.services.qualifier_service import QualifierService

RESULTS = {
    ("A", "B"): (3, 0),
    ("A", "C"): (2, 1),
    ("A", "D"): (3, 1),
    ("B", "C"): (2, 0),
    ("B", "D"): (1, 0),
    ("C", "D"): (2, 1),
}


def test_four_clan_tournament(make_tournament, fixture_service, standings_service, bracket_service,
                              store, events, ctx):
    tournament = make_tournament(names=["A", "B", "C", "D"])
    fixtures = fixture_service.generate_fixtures(ctx, tournament.id)
    assert len(fixtures) == 6

    for match in store.query(LeagueMatch, order_by=["match_number"], tournament_id=tournament.id):
        key = (match.participant1.name, match.participant2.name)
        standings_service.submit_league_result(ctx, tournament.id, match.id, *RESULTS[key])

    table = QualifierService(store).get_standings(tournament.id)
    assert [(row["participant"].name, row["points"], row["crown_difference"]) for row in table] == [
        ("A", 9, 6), ("B", 6, 0), ("C", 3, -2), ("D", 0, -4),
    ]
    assert all(row["qualified"] for row in table)

    semis = bracket_service.generate_playoff_bracket(ctx, tournament.id)
    assert [(m.participant1.name, m.participant2.name) for m in semis] == [("A", "D"), ("B", "C")]

    bracket_service.submit_playoff_result(ctx, tournament.id, semis[0].id, 2, 1)
    bracket_service.submit_playoff_result(ctx, tournament.id, semis[1].id, 0, 2)

    bracket = bracket_service.get_bracket(tournament.id)
    final = bracket["rounds"][-1]["matches"][0]
    assert bracket["current_phase"] == "final"
    assert (final.participant1.name, final.participant2.name) == ("A", "C")

    bracket_service.submit_playoff_result(ctx, tournament.id, final.id, 1, 3)

    bracket = bracket_service.get_bracket(tournament.id)
    assert bracket["status"] == "completed"
    assert bracket["champion"].name == "C"

    kinds = [type(e) for e in events.received]
    assert kinds.count(FixturesGenerated) == 1
    assert kinds.count(BracketGenerated) == 1
    assert kinds.count(RoundAdvanced) == 1
    assert kinds.count(TournamentCompleted) == 1
    assert kinds.count(MatchCompleted) == 6 + 3
