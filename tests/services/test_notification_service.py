import logging
from unittest.mock import MagicMock

from clanleague.models import LeagueMatch
from clanleague.services.notification_service import (
    EventPublisher,
    RoundAdvanced,
    StandingsChanged,
)


class TestEventPublisher:

    def test_publish_reaches_every_subscriber(self):
        publisher = EventPublisher()
        first, second = MagicMock(), MagicMock()
        publisher.subscribe(first)
        publisher.subscribe(second)

        event = StandingsChanged(tournament_id="t1")
        publisher.publish(event)

        first.assert_called_once_with(event)
        second.assert_called_once_with(event)

    def test_subscribe_is_idempotent(self):
        publisher = EventPublisher()
        handler = MagicMock()
        publisher.subscribe(handler)
        publisher.subscribe(handler)

        publisher.publish(StandingsChanged(tournament_id="t1"))

        assert handler.call_count == 1

    def test_unsubscribe(self):
        publisher = EventPublisher()
        handler = MagicMock()
        publisher.subscribe(handler)
        publisher.unsubscribe(handler)
        publisher.unsubscribe(handler)

        publisher.publish(StandingsChanged(tournament_id="t1"))

        handler.assert_not_called()

    def test_failing_handler_is_logged_and_others_still_run(self, caplog):
        publisher = EventPublisher()
        broken = MagicMock(side_effect=RuntimeError("socket closed"))
        healthy = MagicMock()
        publisher.subscribe(broken)
        publisher.subscribe(healthy)

        with caplog.at_level(logging.ERROR, logger="clanleague.services.notification_service"):
            publisher.publish(RoundAdvanced(tournament_id="t1", round="semi"))

        healthy.assert_called_once()
        assert "RoundAdvanced" in caplog.text

    def test_events_are_values(self):
        assert RoundAdvanced(tournament_id="t1", round="final") == RoundAdvanced(tournament_id="t1", round="final")
        assert RoundAdvanced(tournament_id="t1", round="final") != RoundAdvanced(tournament_id="t1", round="semi")

    def test_engine_keeps_going_when_subscriber_fails(self, league_tournament, standings_service, events, store, ctx):
        events.subscribe(MagicMock(side_effect=RuntimeError("boom")))
        tournament = league_tournament(count=4)
        match = store.query(LeagueMatch, tournament_id=tournament.id)[0]

        result = standings_service.submit_league_result(ctx, tournament.id, match.id, 3, 1)

        assert result.status == "completed"
