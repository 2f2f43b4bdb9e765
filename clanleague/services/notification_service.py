"""
Change notifications published by the engine after each successful mutation.

Subscribers (a websocket fan-out, a cache invalidator, tests) register a
callable and receive the event objects below. The engine never depends on
any subscriber: a failing handler is logged and the mutation stands.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TournamentEvent:
    tournament_id: str


@dataclass(frozen=True)
class FixturesGenerated(TournamentEvent):
    match_count: int


@dataclass(frozen=True)
class StandingsChanged(TournamentEvent):
    pass


@dataclass(frozen=True)
class MatchCompleted(TournamentEvent):
    match_id: str
    round: str  # "league" for league matches
    winner_id: Optional[str]


@dataclass(frozen=True)
class BracketGenerated(TournamentEvent):
    round: str
    qualifier_ids: tuple


@dataclass(frozen=True)
class RoundAdvanced(TournamentEvent):
    round: str


@dataclass(frozen=True)
class TournamentCompleted(TournamentEvent):
    champion_id: str


EventHandler = Callable[[TournamentEvent], None]


class EventPublisher:
    def __init__(self):
        self._handlers: List[EventHandler] = []

    def subscribe(self, handler: EventHandler) -> EventHandler:
        if handler not in self._handlers:
            self._handlers.append(handler)
        return handler

    def unsubscribe(self, handler: EventHandler) -> None:
        if handler in self._handlers:
            self._handlers.remove(handler)

    def publish(self, event: TournamentEvent) -> None:
        logger.debug("Publishing %s for tournament %s", type(event).__name__, event.tournament_id)
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                logger.exception("Event handler %r failed on %s", handler, type(event).__name__)


# Default process-wide publisher
event_bus = EventPublisher()
