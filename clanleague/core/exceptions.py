"""
Error taxonomy of the tournament engine.

Every error carries the HTTP status the API layer answers with, so routes can
translate any ``TournamentError`` with a single ``except`` clause.

* ``InvalidInput`` - bad input, rejected before any write.
* ``StateConflict`` - the guard check failed; callers may treat these as
  "already done" signals.
* ``NotFound`` - the referenced row does not exist in this tournament.
* ``StoreError`` - the backing store failed; retrying the whole operation is safe.
"""


class TournamentError(Exception):
    status_code = 400

    def __init__(self, message: str = ""):
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


# --- Validation errors ---

class InvalidInput(TournamentError, ValueError):
    status_code = 400


class InvalidParticipantCount(InvalidInput):
    pass


class InsufficientParticipants(InvalidInput):
    pass


class InvalidScore(InvalidInput):
    pass


class DrawNotAllowed(InvalidScore):
    pass


# --- State conflicts ---

class StateConflict(TournamentError):
    status_code = 409


class AlreadyGenerated(StateConflict):
    pass


class AlreadyCompleted(StateConflict):
    pass


class LeagueIncomplete(StateConflict):
    pass


class RoundAlreadyExists(StateConflict):
    pass


class ParticipantLocked(StateConflict):
    pass


# --- Lookups ---

class NotFound(TournamentError, LookupError):
    status_code = 404


class TournamentNotFound(NotFound):
    pass


class MatchNotFound(NotFound):
    pass


class ParticipantNotFound(NotFound):
    pass


# --- Authorization ---

class NotAuthorized(TournamentError, PermissionError):
    status_code = 403


# --- Store ---

class StoreError(TournamentError):
    status_code = 503


class DuplicateRow(StoreError):
    status_code = 409
