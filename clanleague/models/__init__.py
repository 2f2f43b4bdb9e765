from clanleague.core.database import Base

# Import all models here to ensure they are registered with Base
from .tournament import Tournament, TournamentStatus, TournamentPhase
from .participant import Participant
from .league_match import LeagueMatch, MatchStatus
from .standing import StandingsRecord
from .playoff_match import PlayoffMatch, PlayoffRound
