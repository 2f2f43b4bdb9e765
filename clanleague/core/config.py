from enum import Enum

from pydantic_settings import BaseSettings


class LeagueDrawPolicy(str, Enum):
    REJECT = "reject"
    PARTICIPANT2_WINS = "participant2_wins"


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./clanleague.db"
    SECRET_KEY: str = "YOUR_SECRET_KEY_HERE"
    ADMIN_PASSWORD: str = "YOUR_ADMIN_PASSWORD_HERE"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    LEAGUE_DRAW_POLICY: LeagueDrawPolicy = LeagueDrawPolicy.REJECT
    MIN_PARTICIPANTS: int = 4
    MAX_PARTICIPANTS: int = 32

    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"

settings = Settings()
