import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from clanleague.api.endpoints import auth as auth_endpoints
from clanleague.api.endpoints import tournaments as tournament_endpoints
from clanleague.api.endpoints import matches as match_endpoints
from clanleague.core.config import settings
from clanleague.core.database import engine
from clanleague.core.logging import configure_logging
from clanleague.models import Base

configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_tables(bind=engine):
    Base.metadata.create_all(bind=bind)
    logger.info("Database schema ready")


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    yield
    logger.info("Shutting down application...")


app = FastAPI(title="Clan League Tournament API", lifespan=lifespan)

# Include routers
app.include_router(auth_endpoints.router, prefix="/auth", tags=["Authentication"])
app.include_router(tournament_endpoints.router, prefix="/tournaments", tags=["Tournaments"])
app.include_router(match_endpoints.router, prefix="/tournaments", tags=["Matches"])


@app.get("/")
async def read_root():
    return {"message": "Clan League Tournament API"}
