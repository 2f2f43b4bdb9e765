from fastapi import APIRouter, HTTPException, status

from clanleague.core.exceptions import NotAuthorized
from clanleague.schemas import auth_schemas
from clanleague.services import auth_service

router = APIRouter()


@router.post("/login", response_model=auth_schemas.Token)
async def login(login_request: auth_schemas.LoginRequest):
    """Exchange the admin password for a bearer token."""
    try:
        ctx = auth_service.authenticate_admin(login_request.password)
    except NotAuthorized as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return auth_service.issue_token(ctx)
