"""API Dependencies - Authentication and service access"""
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from api.schemas import AuthenticatedUser
from application.services import ReservationService
from infrastructure.config import Settings
from infrastructure.security import InvalidTokenError, decode_access_token

# Tokens are issued by the users service; this API only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_reservation_service(request: Request) -> ReservationService:
    return request.app.state.reservation_service


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    settings: Settings = Depends(get_settings),
) -> AuthenticatedUser:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token, settings)
    except InvalidTokenError:
        raise credentials_exception

    user_id = payload.get("sub")
    if not user_id:
        raise credentials_exception

    return AuthenticatedUser(
        user_id=user_id,
        email=payload.get("email"),
        role=payload.get("role", "user"),
    )
