"""Authentication endpoints."""

from fastapi import APIRouter, status

from dental_api.dependencies import DatabaseSession
from dental_api.schemas.auth import LoginRequest, LoginResponse, TokenRefresh
from dental_api.services.auth_service import AuthService

router = APIRouter()


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Staff login",
)
async def login(
    request: LoginRequest,
    db: DatabaseSession,
) -> LoginResponse:
    """
    Authenticate with email and password inside a clinic.

    The returned access token carries the user ID, clinic ID and role used
    by every authenticated endpoint.

    Args:
        request: Email, password and clinic subdomain
        db: Database session

    Returns:
        Access token, refresh token, and user information
    """
    return await AuthService(db).login(request)


@router.post(
    "/refresh",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Refresh access token",
)
async def refresh_token(
    request: TokenRefresh,
    db: DatabaseSession,
) -> LoginResponse:
    """
    Exchange a refresh token for a new token pair.

    Args:
        request: Refresh token
        db: Database session

    Returns:
        New access token and refresh token
    """
    return await AuthService(db).refresh(request.refresh_token)
