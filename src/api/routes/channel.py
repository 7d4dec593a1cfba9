"""Marketplace account connection endpoints (OAuth authorization code flow)."""

from fastapi import APIRouter, Depends, Query

from src.api.dependencies import get_channel_connection_use_case
from src.application.dto.responses import (
    ActionResponse,
    AuthorizationUrlResponse,
    ConnectionStatusResponse,
    ErrorResponse,
)
from src.application.use_cases import ChannelConnectionUseCase

router = APIRouter(prefix="/api/channel", tags=["channel"])


@router.get("/auth-url", response_model=AuthorizationUrlResponse)
async def authorization_url(
    state: str | None = Query(default=None),
    use_case: ChannelConnectionUseCase = Depends(get_channel_connection_use_case),
) -> AuthorizationUrlResponse:
    """URL the operator opens to grant this app access to the account."""
    return await use_case.authorization_url(state)


@router.get(
    "/callback",
    response_model=ConnectionStatusResponse,
    responses={400: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def oauth_callback(
    code: str = Query(default=""),
    use_case: ChannelConnectionUseCase = Depends(get_channel_connection_use_case),
) -> ConnectionStatusResponse:
    """Exchange the authorization code and store the token pair."""
    return await use_case.connect(code)


@router.get("/status", response_model=ConnectionStatusResponse)
async def connection_status(
    use_case: ChannelConnectionUseCase = Depends(get_channel_connection_use_case),
) -> ConnectionStatusResponse:
    return await use_case.status()


@router.post("/disconnect", response_model=ActionResponse)
async def disconnect(
    use_case: ChannelConnectionUseCase = Depends(get_channel_connection_use_case),
) -> ActionResponse:
    """Forget the stored credential."""
    return await use_case.disconnect()
