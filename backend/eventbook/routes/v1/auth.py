# backend/eventbook/routes/v1/auth.py
"""
Authentication routes - API v1

Endpoints:
    POST /register - Start a registration; e-mails a verification code
    POST /verify-email - Confirm the code; creates the account
    POST /resend-otp - New code for a pending registration
    POST /login - Exchange credentials for an access + refresh token pair
    POST /refresh-token - Rotate a refresh token into a new pair
    POST /logout - Revoke one refresh token
    POST /logout-all - Revoke every refresh token of the caller
    GET /me - The authenticated user
    PUT /profile - Update name, phone or password
"""

import asyncio
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, status

from ...api.dependencies import get_auth_service, get_current_user
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.auth import (
    LoginRequest,
    LogoutRequest,
    RefreshTokenRequest,
    RegisterRequest,
    RegistrationPendingResponse,
    ResendOtpRequest,
    TokenPairResponse,
    TokenResponse,
    VerifyEmailRequest,
)
from ...schemas.base_responses import SuccessResponse
from ...schemas.user import ProfileUpdateRequest, UserResponse
from ...services.auth_service import AuthService, AuthTokens

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _token_response(user: User, tokens: AuthTokens) -> TokenResponse:
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        user=UserResponse.model_validate(user),
    )


@router.post("/register", response_model=RegistrationPendingResponse)
async def register(
    payload: RegisterRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> RegistrationPendingResponse:
    try:
        email = await asyncio.to_thread(
            auth_service.register, payload.name, payload.email, payload.password, payload.phone
        )
        return RegistrationPendingResponse(email=email)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/verify-email", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
async def verify_email(
    payload: VerifyEmailRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    try:
        user, tokens = await asyncio.to_thread(auth_service.verify_email, payload.email, payload.otp)
        return _token_response(user, tokens)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/resend-otp", response_model=RegistrationPendingResponse)
async def resend_otp(
    payload: ResendOtpRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> RegistrationPendingResponse:
    try:
        email = await asyncio.to_thread(auth_service.resend_otp, payload.email)
        return RegistrationPendingResponse(email=email, message="New OTP sent to your email")
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: LoginRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenResponse:
    try:
        user, tokens = await asyncio.to_thread(auth_service.login, payload.email, payload.password)
        return _token_response(user, tokens)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/refresh-token", response_model=TokenPairResponse)
async def refresh_token(
    payload: RefreshTokenRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> TokenPairResponse:
    try:
        tokens = await asyncio.to_thread(auth_service.refresh_tokens, payload.refresh_token)
        return TokenPairResponse(access_token=tokens.access_token, refresh_token=tokens.refresh_token)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    payload: Optional[LogoutRequest] = None,
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> SuccessResponse:
    try:
        token = payload.refresh_token if payload else None
        await asyncio.to_thread(auth_service.logout, current_user, token)
        return SuccessResponse(message="Logged out successfully")
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/logout-all", response_model=SuccessResponse)
async def logout_all(
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> SuccessResponse:
    try:
        revoked = await asyncio.to_thread(auth_service.logout_all, current_user)
        return SuccessResponse(message="Logged out from all devices", data={"revoked": revoked})
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/me", response_model=UserResponse)
async def read_users_me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)


@router.put("/profile", response_model=UserResponse)
async def update_profile(
    payload: ProfileUpdateRequest,
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service),
) -> UserResponse:
    try:
        user = await asyncio.to_thread(
            auth_service.update_profile,
            current_user,
            payload.name,
            payload.phone,
            payload.current_password,
            payload.new_password,
        )
        return UserResponse.model_validate(user)
    except DomainException as e:
        handle_domain_exception(e)
