"""
DualAuth - Authentication Routes

Session mode (server-side session, signed `session_id` cookie):
- POST /auth/session/register  - Create user and session
- POST /auth/session/login     - Authenticate and create session
- POST /auth/session/logout    - Delete session, clear cookie
- GET  /auth/session/profile   - Current user
- GET  /auth/session/admin     - Admin-only probe

Token mode (bearer access token, `refreshToken` cookie):
- POST /auth/jwt/register       - Create user, issue token pair
- POST /auth/jwt/login          - Authenticate, issue token pair
- POST /auth/jwt/logout         - Revoke refresh token, clear cookie
- POST /auth/jwt/refresh-token  - New access token from refresh cookie
- GET  /auth/jwt/profile        - Current user
- GET  /auth/jwt/admin          - Admin-only probe
"""

from fastapi import APIRouter, Depends, Request, Response, status

from dualauth.auth.cookies import (
    REFRESH_COOKIE_NAME,
    clear_refresh_cookie,
    clear_session_cookie,
    set_refresh_cookie,
    set_session_cookie,
)
from dualauth.auth.dependencies import (
    current_session_id,
    get_session_service,
    get_token_service,
    require_session,
    require_session_role,
    require_token,
    require_token_role,
)
from dualauth.auth.errors import StoreFailure
from dualauth.auth.models import Role, User
from dualauth.auth.schemas import (
    AuthResponse,
    ErrorResponse,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserResponse,
)
from dualauth.auth.service import AuthService, Principal
from dualauth.auth.tokens import get_token_expiry_seconds
from dualauth.gateway.error_handlers import error_response


session_router = APIRouter(prefix="/auth/session", tags=["session authentication"])
token_router = APIRouter(prefix="/auth/jwt", tags=["token authentication"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    403: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def to_user_response(user: User) -> UserResponse:
    """Sanitize a user: only public fields are copied."""
    return UserResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        role=user.role.value,
        created_at=user.created_at,
    )


# =============================================================================
# SESSION MODE
# =============================================================================

@session_router.post(
    "/register",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Register and open a server-side session",
)
async def register_with_session(
    request: Request,
    response: Response,
    body: RegisterRequest,
    service: AuthService = Depends(get_session_service),
):
    result = await service.register(
        body.username,
        body.email,
        body.password,
        previous_session_id=current_session_id(request),
    )
    set_session_cookie(response, result.session_id)
    return AuthResponse(
        message="Registration successful (session)",
        data=to_user_response(result.user),
    )


@session_router.post(
    "/login",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="Authenticate and open a server-side session",
)
async def login_with_session(
    request: Request,
    response: Response,
    body: LoginRequest,
    service: AuthService = Depends(get_session_service),
):
    result = await service.login(
        body.email,
        body.password,
        previous_session_id=current_session_id(request),
    )
    set_session_cookie(response, result.session_id)
    return AuthResponse(
        message="Login successful (session)",
        data=to_user_response(result.user),
    )


@session_router.post(
    "/logout",
    response_model=MessageResponse,
    responses=ERROR_RESPONSES,
    summary="Destroy the current session",
)
async def logout_with_session(
    request: Request,
    response: Response,
    service: AuthService = Depends(get_session_service),
):
    """
    Delete the server-side session, then clear the cookie.
    
    The cookie is cleared even when the delete fails (500).
    """
    try:
        await service.logout(session_id=current_session_id(request))
    except StoreFailure as exc:
        failure = error_response(exc)
        clear_session_cookie(failure)
        return failure
    clear_session_cookie(response)
    return MessageResponse(message="Logout successful")


@session_router.get(
    "/profile",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="Get the user behind the current session",
)
async def profile_with_session(
    principal: Principal = Depends(require_session),
    service: AuthService = Depends(get_session_service),
):
    user = await service.get_profile(principal)
    return AuthResponse(message="Profile", data=to_user_response(user))


@session_router.get(
    "/admin",
    response_model=MessageResponse,
    responses=ERROR_RESPONSES,
    summary="Admin-only resource (session)",
)
async def admin_with_session(
    principal: Principal = Depends(require_session_role(Role.ADMIN)),
):
    return MessageResponse(message="Welcome, administrator (session)")


# =============================================================================
# TOKEN MODE
# =============================================================================

@token_router.post(
    "/register",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
    summary="Register and issue access/refresh tokens",
)
async def register_with_token(
    response: Response,
    body: RegisterRequest,
    service: AuthService = Depends(get_token_service),
):
    result = await service.register(body.username, body.email, body.password)
    set_refresh_cookie(response, result.refresh_token)
    return AuthResponse(
        message="Registration successful (JWT)",
        data=to_user_response(result.user),
        access_token=result.access_token,
        expires_in=get_token_expiry_seconds(),
    )


@token_router.post(
    "/login",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="Authenticate and issue access/refresh tokens",
)
async def login_with_token(
    response: Response,
    body: LoginRequest,
    service: AuthService = Depends(get_token_service),
):
    result = await service.login(body.email, body.password)
    set_refresh_cookie(response, result.refresh_token)
    return AuthResponse(
        message="Login successful (JWT)",
        data=to_user_response(result.user),
        access_token=result.access_token,
        expires_in=get_token_expiry_seconds(),
    )


@token_router.post(
    "/logout",
    response_model=MessageResponse,
    responses=ERROR_RESPONSES,
    summary="Revoke the refresh token and clear its cookie",
)
async def logout_with_token(
    request: Request,
    response: Response,
    service: AuthService = Depends(get_token_service),
):
    try:
        await service.logout(refresh_token=request.cookies.get(REFRESH_COOKIE_NAME))
    except StoreFailure as exc:
        failure = error_response(exc)
        clear_refresh_cookie(failure)
        return failure
    clear_refresh_cookie(response)
    return MessageResponse(message="Logout successful (JWT)")


@token_router.post(
    "/refresh-token",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="Exchange the refresh cookie for a new access token",
)
async def refresh_access_token(
    request: Request,
    service: AuthService = Depends(get_token_service),
):
    access_token = await service.refresh(request.cookies.get(REFRESH_COOKIE_NAME))
    return AuthResponse(
        message="Access token refreshed",
        access_token=access_token,
        expires_in=get_token_expiry_seconds(),
    )


@token_router.get(
    "/profile",
    response_model=AuthResponse,
    response_model_exclude_none=True,
    responses=ERROR_RESPONSES,
    summary="Get the user behind the bearer token",
)
async def profile_with_token(
    principal: Principal = Depends(require_token),
    service: AuthService = Depends(get_token_service),
):
    user = await service.get_profile(principal)
    return AuthResponse(message="Profile", data=to_user_response(user))


@token_router.get(
    "/admin",
    response_model=MessageResponse,
    responses=ERROR_RESPONSES,
    summary="Admin-only resource (JWT)",
)
async def admin_with_token(
    principal: Principal = Depends(require_token_role(Role.ADMIN)),
):
    return MessageResponse(message="Welcome, administrator (JWT)")
