"""Authentication endpoints.

POST /api/signup          - Create a normal user account
POST /api/login           - Verify credentials, start a server-side session
POST /api/logout          - Destroy the session
GET  /api/me              - Current principal
PUT  /api/update-password - Change password after re-verifying the current one
"""

import logging

from fastapi import APIRouter, HTTPException, Request, Response, status

from ratings_api.models import Store, User
from ratings_api.routes.deps import CurrentPrincipal
from ratings_api.schemas import (
    LoginRequest,
    MessageResponse,
    PasswordUpdateRequest,
    PrincipalOut,
    PrincipalResponse,
    SignupRequest,
    UserOut,
    UserResponse,
)
from ratings_api.services.auth import (
    InvalidCredentialsError,
    Principal,
    PrincipalNotFoundError,
    authenticate,
    end_session,
    get_account,
    start_session,
    update_password,
)
from ratings_api.services.users import EmailTakenError, create_user
from ratings_api.settings import get_settings

router = APIRouter()
logger = logging.getLogger("uvicorn.error")

INVALID_CREDENTIALS = "Invalid email or password"


def _principal_out(principal: Principal, account: User | Store) -> PrincipalOut:
    return PrincipalOut(
        id=account.id,
        name=account.name,
        email=account.email,
        address=account.address,
        role=principal.role.value,
        created_at=account.created_at,
    )


def _set_session_cookie(response: Response, session_id: str) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_id,
        max_age=settings.session_ttl_seconds,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
    )


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def signup(request: SignupRequest) -> UserResponse:
    """Create a normal user account."""
    try:
        user = await create_user(
            name=request.name,
            email=request.email,
            password=request.password,
            address=request.address,
            role="user",
        )
    except EmailTakenError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="User with this email already exists",
        )

    return UserResponse(message="User created successfully", user=UserOut.model_validate(user))


@router.post("/login", response_model=PrincipalResponse)
async def login(body: LoginRequest, request: Request, response: Response) -> PrincipalResponse:
    """Log in as a user, admin or store owner.

    Any session id the client already holds is discarded and a new one is
    issued, so a pre-login id can never become authenticated.
    """
    try:
        principal, account = await authenticate(body.email, body.password)
    except InvalidCredentialsError:
        logger.info("[auth] login failed")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    previous = request.cookies.get(get_settings().session_cookie_name)
    session_id = await start_session(principal, previous_session_id=previous)
    _set_session_cookie(response, session_id)

    logger.info("[auth] login principal_id=%s role=%s", principal.id, principal.role.value)
    return PrincipalResponse(message="Login successful", user=_principal_out(principal, account))


@router.post("/logout", response_model=MessageResponse)
async def logout(request: Request, response: Response) -> MessageResponse:
    settings = get_settings()
    session_id = request.cookies.get(settings.session_cookie_name)
    if session_id:
        await end_session(session_id)

    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite=settings.session_cookie_samesite,
    )
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=PrincipalResponse)
async def me(principal: CurrentPrincipal) -> PrincipalResponse:
    account = await get_account(principal)
    if account is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Account no longer exists")
    return PrincipalResponse(message="Authenticated", user=_principal_out(principal, account))


@router.put("/update-password", response_model=MessageResponse)
async def change_password(body: PasswordUpdateRequest, principal: CurrentPrincipal) -> MessageResponse:
    """Change the caller's password. Works for users, admins and store owners."""
    try:
        await update_password(principal, body.current_password, body.new_password)
    except InvalidCredentialsError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Current password is incorrect",
        )
    except PrincipalNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account not found")

    return MessageResponse(message="Password updated successfully")
