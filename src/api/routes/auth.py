"""Authentication routes (signup, login, logout, password lifecycle)."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request, Response, status

from api.dependencies import get_auth_service, get_user_repo
from api.models import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    SignupRequest,
    UpdateMeRequest,
    UpdatePasswordRequest,
    UserData,
    UserEnvelope,
    UserResponse,
)
from api.security import (
    clear_session_cookie,
    get_current_user,
    get_current_user_required,
    restrict_to,
    set_session_cookie,
)
from domain.model.errors import NotFoundError, ValidationError
from domain.model.user import User, UserRole
from port.user_repository import UserRepository
from services.auth_service import AuthService, IssuedSession
from utils.config import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/users", tags=["auth"])


def _send_session(session: IssuedSession, response: Response, settings: Settings) -> AuthResponse:
    """Set the session cookie and build the success body."""
    set_session_cookie(response, session.token, settings)
    return AuthResponse(token=session.token, data=UserData(user=UserResponse.from_domain(session.user)))


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    body: SignupRequest,
    request: Request,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """Create an account, send the welcome mail and sign the user in.

    Raises:
        ValidationError: 400 if the passwords are too short or do not match
        ConflictError: 409 if the email is already registered
    """
    session = service.signup(
        email=body.email,
        password=body.password,
        password_confirm=body.password_confirm,
        welcome_url=f"{request.base_url}me",
        name=body.name,
    )
    return _send_session(session, response, settings)


@router.post("/login", response_model=AuthResponse)
async def login(
    body: LoginRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """Login user and return JWT token.

    Raises:
        ValidationError: 400 if email or password is missing
        IncorrectCredentialsError: 400, same message for unknown email and wrong password
    """
    session = service.login(body.email, body.password)
    return _send_session(session, response, settings)


@router.get("/logout", response_model=MessageResponse)
async def logout(response: Response, settings: Settings = Depends(get_settings)):
    """Replace the session cookie with a short-lived dummy. Always succeeds."""
    clear_session_cookie(response, settings)
    return MessageResponse()


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    request: Request,
    service: AuthService = Depends(get_auth_service),
):
    """Mail a password reset link to the account owner.

    Raises:
        NotFoundError: 404 if no user has this email
        DependencyError: 500 if the mail could not be sent
    """
    service.forgot_password(
        body.email,
        reset_url_for=lambda token: str(request.url_for("reset_password", token=token)),
    )
    return MessageResponse(message="Token sent to email!")


@router.patch("/reset-password/{token}", response_model=AuthResponse, name="reset_password")
async def reset_password(
    token: str,
    body: ResetPasswordRequest,
    response: Response,
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """Set a new password using a reset token and sign the user in.

    Raises:
        InvalidResetTokenError: 400 if the token is unknown, used or expired
    """
    session = service.reset_password(token, body.password, body.password_confirm)
    return _send_session(session, response, settings)


@router.patch("/update-my-password", response_model=AuthResponse)
async def update_password(
    body: UpdatePasswordRequest,
    response: Response,
    current_user: User = Depends(get_current_user_required),
    service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    """Change the signed-in user's password and issue a fresh token.

    Raises:
        WrongCurrentPasswordError: 401 if passwordCurrent does not match
    """
    session = service.update_password(
        current_user.id,
        current_password=body.password_current,
        password=body.password,
        password_confirm=body.password_confirm,
    )
    return _send_session(session, response, settings)


@router.patch("/update-me", response_model=UserEnvelope)
async def update_me(
    body: UpdateMeRequest,
    current_user: User = Depends(get_current_user_required),
    service: AuthService = Depends(get_auth_service),
):
    """Change the signed-in user's name and/or email.

    Raises:
        ValidationError: 400 if the body carries password fields
        ConflictError: 409 if the email belongs to another account
    """
    if body.password is not None or body.password_confirm is not None:
        raise ValidationError("This route is not for password updates. Please use /update-my-password.")

    user = service.update_profile(current_user.id, name=body.name, email=body.email)
    return UserEnvelope(data=UserData(user=UserResponse.from_domain(user)))


@router.get("/me", response_model=UserEnvelope)
async def get_me(current_user: User = Depends(get_current_user_required)):
    """Get current authenticated user info."""
    return UserEnvelope(data=UserData(user=UserResponse.from_domain(current_user)))


@router.get("/session", response_model=UserEnvelope)
async def get_session(current_user: Optional[User] = Depends(get_current_user)):
    """Report who is signed in, if anyone. Never rejects."""
    user = UserResponse.from_domain(current_user) if current_user else None
    return UserEnvelope(data=UserData(user=user))


@router.get("/{user_id}", response_model=UserEnvelope)
async def get_user(
    user_id: str,
    _: User = Depends(restrict_to(UserRole.ADMIN, UserRole.LEAD_GUIDE)),
    repo: UserRepository = Depends(get_user_repo),
):
    """Look up any account. Admins and lead guides only.

    Raises:
        ForbiddenError: 403 for other roles
        NotFoundError: 404 if the id is unknown
    """
    user = repo.get_by_id(user_id)
    if not user:
        raise NotFoundError("No user found with that ID")
    return UserEnvelope(data=UserData(user=UserResponse.from_domain(user)))
