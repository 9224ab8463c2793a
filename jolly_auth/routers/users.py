"""User account API endpoints."""

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from jolly_auth.database import get_db
from jolly_auth.dependencies import AUTH_COOKIE_NAME, clear_auth_cookie, get_current_user, set_auth_cookie
from jolly_auth.errors import AuthenticationError
from jolly_auth.models.user import User
from jolly_auth.schemas.auth import (
    AuthenticatedUser,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    ForgotPasswordResponse,
    LoginRequest,
    MessageResponse,
    PublicUser,
    RegisterRequest,
    ResetPasswordRequest,
    UpdateUserRequest,
)
from jolly_auth.services.auth import get_auth_service
from jolly_auth.services.mailer import Mailer, get_mailer

router = APIRouter(prefix="/api/users", tags=["Users"])


@router.post("/register", response_model=AuthenticatedUser, status_code=201)
def register(body: RegisterRequest, response: Response, db: Session = Depends(get_db)) -> AuthenticatedUser:
    """Register a new user account and log it in."""
    auth_service = get_auth_service()
    result = auth_service.register(db, body.name, body.email, body.password)
    set_auth_cookie(response, result.token)
    return AuthenticatedUser(**result.user.model_dump(), token=result.token)


@router.post("/login", response_model=AuthenticatedUser)
def login(body: LoginRequest, response: Response, db: Session = Depends(get_db)) -> AuthenticatedUser | JSONResponse:
    """Authenticate with email and password and receive the identity cookie."""
    auth_service = get_auth_service()
    try:
        result = auth_service.login(db, body.email, body.password)
    except AuthenticationError as e:
        # The identity cookie is written before the comparison result is acted on
        error_response = JSONResponse(status_code=e.status_code, content={"detail": e.message})
        if e.token:
            set_auth_cookie(error_response, e.token)
        return error_response

    set_auth_cookie(response, result.token)
    return AuthenticatedUser(**result.user.model_dump(), token=result.token)


@router.get("/logout", response_model=MessageResponse)
def logout(response: Response) -> MessageResponse:
    """Expire the identity cookie."""
    clear_auth_cookie(response)
    return MessageResponse(message="Successfully logged out.")


@router.get("/getuser", response_model=PublicUser)
def get_user(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> PublicUser:
    """Return the logged-in user's profile."""
    return get_auth_service().get_profile(db, user.id)


@router.get("/loginstatus")
def login_status(request: Request) -> bool:
    """Report whether the request carries a valid identity cookie."""
    return get_auth_service().login_status(request.cookies.get(AUTH_COOKIE_NAME))


@router.api_route("/updateuser", methods=["PATCH", "PUT"], response_model=PublicUser)
def update_user(
    body: UpdateUserRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PublicUser:
    """Update name, photo, phone or bio of the logged-in user."""
    return get_auth_service().update_profile(
        db,
        user.id,
        name=body.name,
        photo=body.photo,
        phone=body.phone,
        bio=body.bio,
    )


@router.patch("/changepassword", response_model=MessageResponse)
def change_password(
    body: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> MessageResponse:
    """Change the logged-in user's password."""
    get_auth_service().change_password(db, user.id, body.old_password, body.password)
    return MessageResponse(message="Password changed successfully.")


@router.post("/forgotpassword", response_model=ForgotPasswordResponse)
async def forgot_password(
    body: ForgotPasswordRequest,
    db: Session = Depends(get_db),
    mailer: Mailer = Depends(get_mailer),
) -> ForgotPasswordResponse:
    """Email a password reset link."""
    await get_auth_service().forgot_password(db, body.email, mailer)
    return ForgotPasswordResponse(success=True, message="Reset Email is sent")


@router.put("/resetpassword/{reset_token}", response_model=MessageResponse)
def reset_password(reset_token: str, body: ResetPasswordRequest, db: Session = Depends(get_db)) -> MessageResponse:
    """Set a new password using the token from a reset link."""
    get_auth_service().reset_password(db, reset_token, body.password)
    return MessageResponse(message="Password reset successful! Please log in.")
