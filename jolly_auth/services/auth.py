"""Authentication service."""

import hashlib
import logging
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from jolly_auth.config import Settings, get_settings
from jolly_auth.errors import (
    AuthenticationError,
    ConflictError,
    DeliveryError,
    InvalidStateError,
    InvalidTokenError,
    NotFoundError,
    ValidationError,
)
from jolly_auth.models.reset_token import ResetToken
from jolly_auth.models.user import User
from jolly_auth.schemas.auth import PublicUser
from jolly_auth.services.jwt import JWTService, get_jwt_service
from jolly_auth.services.mailer import Mailer, MailerError, render_template

logger = logging.getLogger("jolly_auth")

MIN_PASSWORD_LENGTH = 6
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
RESET_EMAIL_SUBJECT = "Password Reset Request"


@dataclass
class AuthResult:
    """Public user fields plus a freshly signed identity token."""

    user: PublicUser
    token: str


@dataclass
class ResetRequest:
    """A reset token that has been persisted and still has to be delivered."""

    name: str
    email: str
    reset_token: str


def hash_reset_token(reset_token: str) -> str:
    """One-way hash stored in place of the plaintext reset token."""
    return hashlib.sha256(reset_token.encode("utf-8")).hexdigest()


class AuthService:
    """Handles registration, login, profile and password flows."""

    def __init__(self, settings: Settings, jwt_service: JWTService) -> None:
        self.settings = settings
        self.jwt_service = jwt_service

    def _find_by_email(self, db: Session, email: str) -> User | None:
        return db.query(User).filter(User.email == email).first()

    def register(self, db: Session, name: str | None, email: str | None, password: str | None) -> AuthResult:
        """Create a user and sign an identity token for it."""
        name = name.strip() if name else name
        email = email.strip() if email else email
        if not name or not email or not password:
            raise ValidationError("Please fill in all the required fields.")
        if not EMAIL_PATTERN.match(email):
            raise ValidationError("Please enter a valid email.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

        if self._find_by_email(db, email):
            raise ConflictError("This email has already been registered")

        user = User(name=name, email=email, password=password)
        db.add(user)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            db.rollback()
            raise ConflictError("This email has already been registered")
        db.refresh(user)

        if user.id is None:
            raise InvalidStateError("Invalid user data")

        logger.info("Registered user %s", user.id)
        token = self.jwt_service.create_token(user.id)
        return AuthResult(user=PublicUser.model_validate(user), token=token)

    def login(self, db: Session, email: str | None, password: str | None) -> AuthResult:
        """Check credentials and sign an identity token."""
        if not email or not password:
            raise ValidationError("Please add your email and password")

        user = self._find_by_email(db, email)
        if not user:
            raise NotFoundError("User not found! Please sign up if you have no account.", status_code=400)

        password_is_correct = user.check_password(password)
        token = self.jwt_service.create_token(user.id)

        if not password_is_correct:
            logger.warning("Failed login for %s", email)
            raise AuthenticationError("Invalid email or password entered.", token=token)

        return AuthResult(user=PublicUser.model_validate(user), token=token)

    def login_status(self, token: str | None) -> bool:
        """Report whether an identity token is present and valid. Never raises."""
        if not token:
            return False
        return self.jwt_service.is_token_valid(token)

    def get_profile(self, db: Session, user_id: int) -> PublicUser:
        user = db.get(User, user_id)
        if not user:
            raise NotFoundError("User is not found.")
        return PublicUser.model_validate(user)

    def update_profile(
        self,
        db: Session,
        user_id: int,
        name: str | None = None,
        photo: str | None = None,
        phone: str | None = None,
        bio: str | None = None,
    ) -> PublicUser:
        """Update optional profile fields. Email is never changed here."""
        user = db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found.")

        user.name = name or user.name
        user.photo = photo or user.photo
        user.phone = phone or user.phone
        user.bio = bio or user.bio
        db.commit()
        db.refresh(user)
        return PublicUser.model_validate(user)

    def change_password(self, db: Session, user_id: int, old_password: str | None, password: str | None) -> None:
        if not old_password or not password:
            raise ValidationError("Please enter your old and new passwords.")

        user = db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found, please signup.", status_code=400)

        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

        if not user.check_password(old_password):
            raise AuthenticationError("The old password is incorrect.")

        user.password = password
        db.commit()
        logger.info("Password changed for user %s", user.id)

    def request_password_reset(self, db: Session, email: str | None) -> ResetRequest:
        """Replace any reset token for the user with a fresh one.

        Only the SHA-256 hash is persisted; the plaintext is returned so the
        caller can deliver it.
        """
        if not email:
            raise ValidationError("Please enter your email.")

        user = self._find_by_email(db, email)
        if not user:
            raise NotFoundError("This user does not exist.")

        db.query(ResetToken).filter(ResetToken.user_id == user.id).delete()

        reset_token = secrets.token_hex(32) + str(user.id)
        now = datetime.utcnow()
        db.add(
            ResetToken(
                user_id=user.id,
                token=hash_reset_token(reset_token),
                created_at=now,
                expires_at=now + timedelta(minutes=self.settings.RESET_TOKEN_EXPIRE_MINUTES),
            )
        )
        db.commit()
        logger.info("Password reset requested for user %s", user.id)

        return ResetRequest(name=user.name, email=user.email, reset_token=reset_token)

    def build_reset_url(self, reset_token: str) -> str:
        return f"{self.settings.FRONTEND_URL.rstrip('/')}/resetpassword/{reset_token}"

    async def forgot_password(self, db: Session, email: str | None, mailer: Mailer) -> None:
        """Issue a reset token and email the reset link.

        The token is not rolled back when delivery fails; it stays usable
        until it expires.
        """
        request = await run_in_threadpool(self.request_password_reset, db, email)

        body = render_template(
            "reset_password_email.html",
            name=request.name,
            reset_url=self.build_reset_url(request.reset_token),
            expire_minutes=self.settings.RESET_TOKEN_EXPIRE_MINUTES,
        )
        try:
            await mailer.send(RESET_EMAIL_SUBJECT, body, request.email, self.settings.EMAIL_USER)
        except MailerError:
            logger.exception("Failed to send password reset email to %s", request.email)
            raise DeliveryError("Email is not sent, please try again.")

    def reset_password(self, db: Session, reset_token: str, password: str | None) -> None:
        """Set a new password using an unexpired reset token, then discard the token."""
        user_token = (
            db.query(ResetToken)
            .filter(
                ResetToken.token == hash_reset_token(reset_token),
                ResetToken.expires_at > datetime.utcnow(),
            )
            .first()
        )
        if not user_token:
            raise InvalidTokenError("Your token is invalid, please make another request.")

        user = db.get(User, user_token.user_id)
        if not user:
            raise InvalidTokenError("Your token is invalid, please make another request.")

        if not password:
            raise ValidationError("Please enter a new password.")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")

        user.password = password
        db.delete(user_token)
        db.commit()
        logger.info("Password reset completed for user %s", user.id)


_auth_service: AuthService | None = None


def get_auth_service() -> AuthService:
    """Get singleton auth service instance."""
    global _auth_service
    if _auth_service is None:
        _auth_service = AuthService(get_settings(), get_jwt_service())
    return _auth_service
