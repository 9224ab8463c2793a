"""User model."""

from datetime import datetime

import bcrypt
from sqlalchemy import Column, DateTime, Integer, String

from jolly_auth.database import Base


def hash_password(password: str) -> str:
    """Hash a plaintext password with bcrypt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


class User(Base):
    """Application user.

    The plaintext password is never stored: assigning ``user.password`` hashes
    it into ``password_hash`` straight away, so every save persists the hash.
    """

    __tablename__ = "user"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(256), nullable=False)
    email = Column(String(256), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    photo = Column(String(1024), nullable=True)
    phone = Column(String(64), nullable=True)
    bio = Column(String(1024), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def password(self) -> str:
        raise AttributeError("password is write-only")

    @password.setter
    def password(self, plaintext: str) -> None:
        self.password_hash = hash_password(plaintext)

    def check_password(self, plaintext: str) -> bool:
        """Compare a plaintext password against the stored hash."""
        return bcrypt.checkpw(plaintext.encode("utf-8"), self.password_hash.encode("utf-8"))
