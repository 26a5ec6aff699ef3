"""
Auth business logic - signup, login, token issuance.

All account writes go through this layer (not directly in routes).
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from animetrack.core.security import create_access_token, hash_password, verify_password
from animetrack.db.models import User

logger = logging.getLogger(__name__)


class DuplicateUserError(Exception):
    """Raised when signup conflicts with an existing email."""

    def __init__(self) -> None:
        super().__init__("An account with that email already exists")


def normalize_email(email: str) -> str:
    return email.strip().lower()


def create_user(db: Session, email: str, password: str) -> User:
    """
    Register a new account.

    Email is lower-cased; the password is stored as a bcrypt hash. A unique
    violation on email becomes DuplicateUserError.
    """
    user = User(
        email=normalize_email(email),
        password_hash=hash_password(password),
    )
    db.add(user)

    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateUserError() from exc

    db.commit()
    db.refresh(user)
    logger.info("Created account %s", user.id)
    return user


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """Return the active User for these credentials, or None."""
    user = db.query(User).filter(User.email == normalize_email(email)).first()
    if user is None or not user.is_active:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return user


def issue_access_token(user: User) -> str:
    return create_access_token(user.id)
