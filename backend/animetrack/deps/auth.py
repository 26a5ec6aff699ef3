"""
Session dependencies - the single source of "who is calling".

Routes declare what they need instead of reading ambient state:

    @router.post("/watchlist")
    def add(user: User = Depends(get_current_user)):
        ...                     # 401 before the handler runs when signed out

    @router.get("/catalog/search")
    def search(user: User | None = Depends(get_optional_user)):
        ...                     # None for anonymous callers
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from animetrack.core.security import decode_access_token
from animetrack.db.models import User
from animetrack.db.session import get_db

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")
optional_oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def _credentials_exception(detail: str = "Invalid or expired token") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _resolve_user(db: Session, token: str) -> User | None:
    user_id = decode_access_token(token)
    if user_id is None:
        return None
    return db.query(User).filter(User.id == user_id).first()


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Return the active User behind the bearer token.

    Raises 401 on a missing/invalid token, an unknown user, or a
    deactivated account.
    """
    user = _resolve_user(db, token)
    if user is None:
        raise _credentials_exception()

    if not user.is_active:
        raise _credentials_exception("Account is deactivated")

    return user


def get_optional_user(
    token: str | None = Depends(optional_oauth2_scheme),
    db: Session = Depends(get_db),
) -> User | None:
    """Like get_current_user, but anonymous or invalid sessions yield None."""
    if not token:
        return None
    user = _resolve_user(db, token)
    if user is None or not user.is_active:
        return None
    return user
