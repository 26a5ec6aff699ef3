"""
Auth API - /auth
─────────────────
Endpoints:
  POST /auth/signup   - Create account, return user (201)
  POST /auth/login    - Authenticate, return JWT
  GET  /auth/me       - Return the signed-in user
"""
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from animetrack.db.models import User
from animetrack.db.session import get_db
from animetrack.deps.auth import get_current_user
from animetrack.schemas.auth import SignupRequest, TokenResponse, UserResponse
from animetrack.services.auth_service import (
    DuplicateUserError,
    authenticate_user,
    create_user,
    issue_access_token,
)

router = APIRouter()


def _error(code: str, message: str) -> dict:
    return {"error": {"code": code, "message": message}}


@router.post(
    "/signup",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
def signup(payload: SignupRequest, db: Session = Depends(get_db)) -> UserResponse:
    """Create an account. 409 when the email is taken."""
    try:
        user = create_user(db, email=payload.email, password=payload.password)
    except DuplicateUserError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_error("DUPLICATE_USER", str(exc)),
        ) from exc

    return UserResponse.model_validate(user)


@router.post("/login", response_model=TokenResponse)
def login(
    form: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db),
) -> TokenResponse:
    """
    Exchange email + password for a bearer token.

    OAuth2 password form: the email goes in the *username* field, which keeps
    the /docs Authorize button working.
    """
    user = authenticate_user(db, email=form.username, password=form.password)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=_error("INVALID_CREDENTIALS", "Incorrect email or password"),
            headers={"WWW-Authenticate": "Bearer"},
        )

    return TokenResponse(access_token=issue_access_token(user))


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(current_user)
