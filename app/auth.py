"""
Registration, login, and the bearer-token dependency.

- /auth/register creates a user (password hashed with bcrypt, never stored raw).
- /auth/login exchanges email + password for a signed JWT.
- get_current_user_id dependency reads "Authorization: Bearer <jwt>", verifies
  signature and expiry, and returns the user id claim. No server-side session:
  every request is validated from the token alone.
"""
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import AliasChoices, BaseModel, Field
from sqlalchemy.orm import Session

from database import get_db
from security import JWTError, decode_jwt
from services import identity_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")

# auto_error=False so a missing header gets our 401 body instead of FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)

INVALID_AUTH = "Invalid user authentication"


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=INVALID_AUTH,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> int:
    """
    FastAPI dependency: decode the bearer JWT and return its integer sub claim.
    Raises 401 if the header is missing, the token is invalid/expired, or
    the claim is not an integer id.
    """
    if credentials is None or not credentials.credentials:
        raise _unauthorized()
    try:
        payload = decode_jwt(credentials.credentials)
    except JWTError:
        raise _unauthorized()
    try:
        return int(payload.get("sub"))
    except (TypeError, ValueError):
        raise _unauthorized()


# --- Request models ---


class RegisterBody(BaseModel):
    """Raw password accepted as "password" or the legacy "passwordHash" key."""
    username: str = Field(..., max_length=100)
    email: str = Field(..., max_length=255)
    password: str = Field(
        ...,
        validation_alias=AliasChoices("password", "passwordHash"),
    )


class LoginBody(BaseModel):
    email: str
    password: str


# --- Endpoints ---


@router.post("/register")
def register(body: RegisterBody, db: Session = Depends(get_db)):
    """Create an account. Email must not already be registered."""
    user = identity_service.register(db, body.username, body.email, body.password)
    return {
        "Message": "User registered successfully",
        "id": user.id,
        "username": user.username,
        "email": user.email,
    }


@router.post("/login")
def login(body: LoginBody, db: Session = Depends(get_db)):
    """
    Return {"Token": <jwt>} for valid credentials. Unknown email and wrong
    password both give the same 401.
    """
    token = identity_service.authenticate(db, body.email, body.password)
    return {"Token": token}
