"""
Identity service: registration, login, profile read/update.

Business logic separated from HTTP layer. Emails are normalized (stripped,
lower-cased) before every lookup or write. Login failures never reveal
whether the email exists.
"""
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from database import commit
from errors import AuthenticationFailure, ValidationError
from models import User
from security import create_jwt, hash_password, verify_password

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72

INVALID_CREDENTIALS = "Invalid email or password"

# Verified against for unknown emails: every login attempt runs bcrypt once
_DUMMY_PASSWORD_HASH = hash_password("unused-dummy-password")


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def _check_password(raw_password: str) -> None:
    if len(raw_password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes", field="password"
        )


def _email_taken(db: Session, email: str, exclude_user_id: int | None = None) -> bool:
    stmt = select(User.id).where(User.email == email)
    if exclude_user_id is not None:
        stmt = stmt.where(User.id != exclude_user_id)
    return db.execute(stmt).first() is not None


def register(db: Session, username: str, email: str, raw_password: str) -> User:
    """
    Create a user with a bcrypt hash of raw_password.
    Raises ValidationError on blank fields or an already registered email,
    StorageError if the insert fails.
    """
    username = (username or "").strip()
    email = normalize_email(email)
    if not username:
        raise ValidationError("Username is required", field="username")
    if not email:
        raise ValidationError("Email is required", field="email")
    if not raw_password:
        raise ValidationError("Password is required", field="password")
    _check_password(raw_password)

    if _email_taken(db, email):
        raise ValidationError("Email already registered", field="email")

    user = User(username=username, email=email, password_hash=hash_password(raw_password))
    db.add(user)
    commit(db)
    db.refresh(user)
    logger.info("Registered user id=%s", user.id)
    return user


def authenticate(db: Session, email: str, raw_password: str) -> str:
    """
    Return a signed bearer token for valid credentials.
    Raises AuthenticationFailure (same message) for unknown email or wrong password.
    """
    email = normalize_email(email)
    user = db.execute(select(User).where(User.email == email)).scalars().first()
    stored_hash = user.password_hash if user else _DUMMY_PASSWORD_HASH
    password_ok = verify_password(raw_password or "", stored_hash)
    if not user or not raw_password or not password_ok:
        logger.info("Failed login for email=%s", email)
        raise AuthenticationFailure(INVALID_CREDENTIALS)
    return create_jwt(user.id, user.username, user.email)


def get_profile(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def update_profile(
    db: Session,
    user_id: int,
    username: str | None = None,
    email: str | None = None,
    raw_password: str | None = None,
) -> User | None:
    """
    Coalesce update: None or blank values leave the stored field unchanged.
    A non-empty raw_password is re-hashed. Returns None if the user is gone.
    """
    if raw_password:
        _check_password(raw_password)

    user = db.get(User, user_id)
    if user is None:
        return None

    if username and username.strip():
        user.username = username.strip()

    new_email = normalize_email(email)
    if new_email and new_email != user.email:
        if _email_taken(db, new_email, exclude_user_id=user.id):
            raise ValidationError("Email already registered", field="email")
        user.email = new_email

    if raw_password:
        user.password_hash = hash_password(raw_password)

    commit(db)
    return user
