"""
Password hashing and JWT creation/verification.

Passwords are hashed with bcrypt (salted, cost BCRYPT_ROUNDS). Bearer tokens
are stateless HS256 JWTs: nothing is stored server-side and every request is
validated afresh. Expiration is JWT_EXPIRE_MINUTES after issuance.
"""
from datetime import datetime, timedelta, UTC

import bcrypt
from jose import jwt, JWTError  # noqa: F401  JWTError re-exported for callers

from config import (
    BCRYPT_ROUNDS,
    JWT_ALGORITHM,
    JWT_AUDIENCE,
    JWT_EXPIRE_MINUTES,
    JWT_ISSUER,
    JWT_SECRET,
)


def hash_password(raw_password: str) -> str:
    """Return a bcrypt hash (str) of raw_password with a fresh salt."""
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(raw_password.encode("utf-8"), salt).decode("utf-8")


def verify_password(raw_password: str, password_hash: str) -> bool:
    """Check raw_password against a stored hash; False on malformed hashes."""
    try:
        return bcrypt.checkpw(raw_password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


def create_jwt(user_id: int, username: str, email: str) -> str:
    """Build a JWT carrying the user's id (sub), username and email."""
    now = datetime.now(UTC)
    payload = {
        "sub": str(user_id),
        "username": username,
        "email": email,
        "iat": now,
        "exp": now + timedelta(minutes=JWT_EXPIRE_MINUTES),
    }
    if JWT_ISSUER:
        payload["iss"] = JWT_ISSUER
    if JWT_AUDIENCE:
        payload["aud"] = JWT_AUDIENCE
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_jwt(token: str) -> dict:
    """Decode and verify JWT; raises JWTError if invalid or expired."""
    return jwt.decode(
        token,
        JWT_SECRET,
        algorithms=[JWT_ALGORITHM],
        audience=JWT_AUDIENCE,
        issuer=JWT_ISSUER,
    )
