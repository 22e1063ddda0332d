# src/taskboard/auth/credentials.py

from __future__ import annotations

import hashlib
import logging
import time

import bcrypt
from jose import JWTError, jwt

from ..errors import AuthError

logger = logging.getLogger(__name__)

JWT_ALG = "HS256"


def _pw_prehash(pw: str) -> bytes:
    """Pre-hash so passwords longer than bcrypt's 72-byte input still count in full."""
    return hashlib.sha256(pw.encode("utf-8")).digest()


def hash_password(pw: str, *, rounds: int = 12) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(_pw_prehash(pw), salt).decode("utf-8")


def verify_password(pw: str, pw_hash: str) -> bool:
    try:
        return bcrypt.checkpw(_pw_prehash(pw), pw_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash.
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


class TokenService:
    """Issues and verifies the bearer credential used by REST and the socket."""

    def __init__(self, secret: str, *, ttl_seconds: int = 3600) -> None:
        if not secret:
            raise ValueError("JWT secret is required")
        self._secret = secret
        self._ttl_seconds = int(ttl_seconds)

    def issue(self, user_id: int, username: str) -> str:
        exp = int(time.time()) + self._ttl_seconds
        return jwt.encode(
            {"sub": str(user_id), "username": username, "exp": exp},
            self._secret,
            algorithm=JWT_ALG,
        )

    def verify(self, token: str) -> int:
        """Return the user id carried by `token` or raise AuthError."""
        if not token:
            raise AuthError("Not authorized, no token")
        try:
            payload = jwt.decode(token, self._secret, algorithms=[JWT_ALG])
        except JWTError:
            raise AuthError("Not authorized, token failed") from None

        sub = payload.get("sub")
        try:
            return int(sub)
        except (TypeError, ValueError):
            raise AuthError("Not authorized, token failed") from None
