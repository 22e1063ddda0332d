# src/taskboard/auth/user_store.py

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from ..errors import AuthError, ConflictError, ValidationError
from ..storage.database import Database
from .credentials import TokenService, hash_password, verify_password

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class User:
    id: int
    username: str
    email: str


class UserStore:
    """Registration and login against the users table."""

    def __init__(self, db: Database, tokens: TokenService, *, bcrypt_rounds: int = 12) -> None:
        self._db = db
        self._tokens = tokens
        self._bcrypt_rounds = bcrypt_rounds

    def register(self, username: str, email: str, password: str) -> User:
        username = (username or "").strip()
        email = (email or "").strip()
        if not username or not email or not password:
            raise ValidationError("All fields are required")

        existing = self._db.fetch_one(
            "SELECT id FROM users WHERE username = ? OR email = ?",
            (username, email),
        )
        if existing is not None:
            raise ConflictError("Username or email already exists")

        user_id = self._db.insert(
            "INSERT INTO users(username, email, password_hash, created_at) VALUES (?, ?, ?, ?)",
            (username, email, hash_password(password, rounds=self._bcrypt_rounds), time.time()),
        )
        logger.info("User registered id=%s username=%s", user_id, username)
        return User(id=user_id, username=username, email=email)

    def login(self, email: str, password: str) -> str:
        """Return a bearer token; unknown email and wrong password look the same."""
        email = (email or "").strip()
        if not email or not password:
            raise ValidationError("Email and password are required")

        row = self._db.fetch_one(
            "SELECT id, username, password_hash FROM users WHERE email = ?",
            (email,),
        )
        if row is None or not verify_password(password, row["password_hash"]):
            logger.info("Failed login for email=%s", email)
            raise AuthError("Invalid credentials")

        logger.info("User logged in id=%s", row["id"])
        return self._tokens.issue(int(row["id"]), str(row["username"]))

