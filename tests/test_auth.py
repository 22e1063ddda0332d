# tests/test_auth.py

from __future__ import annotations

import time

import pytest
from jose import jwt

from taskboard.auth.credentials import JWT_ALG, TokenService, hash_password, verify_password
from taskboard.core.state import AppState
from taskboard.errors import AuthError, ConflictError, ValidationError


def test_hash_and_verify_password() -> None:
    h = hash_password("hunter2", rounds=4)
    assert h != "hunter2"
    assert verify_password("hunter2", h) is True
    assert verify_password("hunter3", h) is False


def test_long_passwords_are_not_truncated() -> None:
    base = "x" * 80
    h = hash_password(base + "a", rounds=4)
    assert verify_password(base + "a", h) is True
    assert verify_password(base + "b", h) is False


def test_malformed_hash_does_not_verify() -> None:
    assert verify_password("pw", "not-a-bcrypt-hash") is False


def test_token_round_trip() -> None:
    tokens = TokenService("s3cret", ttl_seconds=60)
    token = tokens.issue(42, "alice")
    assert tokens.verify(token) == 42


def test_token_signed_with_other_secret_is_rejected() -> None:
    token = TokenService("other").issue(1, "mallory")
    with pytest.raises(AuthError):
        TokenService("s3cret").verify(token)


def test_expired_token_is_rejected() -> None:
    stale = jwt.encode(
        {"sub": "1", "username": "bob", "exp": int(time.time()) - 10},
        "s3cret",
        algorithm=JWT_ALG,
    )
    with pytest.raises(AuthError):
        TokenService("s3cret").verify(stale)


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_missing_or_garbage_token_is_rejected(token: str) -> None:
    with pytest.raises(AuthError):
        TokenService("s3cret").verify(token)


def test_token_without_numeric_subject_is_rejected() -> None:
    token = jwt.encode({"sub": "alice"}, "s3cret", algorithm=JWT_ALG)
    with pytest.raises(AuthError):
        TokenService("s3cret").verify(token)


def test_empty_secret_is_refused() -> None:
    with pytest.raises(ValueError):
        TokenService("")


def test_register_then_login(state: AppState) -> None:
    user = state.users.register("alice", "alice@example.com", "pw")

    token = state.users.login("alice@example.com", "pw")

    assert state.tokens.verify(token) == user.id


def test_register_rejects_duplicates(state: AppState) -> None:
    state.users.register("alice", "alice@example.com", "pw")

    with pytest.raises(ConflictError):
        state.users.register("alice", "other@example.com", "pw")
    with pytest.raises(ConflictError):
        state.users.register("alice2", "alice@example.com", "pw")


@pytest.mark.parametrize(
    "username,email,password",
    [("", "a@example.com", "pw"), ("a", "  ", "pw"), ("a", "a@example.com", "")],
)
def test_register_requires_all_fields(state: AppState, username: str, email: str, password: str) -> None:
    with pytest.raises(ValidationError):
        state.users.register(username, email, password)


def test_login_failures_look_the_same(state: AppState) -> None:
    state.users.register("alice", "alice@example.com", "pw")

    with pytest.raises(AuthError) as wrong_pw:
        state.users.login("alice@example.com", "nope")
    with pytest.raises(AuthError) as unknown:
        state.users.login("nobody@example.com", "pw")

    assert wrong_pw.value.message == unknown.value.message == "Invalid credentials"


def test_login_requires_fields(state: AppState) -> None:
    with pytest.raises(ValidationError):
        state.users.login("", "pw")
