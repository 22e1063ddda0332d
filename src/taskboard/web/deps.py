# src/taskboard/web/deps.py

from __future__ import annotations

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..core.state import AppState
from ..errors import AuthError

bearer = HTTPBearer(auto_error=False)


def get_state(request: Request) -> AppState:
    return request.app.state.taskboard


def require_user_id(
    state: AppState = Depends(get_state),
    creds: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> int:
    if creds is None or not creds.credentials:
        raise AuthError("Not authorized, no token")
    return state.tokens.verify(creds.credentials)
