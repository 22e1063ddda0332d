# src/taskboard/web/routes_auth.py

from __future__ import annotations

from fastapi import APIRouter, Depends, status

from ..core.state import AppState
from .deps import get_state
from .schemas import LoginRequest, LoginResponse, MessageResponse, RegisterRequest

router = APIRouter()


@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, state: AppState = Depends(get_state)) -> MessageResponse:
    # Sync handler: bcrypt hashing runs in FastAPI's threadpool, off the event loop.
    state.users.register(payload.username or "", payload.email or "", payload.password or "")
    return MessageResponse(message="User registered successfully!")


@router.post("/login", response_model=LoginResponse)
def login(payload: LoginRequest, state: AppState = Depends(get_state)) -> LoginResponse:
    token = state.users.login(payload.email or "", payload.password or "")
    return LoginResponse(message="Logged in successfully", token=token)
