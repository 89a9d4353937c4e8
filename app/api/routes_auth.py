from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.utils import api_response
from app.core.config import get_settings
from app.domain.users.errors import InvalidCredentialsError, UserExistsError, UserNotFoundError
from app.domain.users.service import LoginRequest, RegisterRequest, UserOut, UserService
from app.persistence.pg import get_session

router = APIRouter(tags=["auth"])


@router.post("/auth/register")
def register(
    request: RegisterRequest,
    admin: bool = Query(default=False),
    session: Session = Depends(get_session),
):
    if admin and not get_settings().allow_admin_signup:
        raise HTTPException(status_code=403, detail="Admin registration is disabled")

    try:
        user = UserService(session).register(request, is_admin=admin)
    except UserExistsError as exc:
        raise HTTPException(status_code=400, detail="User with email already exists") from exc
    return api_response(200, "User registered successfully", UserOut.model_validate(user))


@router.post("/auth/login")
def login(request: LoginRequest, session: Session = Depends(get_session)):
    try:
        token = UserService(session).login(request.email, request.password)
    except UserNotFoundError as exc:
        raise HTTPException(status_code=404, detail="User not found") from exc
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=401, detail="Invalid credentials") from exc
    return api_response(200, "Login successful", {"token": token})
