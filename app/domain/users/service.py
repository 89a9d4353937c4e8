from __future__ import annotations

import logging

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.security import create_access_token, hash_password, verify_password
from app.domain.users.errors import InvalidCredentialsError, UserExistsError, UserNotFoundError
from app.persistence.models import UserModel

logger = logging.getLogger(__name__)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class RegisterRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=8, max_length=72)
    name: str = Field(min_length=1, max_length=255)


class LoginRequest(BaseModel):
    email: str = Field(pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(min_length=1)


class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    name: str
    is_admin: bool


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    def __init__(self, session: Session):
        self.session = session

    def find_by_email(self, email: str) -> UserModel | None:
        stmt = (
            select(UserModel)
            .where(UserModel.email == _normalize_email(email))
            .where(UserModel.deleted_at.is_(None))
        )
        return self.session.scalar(stmt)

    def register(self, request: RegisterRequest, is_admin: bool = False) -> UserModel:
        email = _normalize_email(request.email)
        if self.find_by_email(email) is not None:
            raise UserExistsError()

        user = UserModel(
            email=email,
            name=request.name.strip(),
            password_hash=hash_password(request.password),
            is_admin=is_admin,
        )
        try:
            with self.session.begin_nested():
                self.session.add(user)
        except IntegrityError as exc:
            raise UserExistsError() from exc
        logger.info("user registered: user_id=%s admin=%s", user.id, is_admin)
        return user

    def login(self, email: str, password: str) -> str:
        user = self.find_by_email(email)
        if user is None:
            raise UserNotFoundError()
        if not verify_password(password, user.password_hash):
            logger.warning("login rejected: user_id=%s", user.id)
            raise InvalidCredentialsError()
        return create_access_token(user.id)

    def promote(self, email: str) -> UserModel:
        user = self.find_by_email(email)
        if user is None:
            raise UserNotFoundError()
        user.is_admin = True
        self.session.flush()
        logger.info("user promoted to admin: user_id=%s", user.id)
        return user
