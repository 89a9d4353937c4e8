from __future__ import annotations

import base64
import binascii
import hmac
import json
import time
from hashlib import sha256

import bcrypt
from fastapi import Depends, Header, HTTPException
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.persistence.models import UserModel
from app.persistence.pg import get_session


class Identity(BaseModel):
    user_id: int
    is_admin: bool = False


class TokenError(ValueError):
    pass


def hash_password(plaintext: str) -> str:
    rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(plaintext.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("ascii")


def verify_password(plaintext: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plaintext.encode("utf-8"), hashed.encode("ascii"))
    except ValueError:
        return False


def _token_key() -> bytes:
    settings = get_settings()
    return settings.token_signing_secret.encode("utf-8")


def create_access_token(user_id: int, ttl_seconds: int | None = None) -> str:
    settings = get_settings()
    now = int(time.time())
    payload = {
        "sub": str(user_id),
        "iat": now,
        "exp": now + (ttl_seconds or settings.access_token_ttl_seconds),
    }
    body = json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8")
    mac = hmac.new(_token_key(), body, sha256).digest()
    return base64.urlsafe_b64encode(body + mac).decode("ascii")


def verify_access_token(token: str) -> dict:
    try:
        raw = base64.urlsafe_b64decode(token.encode("ascii"))
    except (binascii.Error, UnicodeEncodeError) as exc:
        raise TokenError("invalid token encoding") from exc

    if len(raw) <= 32:
        raise TokenError("invalid token body")

    body, mac = raw[:-32], raw[-32:]
    expected = hmac.new(_token_key(), body, sha256).digest()
    if not hmac.compare_digest(mac, expected):
        raise TokenError("token signature mismatch")

    payload = json.loads(body.decode("utf-8"))
    subject = str(payload.get("sub", ""))
    if not subject.isdigit() or int(subject) <= 0:
        raise TokenError("token subject missing")
    if int(time.time()) > int(payload.get("exp", 0)):
        raise TokenError("token expired")
    return payload


def _auth_error(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def _extract_token(authorization: str | None) -> str:
    if not authorization or not authorization.strip():
        raise _auth_error("Unauthorized")
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _auth_error("invalid authorization header")
    return token.strip()


def get_identity(
    authorization: str | None = Header(default=None),
    session: Session = Depends(get_session),
) -> Identity:
    token = _extract_token(authorization)
    try:
        payload = verify_access_token(token)
    except TokenError as exc:
        raise _auth_error(str(exc)) from exc

    user_id = int(payload["sub"])
    stmt = select(UserModel.id).where(UserModel.id == user_id).where(UserModel.deleted_at.is_(None))
    if session.scalar(stmt) is None:
        raise _auth_error("unknown user")
    return Identity(user_id=user_id)


def require_admin(
    identity: Identity = Depends(get_identity),
    session: Session = Depends(get_session),
) -> Identity:
    stmt = (
        select(UserModel.id)
        .where(UserModel.id == identity.user_id)
        .where(UserModel.is_admin.is_(True))
        .where(UserModel.deleted_at.is_(None))
    )
    if session.scalar(stmt) is None:
        raise HTTPException(status_code=403, detail="Admin privileges required")
    return identity.model_copy(update={"is_admin": True})
