# gpt_habits/core/security.py
from __future__ import annotations

import hmac
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer

from gpt_habits.core.config import settings


# Solo para docs/Swagger; no ejecuta nada por sí mismo
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/admin/login")
ADMIN_ROLE = "admin"


def check_passphrase(candidate: str) -> bool:
    """Comparación en tiempo constante contra ADMIN_PASSPHRASE."""
    return hmac.compare_digest(candidate.encode("utf-8"), settings.ADMIN_PASSPHRASE.encode("utf-8"))


def create_access_token(claims: dict[str, Any], expires_minutes: int | None = None) -> str:
    now = datetime.now(timezone.utc)
    minutes = settings.JWT_EXPIRE_MINUTES if expires_minutes is None else expires_minutes
    payload = {**claims, "iat": int(now.timestamp()), "exp": now + timedelta(minutes=minutes)}
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def create_admin_token() -> str:
    return create_access_token({"sub": ADMIN_ROLE, "roles": [ADMIN_ROLE]})


def get_current_claims(token: str = Depends(oauth2_scheme)) -> dict[str, Any]:
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "iat"]},
            leeway=5,
        )
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Token expired")
    except jwt.InvalidTokenError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")


def claims_are_admin(claims: dict[str, Any]) -> bool:
    roles = claims.get("roles")
    return isinstance(roles, list) and ADMIN_ROLE in roles
