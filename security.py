"""
Credentials, bearer tokens and the request pipeline.

Handlers declare their gates with ``Depends(pipeline(authenticate, require_admin))``.
A pipeline runs its stages in order over a RequestContext; any stage may stop
the request by raising AuthenticationError (401) or AuthorizationError (403).
"""
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

import jwt
from fastapi import Header
from passlib.context import CryptContext

import config
from database import get_document_by_id
from errors import AuthenticationError, AuthorizationError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(user_id: str) -> str:
    claims = {"sub": user_id, "iat": datetime.now(timezone.utc)}
    if config.JWT_EXPIRES_MINUTES:
        claims["exp"] = datetime.now(timezone.utc) + timedelta(minutes=config.JWT_EXPIRES_MINUTES)
    return jwt.encode(claims, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired")
    except jwt.PyJWTError:
        raise AuthenticationError("Invalid token")


def public_user(user: dict) -> dict:
    """Strip secret fields before a user document leaves the server."""
    return {k: v for k, v in user.items() if k != "password_hash"}


# ===================== Request pipeline =====================

@dataclass(frozen=True)
class RequestContext:
    authorization: Optional[str] = None
    actor: Optional[dict] = None

    @property
    def actor_id(self) -> str:
        return self.actor["_id"]

    @property
    def is_admin(self) -> bool:
        return bool(self.actor) and self.actor.get("role") == "admin"


Stage = Callable[[RequestContext], RequestContext]


def authenticate(ctx: RequestContext) -> RequestContext:
    if not ctx.authorization:
        raise AuthenticationError("Not authenticated")
    scheme, _, token = ctx.authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise AuthenticationError("Not authenticated")

    claims = decode_access_token(token.strip())
    user_id = claims.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token")

    user = get_document_by_id("user", user_id)
    if user is None:
        logger.info("Rejected token for unknown user %s", user_id)
        raise AuthenticationError("User not found")
    return replace(ctx, actor=public_user(user))


def require_admin(ctx: RequestContext) -> RequestContext:
    if not ctx.is_admin:
        raise AuthorizationError("Admin access required")
    return ctx


def run_pipeline(ctx: RequestContext, stages) -> RequestContext:
    for stage in stages:
        ctx = stage(ctx)
    return ctx


def pipeline(*stages: Stage):
    """Build a FastAPI dependency that runs ``stages`` against the request."""

    def _dependency(authorization: Optional[str] = Header(None)) -> RequestContext:
        return run_pipeline(RequestContext(authorization=authorization), stages)

    return _dependency


authenticated = pipeline(authenticate)
admin_only = pipeline(authenticate, require_admin)
