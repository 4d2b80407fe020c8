"""
Authentication for the page builder API.

JWT issuance and verification. A session token names the editor (`sub`)
and the tenant they edit (`tid`); every tenant-scoped query runs under
that tenant.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Annotated
from uuid import UUID

import jwt
from fastapi import Cookie, Header, HTTPException, status

from backend import config
from backend.models.editor import Editor


def create_jwt(editor_id: UUID, tenant_id: UUID) -> str:
    """
    Create a JWT for an editor session.

    Args:
        editor_id: Editor UUID to encode as the subject
        tenant_id: Tenant UUID the session is scoped to

    Returns:
        Signed JWT string
    """
    now = datetime.now(UTC)
    payload = {
        "sub": str(editor_id),
        "tid": str(tenant_id),
        "exp": now + timedelta(hours=config.settings.JWT_EXPIRY_HOURS),
        "iat": now,
    }
    return jwt.encode(payload, config.settings.JWT_SECRET, algorithm=config.settings.JWT_ALGORITHM)


def decode_jwt(token: str) -> dict:
    """
    Decode and verify a JWT.

    Args:
        token: JWT string to decode

    Returns:
        Decoded payload

    Raises:
        HTTPException: If token is invalid or expired
    """
    try:
        return jwt.decode(token, config.settings.JWT_SECRET, algorithms=[config.settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired. Please sign in again.",
        ) from e
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session token. Please sign in again.",
        ) from e


def editor_from_token(token: str) -> Editor:
    """
    Build the Editor identity from a session token.

    Raises:
        HTTPException: If the token is invalid or lacks either claim
    """
    payload = decode_jwt(token)
    try:
        return Editor(id=UUID(payload["sub"]), tenant_id=UUID(payload["tid"]))
    except (KeyError, TypeError, ValueError) as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid session token. Please sign in again.",
        ) from e


async def get_current_editor(
    session: Annotated[str | None, Cookie()] = None,
    authorization: Annotated[str | None, Header()] = None,
) -> Editor:
    """
    FastAPI dependency to get the current authenticated editor.

    Tries the Bearer header first (API clients), then the session cookie (browser).

    Args:
        session: JWT from HTTP-only session cookie
        authorization: "Bearer <jwt>" header

    Returns:
        Current authenticated Editor

    Raises:
        HTTPException: If authentication fails
    """
    if authorization and authorization.startswith("Bearer "):
        return editor_from_token(authorization.removeprefix("Bearer "))

    if session:
        return editor_from_token(session)

    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated. Please sign in.",
    )
