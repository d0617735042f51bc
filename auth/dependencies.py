"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

Requests authenticate with an "Authorization: Bearer <token>" header. The
token is verified by the TokenIssuer, then the account is looked up
(password-less) so a token for a deleted account stops working even before
it expires.

get_current_identity() raises HTTP 401 and tells the client whether the token
was expired (re-login) or invalid (tampered / foreign).

Layer rule: no imports from api/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.errors import InvalidTokenError, TokenError
from auth.models import AuthenticatedIdentity
from auth.service import AuthService


def _bearer_token(request: Request) -> str | None:
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        return auth_header[7:].strip() or None
    return None


def _resolve(request: Request) -> AuthenticatedIdentity:
    """Return the request's identity or raise the TokenError explaining why not."""
    service: AuthService = request.app.state.auth_service
    token = _bearer_token(request)
    if token is None:
        raise InvalidTokenError("Authentication required.")
    claimed = service.validate_token(token)
    identity = service.load_by_login(claimed.login)
    if identity is None:
        raise InvalidTokenError("Account no longer exists.")
    return identity


def get_current_identity(request: Request) -> AuthenticatedIdentity:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: AuthenticatedIdentity = Depends(get_current_identity)): ...
    """
    try:
        return _resolve(request)
    except TokenError as exc:
        raise HTTPException(
            status_code=401,
            detail={"code": exc.code, "message": exc.message},
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
