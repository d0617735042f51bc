"""
api/routes/v1/auth.py -- Sign-up, sign-in and identity REST endpoints.

Routes:
  POST /api/v1/auth/signup   -- create an account; 201 with login/role
  POST /api/v1/auth/signin   -- password login; returns a bearer token
  GET  /api/v1/auth/me       -- identity behind the bearer token (requires auth)

Security:
  Sign-in goes through AuthService.authenticate(), which equalizes timing
  between unknown logins and wrong passwords. Do not inline a store
  lookup + verify here.
  Cache-Control: no-store on sign-in responses (they carry a token).
  The signup response never includes the password hash.

Domain errors (DuplicateAccountError, AuthenticationFailedError, ...) are not
caught here; the AuthError handler in api/main.py maps them to responses.

Handlers are plain def (not async): bcrypt is CPU-bound and blocking, so
FastAPI runs them in its worker thread pool rather than on the event loop.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import AccountResponse, MeResponse, SignInRequest, SignUpRequest, TokenResponse
from auth.dependencies import get_current_identity
from auth.models import AuthenticatedIdentity
from auth.service import AuthService

# Auth policy:
# - POST /api/v1/auth/signup:  public
# - POST /api/v1/auth/signin:  public
# - GET  /api/v1/auth/me:      requires auth (get_current_identity)
router = APIRouter()


@router.post("/auth/signup", response_model=AccountResponse, status_code=201)
def signup(request: Request, body: SignUpRequest) -> AccountResponse:
    """Register a new account."""
    service: AuthService = request.app.state.auth_service
    account = service.register(body.login, body.password, body.role)
    return AccountResponse.from_account(account)


@router.post("/auth/signin", response_model=TokenResponse)
def signin(request: Request, body: SignInRequest) -> JSONResponse:
    """Authenticate with login and password; return a signed bearer token."""
    service: AuthService = request.app.state.auth_service
    identity = service.authenticate(body.login, body.password)
    token = service.issue_token(identity)
    resp = JSONResponse(
        status_code=200,
        content=TokenResponse(
            access_token=token,
            token_type="bearer",  # noqa: S106 # nosec B106 -- OAuth token type, not a password
            expires_in=service.token_lifetime_seconds,
            login=identity.login,
            role=identity.role,
        ).model_dump(mode="json"),
    )
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/auth/me", response_model=MeResponse)
def me(identity: AuthenticatedIdentity = Depends(get_current_identity)) -> MeResponse:
    """Return identity information for the currently authenticated caller."""
    return MeResponse.from_identity(identity)
