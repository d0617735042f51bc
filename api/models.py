"""
API request and response models for Gatekeeper REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py, which
own the internal domain representation. Route handlers map between the two.

Separation of concerns: auth/ models = domain truth; api/ models = API contract.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import Account, AuthenticatedIdentity, Role

# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class SignUpRequest(BaseModel):
    """Request body for POST /api/v1/auth/signup.

    Length limits here are a first line of defence only; the registrar
    re-checks empty credentials and the role itself.
    """

    login: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=72)
    role: Role = Role.USER


class SignInRequest(BaseModel):
    """Request body for POST /api/v1/auth/signin."""

    login: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=255)


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class AccountResponse(BaseModel):
    """Public view of an account. The password hash is never part of it."""

    model_config = ConfigDict(frozen=True)

    login: str
    role: Role
    created_at: Optional[str] = None

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(login=account.login, role=account.role, created_at=account.created_at)


class TokenResponse(BaseModel):
    """Response body for POST /api/v1/auth/signin."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    token_type: str = "bearer"
    expires_in: int
    login: str
    role: Role


class MeResponse(BaseModel):
    """Response body for GET /api/v1/auth/me."""

    model_config = ConfigDict(frozen=True)

    login: str
    role: Role

    @classmethod
    def from_identity(cls, identity: AuthenticatedIdentity) -> "MeResponse":
        return cls(login=identity.login, role=identity.role)


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
