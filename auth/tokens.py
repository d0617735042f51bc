"""
auth/tokens.py -- Signed, time-bounded bearer tokens.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       sub (login), role, iat, exp and iss. The HMAC covers the encoded header
       and payload, so changing any byte of either invalidates the signature.

  Expiry is checked here, not by python-jose: jose compares exp against the
       wall clock, while the issuer needs an injectable clock so tests (and
       anything replaying a request at a known instant) control time. A token
       is expired when now >= exp -- the expiry instant itself is not valid.

  Signature before expiry: a tampered token is reported as InvalidTokenError
       even if its (forged) exp is in the past. ExpiredTokenError therefore
       always means "genuine but old" and callers can prompt a re-login.

  The secret is read-only after construction and is never logged or shown in
  repr(); concurrent validate() calls need no locking.

Token lifecycle: issued -> valid -> expired | invalid. There is no revocation
list; a token simply stops validating at exp.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone

from jose import JWTError, jwt

from auth.errors import ExpiredTokenError, InvalidTokenError
from auth.models import AuthenticatedIdentity, Role

logger = logging.getLogger("gatekeeper.auth")

ALGORITHM = "HS256"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TokenIssuer:
    """Mint and verify identity tokens.

    Args:
        secret_key:       HMAC key shared by issue() and validate().
        lifetime_seconds: exp = iat + lifetime_seconds.
        issuer:           Value of the iss claim; tokens from another issuer
                          are rejected.
        clock:            Returns the current time as an aware datetime.
    """

    def __init__(
        self,
        secret_key: str,
        lifetime_seconds: int = 3600,
        issuer: str = "gatekeeper",
        clock: Clock = utc_now,
    ) -> None:
        if not secret_key:
            raise ValueError("secret_key must not be empty.")
        if lifetime_seconds <= 0:
            raise ValueError("lifetime_seconds must be positive.")
        self._secret_key = secret_key
        self.lifetime_seconds = lifetime_seconds
        self.issuer = issuer
        self._clock = clock

    def __repr__(self) -> str:
        return f"TokenIssuer(issuer={self.issuer!r}, lifetime_seconds={self.lifetime_seconds})"

    def _now(self) -> int:
        return int(self._clock().timestamp())

    # ------------------------------------------------------------------
    # Encode
    # ------------------------------------------------------------------

    def issue(self, identity: AuthenticatedIdentity) -> str:
        """Encode a signed JWT for the given identity."""
        issued_at = self._now()
        payload = {
            "sub": identity.login,
            "role": Role(identity.role).value,
            "iat": issued_at,
            "exp": issued_at + self.lifetime_seconds,
            "iss": self.issuer,
        }
        return jwt.encode(payload, self._secret_key, algorithm=ALGORITHM)

    # ------------------------------------------------------------------
    # Decode / verify
    # ------------------------------------------------------------------

    def validate(self, token: str) -> AuthenticatedIdentity:
        """Verify a token and return the identity it carries.

        Raises InvalidTokenError on a bad signature, a malformed token, a
        foreign issuer or missing/ill-typed claims, and ExpiredTokenError once
        the clock reaches exp.
        """
        if not token or not isinstance(token, str):
            raise InvalidTokenError()
        try:
            claims = jwt.decode(
                token,
                self._secret_key,
                algorithms=[ALGORITHM],
                issuer=self.issuer,
                options={"verify_exp": False, "verify_aud": False},
            )
        except JWTError as exc:
            logger.warning("Rejected token: %s", type(exc).__name__)
            raise InvalidTokenError() from exc

        login = claims.get("sub")
        expires_at = claims.get("exp")
        if not isinstance(login, str) or not login:
            raise InvalidTokenError()
        if not isinstance(expires_at, int) or isinstance(expires_at, bool):
            raise InvalidTokenError()
        try:
            role = Role(claims.get("role"))
        except ValueError as exc:
            raise InvalidTokenError() from exc

        if self._now() >= expires_at:
            raise ExpiredTokenError()
        return AuthenticatedIdentity(login=login, role=role)
