"""
auth/service.py -- Sign-up and sign-in orchestration, plus the composition root.

AccountRegistrar and Authenticator each take their collaborators in the
constructor; AuthService assembles them once at process start and is the only
object the API layer and the CLI talk to.

Duplicate prevention:
  register() looks the login up first so an obvious duplicate is rejected
  before paying for bcrypt. That lookup alone would leave a check-then-act
  race (two concurrent sign-ups both see "absent"). The race is closed by the
  store: save() enforces the UNIQUE constraint atomically and raises
  DuplicateAccountError for the loser. No in-process lock is involved, so the
  guarantee holds across workers and service instances.

Username enumeration:
  authenticate() raises the same AuthenticationFailedError for an unknown
  login and a wrong password, and runs bcrypt in both cases (against a dummy
  hash when the login is unknown) so response time does not differ either.

Layer rule: imports from core/ are allowed (AuthService.from_settings);
nothing else outside auth/.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from auth.errors import (
    AuthenticationFailedError,
    DuplicateAccountError,
    EmptyCredentialError,
    InvalidRoleError,
)
from auth.models import Account, AuthenticatedIdentity, Role
from auth.passwords import PasswordHasher
from auth.store import AccountStore, CredentialStore
from auth.tokens import Clock, TokenIssuer, utc_now

if TYPE_CHECKING:
    from core.config import Settings

logger = logging.getLogger("gatekeeper.auth")


def _coerce_role(role: Role | str) -> Role:
    try:
        return Role(role)
    except ValueError as exc:
        raise InvalidRoleError() from exc


# ---------------------------------------------------------------------------
# Sign-up
# ---------------------------------------------------------------------------


class AccountRegistrar:
    def __init__(self, store: CredentialStore, hasher: PasswordHasher) -> None:
        self._store = store
        self._hasher = hasher

    def register(self, login: str, raw_password: str, role: Role | str) -> Account:
        """Create a new account and return the persisted record.

        Raises EmptyCredentialError, PasswordTooLongError, InvalidRoleError or
        DuplicateAccountError. Nothing is written unless every step succeeds.
        """
        if not login or not raw_password:
            raise EmptyCredentialError()
        account_role = _coerce_role(role)

        if self._store.find_by_login(login) is not None:
            logger.info("Sign-up rejected: login %r already exists", login)
            raise DuplicateAccountError()

        password_hash = self._hasher.hash(raw_password)
        saved = self._store.save(Account(login=login, password_hash=password_hash, role=account_role))
        logger.info("Account created: login=%r role=%s", saved.login, saved.role.value)
        return saved


# ---------------------------------------------------------------------------
# Sign-in and identity lookup
# ---------------------------------------------------------------------------


class Authenticator:
    """Two narrow identity paths over the same store.

    authenticate() -- password-verifying, used by the sign-in endpoint.
    load_by_login() -- lookup only, used by request middleware that has
    already verified a token and just needs to confirm the account exists.
    """

    def __init__(self, store: CredentialStore, hasher: PasswordHasher) -> None:
        self._store = store
        self._hasher = hasher
        # Same cost factor as real hashes so both failure paths take equal time.
        self._dummy_hash = hasher.hash("gatekeeper_timing_dummy")

    def authenticate(self, login: str, raw_password: str) -> AuthenticatedIdentity:
        account = self._store.find_by_login(login) if login else None
        if account is None:
            # Equalize timing -- do NOT raise before running bcrypt
            self._hasher.verify(raw_password, self._dummy_hash)
            logger.warning("Sign-in failed for login %r", login)
            raise AuthenticationFailedError()
        if not self._hasher.verify(raw_password, account.password_hash):
            logger.warning("Sign-in failed for login %r", login)
            raise AuthenticationFailedError()
        return AuthenticatedIdentity(login=account.login, role=account.role)

    def load_by_login(self, login: str) -> AuthenticatedIdentity | None:
        if not login:
            return None
        account = self._store.find_by_login(login)
        if account is None:
            return None
        return AuthenticatedIdentity(login=account.login, role=account.role)


# ---------------------------------------------------------------------------
# Composition root
# ---------------------------------------------------------------------------


class AuthService:
    """The five operations the transport layer may call.

    Usage:
        service = AuthService.from_settings(get_settings())
        service.register("alice", "s3cret", "user")
        identity = service.authenticate("alice", "s3cret")
        token = service.issue_token(identity)
        service.validate_token(token)  # -> identity
        service.close()
    """

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
    ) -> None:
        self.store = store
        self.registrar = AccountRegistrar(store, hasher)
        self.authenticator = Authenticator(store, hasher)
        self.issuer = issuer

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        store: CredentialStore | None = None,
        clock: Clock = utc_now,
    ) -> AuthService:
        """Build the service graph from Settings. Pass store to reuse an existing one."""
        return cls(
            store=store if store is not None else AccountStore(settings.database_url),
            hasher=PasswordHasher(rounds=settings.bcrypt_rounds),
            issuer=TokenIssuer(
                secret_key=settings.secret_key,
                lifetime_seconds=settings.token_expire_seconds,
                issuer=settings.token_issuer,
                clock=clock,
            ),
        )

    def register(self, login: str, raw_password: str, role: Role | str) -> Account:
        return self.registrar.register(login, raw_password, role)

    def authenticate(self, login: str, raw_password: str) -> AuthenticatedIdentity:
        return self.authenticator.authenticate(login, raw_password)

    def load_by_login(self, login: str) -> AuthenticatedIdentity | None:
        return self.authenticator.load_by_login(login)

    def issue_token(self, identity: AuthenticatedIdentity) -> str:
        return self.issuer.issue(identity)

    def validate_token(self, token: str) -> AuthenticatedIdentity:
        return self.issuer.validate(token)

    @property
    def token_lifetime_seconds(self) -> int:
        return self.issuer.lifetime_seconds

    def close(self) -> None:
        close = getattr(self.store, "close", None)
        if close is not None:
            close()
