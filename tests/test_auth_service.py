"""End-to-end tests for AuthService, the composition root in auth/service.py.

Covers:
- The alice scenario: register -> authenticate -> issue -> validate -> expire
- register + authenticate agree on the role for both roles
- A duplicate sign-up leaves the store unchanged
- from_settings() wires rounds, lifetime and issuer from Settings
"""

from __future__ import annotations

import pytest

from auth.errors import AuthenticationFailedError, DuplicateAccountError, ExpiredTokenError
from auth.models import AuthenticatedIdentity, Role
from auth.service import AuthService
from auth.store import AccountStore
from core.config import Settings


class TestAliceScenario:
    def test_full_lifecycle(self, service: AuthService, clock) -> None:
        account = service.register("alice", "s3cret", "user")
        assert account.login == "alice"
        assert account.role is Role.USER

        identity = service.authenticate("alice", "s3cret")
        assert identity == AuthenticatedIdentity(login="alice", role=Role.USER)

        token = service.issue_token(identity)
        assert service.validate_token(token) == identity

        clock.advance(service.token_lifetime_seconds + 1)
        with pytest.raises(ExpiredTokenError):
            service.validate_token(token)


class TestRegisterThenAuthenticate:
    @pytest.mark.parametrize("role", [Role.ADMIN, Role.USER])
    def test_role_survives_round_trip(self, service: AuthService, role: Role) -> None:
        service.register("someone", "pass-word", role)
        assert service.authenticate("someone", "pass-word").role is role

    def test_wrong_password_after_register(self, service: AuthService) -> None:
        service.register("alice", "s3cret", Role.USER)
        with pytest.raises(AuthenticationFailedError):
            service.authenticate("alice", "S3cret")

    def test_duplicate_leaves_store_unchanged(self, service: AuthService, store: AccountStore) -> None:
        service.register("alice", "s3cret", Role.USER)
        before = store.find_by_login("alice")
        with pytest.raises(DuplicateAccountError):
            service.register("alice", "other", Role.ADMIN)
        assert store.find_by_login("alice") == before
        assert service.authenticate("alice", "s3cret").role is Role.USER

    def test_load_by_login_matches_authenticate(self, service: AuthService) -> None:
        service.register("alice", "s3cret", Role.USER)
        assert service.load_by_login("alice") == service.authenticate("alice", "s3cret")
        assert service.load_by_login("bob") is None


class TestFromSettings:
    def test_wiring(self, clock) -> None:
        settings = Settings(
            secret_key="k" * 40,
            bcrypt_rounds=4,
            token_expire_seconds=120,
            token_issuer="tenant-a",
            database_url="sqlite:///:memory:",
            _env_file=None,
        )
        service = AuthService.from_settings(settings, clock=clock)
        try:
            assert service.token_lifetime_seconds == 120
            assert service.issuer.issuer == "tenant-a"
            service.register("alice", "s3cret", Role.ADMIN)
            token = service.issue_token(service.authenticate("alice", "s3cret"))
            clock.advance(119)
            assert service.validate_token(token).role is Role.ADMIN
            clock.advance(1)
            with pytest.raises(ExpiredTokenError):
                service.validate_token(token)
        finally:
            service.close()

    def test_reuses_given_store(self, store: AccountStore) -> None:
        settings = Settings(secret_key="k" * 40, bcrypt_rounds=4, _env_file=None)
        service = AuthService.from_settings(settings, store=store)
        assert service.store is store
