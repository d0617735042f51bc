"""
auth/errors.py -- Typed failures raised by the authentication core.

Every error carries a stable machine-readable ``code`` so the API layer can
build its error envelope without string matching on messages. None of these
are transient; nothing in the core retries them.

Messages never contain raw passwords, hashes, tokens, or the signing secret.
"""

from __future__ import annotations


class AuthError(Exception):
    """Base class for all authentication-core failures."""

    code = "auth_error"
    default_message = "Authentication error."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


# ---------------------------------------------------------------------------
# Registration (user-correctable)
# ---------------------------------------------------------------------------


class RegistrationError(AuthError):
    code = "registration_error"
    default_message = "Registration failed."


class DuplicateAccountError(RegistrationError):
    code = "duplicate_account"
    default_message = "An account with this login already exists."


class InvalidRoleError(RegistrationError):
    code = "invalid_role"
    default_message = "Role must be one of: admin, user."


class CredentialError(RegistrationError):
    code = "invalid_credential"
    default_message = "Credential is not acceptable."


class EmptyCredentialError(CredentialError):
    code = "empty_credential"
    default_message = "Login and password must not be empty."


class PasswordTooLongError(CredentialError):
    code = "password_too_long"
    default_message = "Password must not exceed 72 bytes when UTF-8 encoded."


# ---------------------------------------------------------------------------
# Sign-in
# ---------------------------------------------------------------------------


class AuthenticationFailedError(AuthError):
    """Raised for unknown login and wrong password alike.

    The message is fixed: callers must not be able to tell which factor was
    wrong, or the endpoint becomes a username-enumeration oracle.
    """

    code = "bad_credentials"
    default_message = "Invalid login or password."

    def __init__(self) -> None:
        super().__init__(self.default_message)


# ---------------------------------------------------------------------------
# Token validation
# ---------------------------------------------------------------------------


class TokenError(AuthError):
    code = "token_error"
    default_message = "Token rejected."


class InvalidTokenError(TokenError):
    code = "invalid_token"
    default_message = "Token is malformed or its signature does not match."


class ExpiredTokenError(TokenError):
    code = "token_expired"
    default_message = "Token has expired."
