"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Dataclasses own the
domain shape; the store, the services and the routes do the work.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(str, Enum):
    """Closed set of roles an account can hold.

    The str mixin keeps the value JSON- and SQL-friendly: Role.ADMIN == "admin".
    """

    ADMIN = "admin"
    USER = "user"


@dataclass
class Account:
    """A persisted identity record.

    password_hash is the bcrypt output, never the raw password. Routes must
    never echo it back to a caller.

    id and created_at are assigned by the store on save(); an Account built
    by the registrar before persistence has both set to None.
    """

    login: str
    password_hash: str
    role: Role
    id: int | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class AuthenticatedIdentity:
    """Who the caller is, after a successful sign-in or token validation.

    Frozen so two identities compare by value and can be used as dict keys.
    """

    login: str
    role: Role
