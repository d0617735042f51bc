"""
auth/passwords.py -- One-way salted password hashing (bcrypt).

Security design decisions:
  bcrypt is the right choice for low-entropy secrets (passwords) because its
  cost factor makes brute-force expensive. gensalt() draws a fresh random salt
  for every hash and embeds it in the output, so hashing the same password
  twice yields two different strings that both verify.

  bcrypt is used directly rather than through passlib: passlib's wrap-bug
  detection builds a password longer than 72 bytes, which bcrypt 4.x rejects.

  bcrypt only looks at the first 72 bytes of input. Rather than silently
  truncating (two passwords sharing a 72-byte prefix would collide), hash()
  refuses longer input with PasswordTooLongError.

Layer rule: no imports from api/ or core/.
"""

from __future__ import annotations

import bcrypt

from auth.errors import EmptyCredentialError, PasswordTooLongError

# bcrypt's hard input limit.
MAX_PASSWORD_BYTES = 72


class PasswordHasher:
    """Hash and verify passwords with a configurable bcrypt cost factor.

    Instances hold no mutable state and are safe to share across threads.
    Both methods are CPU-bound and deliberately slow; never call them while
    holding a lock.
    """

    def __init__(self, rounds: int = 12) -> None:
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31.")
        self.rounds = rounds

    def hash(self, raw_password: str) -> str:
        """Return a bcrypt hash of the given plaintext password.

        Raises EmptyCredentialError for "" and PasswordTooLongError for input
        over 72 UTF-8 bytes.
        """
        if not raw_password:
            raise EmptyCredentialError()
        encoded = raw_password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise PasswordTooLongError()
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, raw_password: str, password_hash: str) -> bool:
        """Return True if the plaintext password matches the bcrypt hash.

        Any malformed input (empty hash, non-bcrypt string, over-long password)
        yields False rather than an exception.
        """
        if not raw_password or not password_hash:
            return False
        try:
            return bcrypt.checkpw(raw_password.encode("utf-8"), password_hash.encode("utf-8"))
        except Exception:
            return False
