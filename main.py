#!/usr/bin/env python3
"""
Gatekeeper -- administrative command line.

Usage:
  python main.py create-account admin --role admin
  python main.py create-account alice
  python main.py check-token eyJhbGciOi...
  python main.py --database-url sqlite:///other.db create-account bob

create-account prompts for the password twice (it is never accepted as an
argument, so it does not end up in shell history). The first admin account of
a fresh deployment is created this way.

check-token prints the login and role a token carries, or the reason it was
rejected, and exits 1 on rejection.

Environment variables: see core/config.py (SECRET_KEY, DATABASE_URL, ...).
"""

import argparse
import getpass
import logging
import sys
from typing import Optional

from auth.errors import AuthError, TokenError
from auth.models import Role
from auth.service import AuthService
from core.config import get_settings


def _build_service(database_url: Optional[str]) -> AuthService:
    settings = get_settings()
    if database_url:
        settings = settings.model_copy(update={"database_url": database_url})
    return AuthService.from_settings(settings)


def _read_password() -> Optional[str]:
    password = getpass.getpass("Password: ")
    confirm = getpass.getpass("Repeat password: ")
    if password != confirm:
        print("  [!] Passwords do not match.")
        return None
    return password


def _create_account(service: AuthService, login: str, role: str) -> int:
    password = _read_password()
    if password is None:
        return 1
    try:
        account = service.register(login, password, role)
    except AuthError as e:
        print(f"  [!] {e.code}: {e.message}")
        return 1
    print(f"  Created {account.role.value} account '{account.login}'.")
    return 0


def _check_token(service: AuthService, token: str) -> int:
    try:
        identity = service.validate_token(token)
    except TokenError as e:
        print(f"  [!] {e.code}: {e.message}")
        return 1
    print(f"  login={identity.login} role={identity.role.value}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gatekeeper",
        description="Gatekeeper account administration.",
    )
    parser.add_argument("--database-url", help="Override DATABASE_URL from the environment.")
    sub = parser.add_subparsers(dest="command", required=True)

    create = sub.add_parser("create-account", help="Register a new account.")
    create.add_argument("login")
    create.add_argument("--role", choices=[r.value for r in Role], default=Role.USER.value)

    check = sub.add_parser("check-token", help="Validate a bearer token.")
    check.add_argument("token")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s %(message)s")
    args = build_parser().parse_args(argv)
    service = _build_service(args.database_url)
    try:
        if args.command == "create-account":
            return _create_account(service, args.login, args.role)
        return _check_token(service, args.token)
    finally:
        service.close()


if __name__ == "__main__":
    sys.exit(main())
