"""
The fixed team roster.

Credentials are compared in plaintext, exactly and case-sensitively. This
is a known weak-security property of the workspace and is kept as-is so
existing logins keep working.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Iterable, Mapping


class Roster:
    """Immutable username -> secret table with derived read-only sets."""

    __slots__ = ("_secrets", "_usernames", "_admins")

    def __init__(self, users: Mapping[str, str], admins: Iterable[str] = ()):
        self._secrets = MappingProxyType(dict(users))
        self._usernames = frozenset(self._secrets)
        admin_set = frozenset(admins)
        unknown = admin_set - self._usernames
        if unknown:
            raise ValueError(f"Admins not in roster: {sorted(unknown)}")
        self._admins = admin_set

    @property
    def usernames(self) -> frozenset[str]:
        return self._usernames

    @property
    def admins(self) -> frozenset[str]:
        return self._admins

    def __contains__(self, username: object) -> bool:
        return username in self._secrets

    def __len__(self) -> int:
        return len(self._secrets)

    def is_admin(self, username: str | None) -> bool:
        return username is not None and username in self._admins

    def check(self, username: str, password: str) -> bool:
        """True only for a roster member with the exact matching secret."""
        secret = self._secrets.get(username)
        return secret is not None and secret == password

    def __repr__(self) -> str:
        return f"Roster(users={sorted(self._usernames)}, admins={sorted(self._admins)})"
