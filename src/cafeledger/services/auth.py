"""Roles, the permission matrix and login resolution."""
# The credential table is a sign-in convenience; access control is enforced by the backend.

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Optional, Protocol

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerificationError, VerifyMismatchError

from ..errors import AuthError, PermissionDenied, StorageError
from ..logging_config import get_logger

logger = get_logger("auth")

ADMIN = "admin"
MODERATOR = "moderator"
USER = "user"
ROLES = (ADMIN, MODERATOR, USER)

CREATE_TRANSACTION = "create_transaction"
ADD_NOTE = "add_note"
ADD_RECURRING = "add_recurring"
DELETE_TRANSACTION = "delete_transaction"
DELETE_NOTE = "delete_note"
CLEAR_ALL = "clear_all"

PERMISSIONS: dict[str, frozenset[str]] = {
    ADMIN: frozenset(
        {CREATE_TRANSACTION, ADD_NOTE, ADD_RECURRING, DELETE_TRANSACTION, DELETE_NOTE, CLEAR_ALL}
    ),
    MODERATOR: frozenset({CREATE_TRANSACTION, ADD_NOTE, ADD_RECURRING}),
    USER: frozenset({CREATE_TRANSACTION}),
}


def can(role: Optional[str], action: str) -> bool:
    """Return True when ``role`` may perform ``action``; unknown roles may do nothing."""

    return action in PERMISSIONS.get(role or "", frozenset())


def require(role: Optional[str], action: str) -> None:
    if not can(role, action):
        raise PermissionDenied(role, action)


def _normalize_role(role: str) -> str:
    role = (role or USER).strip().lower()
    if role not in ROLES:
        raise ValueError(f"Invalid role: {role}")
    return role


@dataclass(frozen=True, slots=True)
class LocalAccount:
    username: str
    password_hash: str
    role: str
    email: Optional[str] = None


@dataclass(frozen=True, slots=True)
class RoleGrant:
    """Outcome of a successful sign-in."""

    username: str
    role: str
    backend_login: Optional[str] = None
    user_id: Optional[str] = None
    access_token: Optional[str] = None


class AuthorizationResolver(Protocol):
    def resolve(self, username: str, password: str) -> RoleGrant:
        """Return the role for these credentials or raise ``AuthError``."""
        ...


class StaticCredentialResolver:
    """Placeholder resolver over a fixed ``username -> (password, role)`` table."""

    def __init__(
        self,
        accounts: Iterable[tuple[str, str, str, Optional[str]]],
        *,
        hasher: PasswordHasher | None = None,
    ):
        self._hasher = hasher or PasswordHasher()
        self._accounts: dict[str, LocalAccount] = {}
        for username, password, role, email in accounts:
            account = LocalAccount(
                username=username.strip(),
                password_hash=self._hasher.hash(password),
                role=_normalize_role(role),
                email=email,
            )
            self._accounts[account.username.lower()] = account

    def resolve(self, username: str, password: str) -> RoleGrant:
        account = self._accounts.get(username.strip().lower())
        if account is None:
            raise AuthError("Invalid username or password.")
        try:
            self._hasher.verify(account.password_hash, password)
        except (VerifyMismatchError, InvalidHash, VerificationError) as exc:
            raise AuthError("Invalid username or password.") from exc
        return RoleGrant(username=account.username, role=account.role, backend_login=account.email)


class BackendSession(Protocol):
    """Hosted-backend auth operations used by :class:`LoginService`."""

    def sign_in(self, login: str, password: str): ...

    def active_user_id(self, access_token: str) -> Optional[str]: ...

    def sign_out(self, access_token: str) -> None: ...

    def profile_role(self, user_id: str, access_token: str) -> Optional[str]: ...


class LoginService:
    """Resolve roles at sign-in and keep the cached role honest afterwards."""

    def __init__(self, resolver: AuthorizationResolver, backend: BackendSession | None = None):
        self.resolver = resolver
        self.backend = backend

    def login(self, username: str, password: str) -> RoleGrant:
        grant = self.resolver.resolve(username, password)
        if self.backend is None:
            logger.info("Signed in", extra={"username": grant.username, "role": grant.role})
            return grant

        user = self.backend.sign_in(grant.backend_login or grant.username, password)
        role = grant.role
        try:
            profile_role = self.backend.profile_role(user.user_id, user.access_token)
        except StorageError:
            logger.exception("Profile lookup failed; keeping local role")
            profile_role = None
        if profile_role and profile_role.strip().lower() in ROLES:
            role = profile_role.strip().lower()
        logger.info(
            "Signed in",
            extra={"username": grant.username, "role": role, "user_id": user.user_id},
        )
        return replace(grant, role=role, user_id=user.user_id, access_token=user.access_token)

    def restore(self, role: Optional[str], access_token: Optional[str]) -> Optional[str]:
        """Return the role to keep for this session, or ``None`` when it must be cleared."""

        if role is None or self.backend is None:
            return role
        if not access_token:
            return None
        try:
            user_id = self.backend.active_user_id(access_token)
        except StorageError:
            logger.exception("Session check failed; keeping cached role")
            return role
        if user_id is None:
            logger.info("Backend reports no active session", extra={"role": role})
            return None
        return role

    def logout(self, access_token: Optional[str]) -> None:
        if self.backend is None or not access_token:
            return
        try:
            self.backend.sign_out(access_token)
        except StorageError:
            logger.exception("Backend sign-out failed")


__all__ = [
    "ADD_NOTE",
    "ADD_RECURRING",
    "ADMIN",
    "AuthorizationResolver",
    "BackendSession",
    "CLEAR_ALL",
    "CREATE_TRANSACTION",
    "DELETE_NOTE",
    "DELETE_TRANSACTION",
    "LocalAccount",
    "LoginService",
    "MODERATOR",
    "PERMISSIONS",
    "ROLES",
    "RoleGrant",
    "StaticCredentialResolver",
    "USER",
    "can",
    "require",
]
