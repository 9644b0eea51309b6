"""UserService — registering principals and resolving them by reference."""

from __future__ import annotations

from taskboard.domain.errors import ConflictError, InvalidInputError, NotFoundError
from taskboard.domain.models import User
from taskboard.infrastructure.store import EntityKind
from taskboard.services._helpers import dump
from taskboard.services.base import BaseService, service_op
from taskboard.services.result import ServiceResult


class UserService(BaseService):
    """Registration and lookup. Credentials are managed elsewhere."""

    @service_op("register_user")
    def register(
        self,
        username: str,
        email: str,
        *,
        full_name: str | None = None,
    ) -> ServiceResult:
        op = "register_user"
        username = username.strip()
        email = email.strip().lower()
        if not username or "@" not in email:
            msg = "A username and a valid email are required"
            raise InvalidInputError(msg, username=username, email=email)

        if self._store.find_user_by_username(username) is not None:
            msg = f"Username {username!r} is taken"
            raise ConflictError(msg, username=username)
        if self._store.find_user_by_email(email) is not None:
            msg = f"Email {email!r} is already registered"
            raise ConflictError(msg, email=email)

        user = User(username=username, email=email, full_name=full_name or None)
        self._store.create(user)
        return ServiceResult(ok=True, op=op, data=dump(user))

    @service_op("get_user")
    def get_user(self, user_ref: str) -> ServiceResult:
        """Look up a user by id, username, or email."""
        return ServiceResult(ok=True, op="get_user", data=dump(self.resolve(user_ref)))

    def resolve(self, user_ref: str) -> User:
        """Return the user for an id, username, or email.

        Raises:
            NotFoundError: If nothing matches *user_ref*.
        """
        user = self._store.get(EntityKind.USER, user_ref)
        if user is None:
            user = self._store.find_user_by_username(user_ref)
        if user is None and "@" in user_ref:
            user = self._store.find_user_by_email(user_ref)
        if user is None:
            msg = f"No user found for: {user_ref}"
            raise NotFoundError(msg, ref=user_ref)
        assert isinstance(user, User)
        return user
