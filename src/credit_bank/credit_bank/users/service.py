from __future__ import annotations

import logging
from typing import Sequence

from werkzeug.security import check_password_hash, generate_password_hash

from ..common.validators import require_email, require_min_length, require_non_empty
from ..core.constants import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH, MIN_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError, DuplicateError, NotFoundError, ValidationError
from .model import Identity, User
from .repository import UserRepository
from .tokens import TokenIssuer

logger = logging.getLogger(__name__)

SELF_REGISTER_ROLES = {Role.STUDENT, Role.FACULTY}


class AuthService:
    """Use cases: register, log in, and verify bearer credentials."""

    def __init__(self, users: UserRepository, tokens: TokenIssuer):
        self._users = users
        self._tokens = tokens

    def register(self, *, email: str, password: str, display_name: str, role: str | Role) -> User:
        email = require_email(email, max_len=MAX_EMAIL_LENGTH)
        display_name = require_non_empty(display_name, "Display name", max_len=MAX_NAME_LENGTH)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        try:
            role = Role(role)
        except ValueError:
            raise ValidationError("Invalid role")
        if role not in SELF_REGISTER_ROLES:
            raise ValidationError("Only student or faculty accounts can self-register")

        if self._users.get_by_email(email):
            raise DuplicateError("An account with this email already exists")

        user_id = self._users.create_user(
            email=email,
            display_name=display_name,
            password_hash=generate_password_hash(password),
            role=role,
        )
        logger.info("Registered %s account %s (id=%s)", role.value, email, user_id)
        return self._users.get_by_id(user_id)

    def authenticate(self, email: str, password: str) -> tuple[User, str]:
        user = self._users.get_by_email((email or "").strip().lower())
        if not user or not check_password_hash(user.password_hash, password or ""):
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise AuthorizationError("User account is inactive")

        token = self._tokens.issue(user_id=user.user_id, role=user.role)
        return user, token

    def verify(self, credential: str) -> Identity:
        if not credential:
            raise AuthenticationError("Access token required")

        claims = self._tokens.decode(credential)
        user = self._users.get_by_id(claims["user_id"])
        if not user:
            raise AuthenticationError("User not registered")
        if not user.is_active:
            raise AuthorizationError("User account is inactive")

        # role from the store, not the token claim
        return Identity(user_id=user.user_id, role=user.role, email=user.email)


class UserService:
    def __init__(self, users: UserRepository):
        self._users = users

    def get_profile(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def list_users(self, *, current_role: Role) -> Sequence[User]:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can list users")
        return self._users.list_all()

    def set_active(self, *, current_role: Role, current_user_id: int, user_id: int, is_active: bool) -> User:
        if current_role != Role.ADMIN:
            raise AuthorizationError("Only admins can change account status")
        if int(user_id) == int(current_user_id) and not is_active:
            raise ValidationError("Admins cannot deactivate their own account")

        self.get_profile(user_id)
        self._users.set_active(int(user_id), is_active=bool(is_active))
        logger.info("User %s set is_active=%s", user_id, bool(is_active))
        return self.get_profile(user_id)
