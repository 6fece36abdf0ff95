"""
Authentication use cases: register, log in, log out and restore a session.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
import logging

from stockbook.core.errors import WeakPasswordError
from stockbook.core.security import generate_session_token, validate_password_strength
from stockbook.domain.records import User
from stockbook.repositories.users import UserRepository
from stockbook.services.session_service import SessionStore

logger = logging.getLogger("stockbook.auth")


@dataclass
class AuthResult:
    user: User
    token: str


@dataclass
class AuthService:
    """Registers users and keeps the local session in sync with logins."""

    users: UserRepository
    sessions: SessionStore

    def _start_session(self, user: User) -> AuthResult:
        token = generate_session_token()
        self.sessions.save_session(user, token)
        return AuthResult(user=user, token=token)

    # -------------------------------------- registration --------------------------------------
    def register(self, email: str, full_name: str, password: str) -> AuthResult:
        check = validate_password_strength(password)
        if not check.valid:
            raise WeakPasswordError(check.reason or "Invalid password")
        user = self.users.create(email, full_name, password)
        logger.info("Registered user %s", user.id)
        return self._start_session(user)

    # -------------------------------------- login --------------------------------------
    def login(self, email: str, password: str) -> AuthResult:
        user = self.users.authenticate(email, password)
        logger.info("User %s logged in", user.id)
        return self._start_session(user)

    def logout(self) -> None:
        self.sessions.clear()

    def restore(self) -> Optional[User]:
        if not self.sessions.is_active():
            return None
        return self.sessions.current_user()
