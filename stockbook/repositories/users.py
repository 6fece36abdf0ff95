"""User collection: registration, credential checks and profile updates."""
from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping, Optional
import logging

from stockbook.core.errors import DuplicateEmailError, InvalidCredentialsError, InvalidFieldError, NotFoundError
from stockbook.core.security import generate_id, hash_password, needs_rehash, verify_password
from stockbook.domain.records import User
from stockbook.repositories.collections import Collections, checked, resolve_changes

logger = logging.getLogger("stockbook.auth")

_INVALID_CREDENTIALS = "Invalid email or password"


def _same_email(a: str, b: str) -> bool:
    return a.strip().lower() == b.strip().lower()


class UserRepository:
    def __init__(self, collections: Collections) -> None:
        self.collections = collections
        self.key = collections.keys.users

    def list(self) -> list[User]:
        return self.collections.read(self.key, User)

    def get_by_id(self, user_id: str) -> Optional[User]:
        return next((u for u in self.list() if u.id == user_id), None)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.list() if _same_email(u.email, email or "")), None)

    def create(self, email: str, full_name: str, password: str) -> User:
        for field, value in (("email", email), ("fullName", full_name), ("password", password)):
            if not isinstance(value, str):
                raise InvalidFieldError(field, f"{field} must be a string")
        with self.collections.locked(self.key):
            users = self.collections.read(self.key, User, strict=True)
            if any(_same_email(u.email, email) for u in users):
                raise DuplicateEmailError(email)
            user = User(
                id=generate_id(),
                email=email.strip(),
                full_name=full_name.strip(),
                password_hash=hash_password(password),
                created_at=self.collections.now(),
            )
            users.append(user)
            self.collections.write({self.key: users})
        return user

    def authenticate(self, email: str, password: str) -> User:
        # Unknown email and wrong password raise the same error.
        with self.collections.locked(self.key):
            users = self.collections.read(self.key, User, strict=True)
            index = next((i for i, u in enumerate(users) if _same_email(u.email, email or "")), None)
            if index is None or not verify_password(password, users[index].password_hash):
                raise InvalidCredentialsError(_INVALID_CREDENTIALS)
            user = users[index]
            if needs_rehash(user.password_hash):
                user = replace(user, password_hash=hash_password(password))
                users[index] = user
                self.collections.write({self.key: users})
                logger.info("Upgraded password hash for user %s", user.id)
        return user

    def update(self, user_id: str, changes: Mapping[str, Any]) -> User:
        with self.collections.locked(self.key):
            users = self.collections.read(self.key, User, strict=True)
            index = next((i for i, u in enumerate(users) if u.id == user_id), None)
            if index is None:
                raise NotFoundError("User", user_id)
            fields = resolve_changes(User, changes)
            if isinstance(fields.get("email"), str):
                fields["email"] = fields["email"].strip()
            updated = checked(replace(users[index], **fields))
            if "email" in fields and any(_same_email(u.email, updated.email) for u in users if u.id != user_id):
                raise DuplicateEmailError(updated.email)
            users[index] = updated
            self.collections.write({self.key: users})
        return updated
