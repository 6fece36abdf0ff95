"""Session helpers (persist, read and clear the logged-in identity)."""
from __future__ import annotations

from typing import Optional

from stockbook.domain.records import User
from stockbook.repositories import codec
from stockbook.repositories.collections import Collections


class SessionStore:
    """
    The current session is a token plus a snapshot of the user taken at login.
    Later changes to the user record are not reflected until the next login.
    """

    def __init__(self, collections: Collections) -> None:
        self.collections = collections
        self.token_key = collections.keys.auth_token
        self.user_key = collections.keys.current_user

    def save_session(self, user: User, token: str) -> None:
        snapshot = codec.encode_record(user)
        with self.collections.locked(self.token_key, self.user_key):
            self.collections.storage.set_many({self.token_key: token, self.user_key: snapshot})

    def current_user(self) -> Optional[User]:
        return self.collections.read_record(self.user_key, User)

    def current_token(self) -> Optional[str]:
        return self.collections.read_value(self.token_key) or None

    def is_active(self) -> bool:
        return bool(self.current_token() and self.collections.read_value(self.user_key))

    def clear(self) -> None:
        with self.collections.locked(self.token_key, self.user_key):
            self.collections.storage.remove_many([self.token_key, self.user_key])
