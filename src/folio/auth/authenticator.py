"""
Admin authentication and the login permission state.

Passwords are checked against a passlib hash. In persistent mode the signed-in
user is written to .folio/session.json so a later command starts logged in.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from datetime import datetime
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any

from passlib.context import CryptContext

from folio.core.backup import safe_write_json
from folio.core.errors import AuthFailure
from folio.core.events import Listeners, Subscription

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

DEFAULT_USERNAME = "admin"
DEFAULT_PASSWORD = "1234"


class PermissionState(Enum):
    LOGGED_OUT = "logged_out"
    LOGGED_IN = "logged_in"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


@lru_cache(maxsize=1)
def default_password_hash() -> str:
    return hash_password(DEFAULT_PASSWORD)


class SessionFile:
    """Signed-in user persisted between processes."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> str | None:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError):
            logger.warning("Ignoring unreadable session file %s", self.path)
            return None
        user = data.get("user") if isinstance(data, dict) else None
        return str(user) if user else None

    def save(self, user: str) -> None:
        safe_write_json(
            self.path,
            {"user": user, "signed_in_at": datetime.now().isoformat(timespec="seconds")},
            create_backup_first=False,
        )

    def clear(self) -> None:
        self.path.unlink(missing_ok=True)


class CredentialAuthenticator:
    """Checks the admin credential pair and tracks the current session.

    Session changes (sign in, sign out, expiry) are delivered to callbacks
    registered with on_session_change(); the callback receives the signed-in
    username or None.
    """

    def __init__(
        self,
        username: str = DEFAULT_USERNAME,
        password_hash: str | None = None,
        session_file: SessionFile | None = None,
    ):
        if password_hash is None:
            logger.warning("No admin password configured; using the default password")
            password_hash = default_password_hash()
        self.username = username
        self._password_hash = password_hash
        self._session_file = session_file
        self._user = session_file.load() if session_file else None
        if self._user is not None and self._user != username:
            # Session belongs to an account that no longer exists
            self._user = None
        self._listeners = Listeners()

    def verify(self, username: str, password: str) -> bool:
        if username.lower() != self.username.lower():
            return False
        try:
            return bool(pwd_context.verify(password, self._password_hash))
        except (ValueError, TypeError):
            logger.error("Configured admin password hash is not valid")
            return False

    def sign_in(self, username: str, password: str) -> str:
        """Start a session.

        Raises:
            AuthFailure: Wrong username or password. The session is unchanged.
        """
        if not self.verify(username, password):
            raise AuthFailure("Invalid username or password")
        self._set_user(self.username)
        return self.username

    def sign_out(self) -> None:
        self._set_user(None)

    def expire(self) -> None:
        """End the session from outside, e.g. when its token lapses."""
        if self._user is not None:
            logger.info("Session for %s expired", self._user)
        self._set_user(None)

    def current_session(self) -> str | None:
        return self._user

    def on_session_change(self, callback: Callable[[str | None], Any]) -> Subscription:
        return self._listeners.subscribe(callback)

    def _set_user(self, user: str | None) -> None:
        if self._session_file is not None:
            if user is None:
                self._session_file.clear()
            else:
                self._session_file.save(user)
        changed = user != self._user
        self._user = user
        if changed:
            self._listeners.emit(user)
