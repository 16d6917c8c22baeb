"""
Application state and the controller that wires the pieces together.

Every external trigger (form submit, delete, clear, filter pick, login,
logout, a change pushed by the backend) goes through PortfolioApp. After each
one the view is re-projected from scratch and handed to the renderer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from folio.auth.authenticator import CredentialAuthenticator, PermissionState
from folio.core.errors import (
    AuthFailure,
    FolioError,
    NotFound,
    Outcome,
    PermissionDenied,
)
from folio.core.events import Subscription
from folio.projects.records import ProjectRecord, RecordId
from folio.projects.store import RecordStore
from folio.projects.view import ALL, View, project

logger = logging.getLogger(__name__)


class Renderer(Protocol):
    def render(self, visible: tuple[ProjectRecord, ...], show_admin_controls: bool) -> None:
        ...


@dataclass
class AppState:
    """Login state and filter selection for one session."""

    permission: PermissionState = PermissionState.LOGGED_OUT
    current_filter: str = ALL

    @property
    def is_logged_in(self) -> bool:
        return self.permission is PermissionState.LOGGED_IN

    def sign_in(self) -> None:
        self.permission = PermissionState.LOGGED_IN

    def sign_out(self) -> None:
        self.permission = PermissionState.LOGGED_OUT


class PortfolioApp:
    """Routes user actions to the store and state, then re-renders."""

    def __init__(
        self,
        store: RecordStore,
        authenticator: CredentialAuthenticator,
        renderer: Renderer | None = None,
        state: AppState | None = None,
    ):
        self.store = store
        self.authenticator = authenticator
        self.renderer = renderer
        self.state = state or AppState()
        self._subscriptions: list[Subscription] = [
            store.subscribe(lambda _records: self.refresh()),
            authenticator.on_session_change(self._on_session_change),
        ]

    # -- lifecycle -------------------------------------------------------

    def start(self) -> Outcome:
        """Rehydrate the session, load projects and render the first view."""
        if self.authenticator.current_session() is not None:
            self.state.sign_in()
        outcome = self.store.load()
        if not outcome.ok:
            logger.warning("Starting with an empty project list: %s", outcome.message)
        self.refresh()
        return outcome

    def close(self) -> None:
        for subscription in self._subscriptions:
            subscription.cancel()
        self._subscriptions.clear()
        self.store.close()

    def view(self) -> View:
        return project(self.store.list(), self.state.current_filter, self.state.is_logged_in)

    def refresh(self) -> View:
        current = self.view()
        if self.renderer is not None:
            self.renderer.render(current.visible, current.show_admin_controls)
        return current

    # -- auth ------------------------------------------------------------

    def login(self, username: str, password: str) -> Outcome:
        try:
            user = self.authenticator.sign_in(username, password)
        except AuthFailure as e:
            return Outcome.failure(e)
        self.state.sign_in()
        self.refresh()
        return Outcome.success(user, message="Logged in")

    def logout(self) -> Outcome:
        self.state.sign_out()
        self.authenticator.sign_out()
        self.refresh()
        return Outcome.success(message="Logged out")

    def _on_session_change(self, user: str | None) -> None:
        if user is None and self.state.is_logged_in:
            self.state.sign_out()
            self.refresh()

    # -- filter ----------------------------------------------------------

    def select_filter(self, tag: str) -> Outcome:
        self.state.current_filter = tag or ALL
        return Outcome.success(self.refresh())

    # -- project CRUD ----------------------------------------------------

    def _require_login(self) -> None:
        if not self.state.is_logged_in:
            raise PermissionDenied("Admin login is required")

    def get_project(self, record_id: RecordId) -> Outcome:
        record = self.store.get_by_id(record_id)
        if record is None:
            return Outcome.failure(NotFound(f"No project with id {record_id}"))
        return Outcome.success(record)

    def submit_project(self, data: dict[str, Any], record_id: RecordId | None = None) -> Outcome:
        """Create a project, or update one when *record_id* is given."""
        try:
            self._require_login()
            if record_id is None:
                record = self.store.create(data)
                return Outcome.success(record, message="Project added")
            updated = self.store.update(record_id, data)
        except FolioError as e:
            return Outcome.failure(e)
        if updated is None:
            return Outcome.success(None, message=f"No project with id {record_id}; nothing changed")
        return Outcome.success(updated, message="Project updated")

    def delete_project(self, record_id: RecordId) -> Outcome:
        try:
            self._require_login()
            removed = self.store.delete(record_id)
        except FolioError as e:
            return Outcome.failure(e)
        message = "Project deleted" if removed else f"No project with id {record_id}; nothing changed"
        return Outcome.success(removed, message=message)

    def clear_projects(self) -> Outcome:
        try:
            self._require_login()
            self.store.clear_all()
        except FolioError as e:
            return Outcome.failure(e)
        return Outcome.success(message="All projects deleted")


def build_app(renderer: Renderer | None = None, site_root: Any = None) -> PortfolioApp:
    """Assemble a PortfolioApp from the site's paths and configuration."""
    from folio.auth.authenticator import SessionFile
    from folio.config.commands import get_setting
    from folio.core.config import get_paths
    from folio.projects.backends import open_backend
    from folio.projects.bootstrap import bootstrap_from_setting

    paths = get_paths(site_root)
    backend = open_backend(
        get_setting("projects.backend"),
        paths,
        keep_backups=int(get_setting("backup.keep_count")),
        keep_days=int(get_setting("backup.keep_days")),
    )
    store = RecordStore(backend, bootstrap_from_setting(get_setting("projects.seed"), paths.root))

    session_file = SessionFile(paths.session_file) if get_setting("auth.persist_session") else None
    authenticator = CredentialAuthenticator(
        username=get_setting("auth.username"),
        password_hash=get_setting("auth.password_hash"),
        session_file=session_file,
    )
    return PortfolioApp(store, authenticator, renderer)
