"""
Seed data sources.

Used once, when the backing store is empty on first load. A source returns
a list of project documents or raises BootstrapUnavailable.
"""

from __future__ import annotations

import json
import logging
import urllib.request
from pathlib import Path
from typing import Any, Protocol

from folio.core.errors import BootstrapUnavailable

logger = logging.getLogger(__name__)


class BootstrapSource(Protocol):
    def fetch(self) -> list[dict[str, Any]]:
        ...


def _check_documents(data: Any, origin: str) -> list[dict[str, Any]]:
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise BootstrapUnavailable(f"Seed data from {origin} is not a list of projects")
    return data


class FileBootstrap:
    """Reads seed projects from a local JSON file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def fetch(self) -> list[dict[str, Any]]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise BootstrapUnavailable(f"Cannot read seed file {self.path}: {e}") from e
        return _check_documents(data, str(self.path))


class UrlBootstrap:
    """Fetches seed projects from a URL serving a JSON array."""

    def __init__(self, url: str, timeout: int = 10):
        self.url = url
        self.timeout = timeout

    def fetch(self) -> list[dict[str, Any]]:
        try:
            req = urllib.request.Request(self.url, headers={"Accept": "application/json"})
            with urllib.request.urlopen(req, timeout=self.timeout) as response:
                data = json.loads(response.read().decode("utf-8"))
        except (OSError, ValueError) as e:
            logger.debug("Failed to fetch %s", self.url, exc_info=True)
            raise BootstrapUnavailable(f"Cannot fetch seed data from {self.url}: {e}") from e
        return _check_documents(data, self.url)


def bootstrap_from_setting(value: str | None, base_dir: Path | None = None) -> BootstrapSource | None:
    """Build a source from the ``projects.seed`` setting.

    http(s) values become a UrlBootstrap; anything else is a file path,
    resolved against *base_dir* when relative.
    """
    if not value:
        return None
    if value.startswith(("http://", "https://")):
        return UrlBootstrap(value)
    path = Path(value).expanduser()
    if not path.is_absolute() and base_dir is not None:
        path = base_dir / path
    return FileBootstrap(path)
