"""
ViewProjection: which projects the grid shows.

``project()`` is pure. Callers re-run it whenever the records, the filter or
the login state change rather than patching a previous result.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from folio.projects.records import ProjectRecord

ALL = "all"


@dataclass(frozen=True)
class View:
    visible: tuple[ProjectRecord, ...]
    show_admin_controls: bool

    @property
    def is_empty(self) -> bool:
        return not self.visible


def project(records: Sequence[ProjectRecord], filter_tag: str, is_logged_in: bool) -> View:
    """Select the records to display.

    Args:
        records: The full collection, in display order.
        filter_tag: ``"all"`` or a category tag.
        is_logged_in: Whether edit/delete controls are offered.

    Returns:
        View with the ordered subsequence of records whose category contains
        ``filter_tag`` (every record for ``"all"``).
    """
    if filter_tag == ALL:
        visible = tuple(records)
    else:
        visible = tuple(r for r in records if r.has_category(filter_tag))
    return View(visible=visible, show_admin_controls=bool(is_logged_in))
