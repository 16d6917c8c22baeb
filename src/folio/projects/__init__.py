"""Project records, their store, and the filtered grid view."""

from folio.projects.records import ProjectLinks, ProjectRecord
from folio.projects.store import RecordStore
from folio.projects.view import ALL, View, project

__all__ = ["ProjectLinks", "ProjectRecord", "RecordStore", "View", "ALL", "project"]
