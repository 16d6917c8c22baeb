"""
The ProjectRecord data model.

Stored and seed JSON use the site's camelCase keys (``imageSrc``,
``techStack``); attributes are snake_case.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Union

RecordId = Union[int, str]

# JSON key -> attribute name, for every field except id and links
FIELD_KEYS: dict[str, str] = {
    "title": "title",
    "headline": "headline",
    "overview": "overview",
    "imageSrc": "image_src",
    "techStack": "tech_stack",
    "category": "category",
}

EDITABLE_FIELDS = (*FIELD_KEYS, "links")


def _string_list(data: dict[str, Any], key: str) -> tuple[str, ...]:
    value = data.get(key)
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ValueError(f"{key} must be a list, got {type(value).__name__}")
    return tuple(str(item) for item in value)


@dataclass(frozen=True)
class ProjectLinks:
    github: str = ""
    site: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> ProjectLinks:
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError(f"links must be an object, got {type(data).__name__}")
        return cls(github=str(data.get("github", "")), site=str(data.get("site", "")))

    def to_dict(self) -> dict[str, str]:
        return {"github": self.github, "site": self.site}


@dataclass(frozen=True)
class ProjectRecord:
    """One portfolio entry."""

    id: RecordId
    title: str = ""
    headline: str = ""
    overview: str = ""
    image_src: str = ""
    tech_stack: tuple[str, ...] = ()
    category: tuple[str, ...] = ()
    links: ProjectLinks = field(default_factory=ProjectLinks)

    @classmethod
    def from_dict(cls, data: dict[str, Any], record_id: RecordId | None = None) -> ProjectRecord:
        """Build a record from its JSON form.

        Args:
            data: Record dict with camelCase keys; unknown keys are ignored.
            record_id: Id to use instead of ``data["id"]``.

        Raises:
            ValueError: No id, or a field of the wrong shape (non-object
                record or links, non-list techStack/category).
        """
        if not isinstance(data, dict):
            raise ValueError(f"Project record must be an object, got {type(data).__name__}")
        rid = record_id if record_id is not None else data.get("id")
        if rid is None:
            raise ValueError("Project record has no id")
        return cls(
            id=rid,
            title=str(data.get("title", "")),
            headline=str(data.get("headline", "")),
            overview=str(data.get("overview", "")),
            image_src=str(data.get("imageSrc", "")),
            tech_stack=_string_list(data, "techStack"),
            category=_string_list(data, "category"),
            links=ProjectLinks.from_dict(data.get("links")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "headline": self.headline,
            "overview": self.overview,
            "imageSrc": self.image_src,
            "techStack": list(self.tech_stack),
            "category": list(self.category),
            "links": self.links.to_dict(),
        }

    def merged(self, patch: dict[str, Any]) -> ProjectRecord:
        """Return a copy with the fields in *patch* replaced.

        Replacement is shallow: a ``links`` patch replaces both URLs, a list
        patch replaces the whole list. ``id`` and unknown keys are ignored.
        """
        changes: dict[str, Any] = {}
        for key, value in patch.items():
            if key == "links":
                changes["links"] = value if isinstance(value, ProjectLinks) else ProjectLinks.from_dict(value)
            elif key in ("techStack", "category"):
                changes[FIELD_KEYS[key]] = tuple(str(v) for v in value or [])
            elif key in FIELD_KEYS:
                changes[FIELD_KEYS[key]] = "" if value is None else str(value)
        return replace(self, **changes)

    def has_category(self, tag: str) -> bool:
        return tag in self.category


def parse_list_input(value: str) -> list[str]:
    """Split a comma-separated form value, trimming whitespace and dropping blanks."""
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_project_form(fields: dict[str, str]) -> dict[str, Any]:
    """Turn raw form fields into record data.

    ``techStack`` and ``category`` are comma-separated; ``github`` and
    ``site`` are folded into ``links``. Fields absent from *fields* are left
    out so the result can be used as an update patch.
    """
    data: dict[str, Any] = {}
    for key in ("title", "headline", "overview", "imageSrc"):
        if key in fields:
            data[key] = fields[key]
    for key in ("techStack", "category"):
        if key in fields:
            data[key] = parse_list_input(fields[key])
    if "github" in fields or "site" in fields:
        data["links"] = {"github": fields.get("github", ""), "site": fields.get("site", "")}
    return data
