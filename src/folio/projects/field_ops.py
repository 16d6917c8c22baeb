"""Field schema, coercion and validation for command-line project edits.

``folio projects set 3 category "web, mobile"`` arrives as strings; this
module turns such input into an update patch for RecordStore.update().
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from folio.projects.records import ProjectRecord, parse_list_input

if TYPE_CHECKING:
    from rich.console import Console


class FieldType(Enum):
    STRING = "string"
    STRING_LIST = "string_list"
    LINKS = "links"


@dataclass
class FieldDef:
    field_type: FieldType
    description: str


@dataclass
class ChangeResult:
    """Result of a field change."""

    record_id: Any
    field: str
    old_value: Any
    new_value: Any


FIELD_SCHEMA: dict[str, FieldDef] = {
    "title": FieldDef(FieldType.STRING, "Project title"),
    "headline": FieldDef(FieldType.STRING, "One-line summary shown on the card"),
    "overview": FieldDef(FieldType.STRING, "Longer description"),
    "imageSrc": FieldDef(FieldType.STRING, "Card image path or URL"),
    "techStack": FieldDef(FieldType.STRING_LIST, "Technologies used"),
    "category": FieldDef(FieldType.STRING_LIST, "Filter tags"),
    "links": FieldDef(FieldType.LINKS, "Repository and live-site URLs (links.github, links.site)"),
}

LINK_KEYS = ("github", "site")


def parse_field_path(field: str) -> tuple[str, str | None]:
    """Split ``links.github`` into ("links", "github")."""
    parts = field.split(".", 1)
    if len(parts) == 2:
        return parts[0], parts[1]
    return parts[0], None


def coerce_value(value_str: str, field_def: FieldDef, sub: str | None = None) -> Any:
    """Coerce raw CLI input to the field's type.

    Raises:
        ValueError: If the value cannot be coerced.
    """
    ft = field_def.field_type

    if ft == FieldType.STRING:
        return value_str

    if ft == FieldType.STRING_LIST:
        stripped = value_str.strip()
        if stripped.startswith("["):
            try:
                parsed = json.loads(stripped)
                if isinstance(parsed, list):
                    return [str(item) for item in parsed]
            except json.JSONDecodeError:
                pass
        return parse_list_input(value_str)

    if ft == FieldType.LINKS:
        if sub is not None:
            return value_str
        try:
            parsed = json.loads(value_str)
        except json.JSONDecodeError as e:
            raise ValueError(f"Expected JSON object with github/site, got: {value_str!r}") from e
        if not isinstance(parsed, dict):
            raise ValueError(f"Expected JSON object with github/site, got: {value_str!r}")
        return {key: str(parsed.get(key, "")) for key in LINK_KEYS}

    raise ValueError(f"Unknown field type: {ft}")


def validate_field(field: str) -> list[str]:
    """Check that *field* names an editable field. Returns error messages."""
    top, sub = parse_field_path(field)
    field_def = FIELD_SCHEMA.get(top)
    if field_def is None:
        return [f"Unknown field: {top!r}. Options: {', '.join(FIELD_SCHEMA)}"]
    if sub is not None:
        if field_def.field_type != FieldType.LINKS:
            return [f"Dot notation only works on links, but {top!r} is {field_def.field_type.value}."]
        if sub not in LINK_KEYS:
            return [f"Unknown link: {sub!r}. Options: {', '.join(LINK_KEYS)}"]
    return []


def build_patch(record: ProjectRecord, field: str, value_str: str) -> tuple[dict[str, Any], ChangeResult]:
    """Turn one CLI edit into an update patch.

    Raises:
        ValueError: If the field is unknown or the value cannot be coerced.
    """
    errors = validate_field(field)
    if errors:
        raise ValueError("; ".join(errors))

    top, sub = parse_field_path(field)
    value = coerce_value(value_str, FIELD_SCHEMA[top], sub)
    current = record.to_dict()

    if sub is not None:
        # links is replaced as a whole, so carry the other URL over
        new_links = dict(current["links"])
        new_links[sub] = value
        return {"links": new_links}, ChangeResult(record.id, field, current["links"][sub], value)

    return {top: value}, ChangeResult(record.id, field, current[top], value)


def print_change(result: ChangeResult, console: Console) -> None:
    console.print(f"[cyan]#{result.record_id}[/cyan]: {result.field}")
    if result.old_value not in (None, "", []):
        console.print(f"  old: {result.old_value}")
    console.print(f"  new: {result.new_value}")
