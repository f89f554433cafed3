"""Formatting helpers shared by the HTML templates.

Pure functions only; nothing here touches the database or the object store.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from eduxchange.constants.resource_types import (
    RESOURCE_TYPE_INFO,
    ResourceType,
    ResourceTypeInfo,
    parse_resource_type,
)


def resource_type_style(resource_type: str | None) -> ResourceTypeInfo:
    """Return display metadata for a type, falling back to the PDF style."""
    parsed = parse_resource_type(resource_type)
    return RESOURCE_TYPE_INFO[parsed or ResourceType.PDF]


def format_file_size(size: int | None) -> str | None:
    if not size:
        return None
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / 1024 / 1024:.1f} MB"


def format_date(value: datetime | None, long: bool = False) -> str:
    """Format as ``Jan 5, 2024`` or, when ``long``, ``Friday, January 5, 2024``."""
    if value is None:
        return ""
    if long:
        return f"{value:%A}, {value:%B} {value.day}, {value.year}"
    return f"{value:%b} {value.day}, {value.year}"


def was_edited(resource: dict[str, Any]) -> bool:
    return resource.get("updated_at") != resource.get("created_at")


def filter_tabs(active_type: str | None) -> list[dict[str, Any]]:
    """Return the list page filter tabs, "All" first, with the active one marked."""
    active = parse_resource_type(active_type)
    tabs = [{"label": "All", "value": None, "active": active is None}]
    for resource_type in ResourceType:
        value = resource_type.value
        tabs.append(
            {
                "label": value if value.endswith("s") else f"{value}s",
                "value": value,
                "active": active is resource_type,
            }
        )
    return tabs
