"""Resource type taxonomy and the limits applied to resource forms.

Each resource type carries its display metadata (label, icon, badge colour)
and whether it is backed by an uploaded file or an external link.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

MAX_TAGS = 5
MAX_RESOURCE_FILE_BYTES = 50 * 1024 * 1024


class ResourceType(StrEnum):
    """Kinds of academic resource a student can share."""

    PDF = "pdf"
    NOTES = "notes"
    VIDEO = "video"
    IMAGE = "image"
    LINK = "link"


@dataclass(frozen=True)
class ResourceTypeInfo:
    label: str
    description: str
    icon: str
    color_class: str


RESOURCE_TYPE_INFO: dict[ResourceType, ResourceTypeInfo] = {
    ResourceType.PDF: ResourceTypeInfo(
        label="PDF Document",
        description="Upload PDF files",
        icon="file-text",
        color_class="bg-red-100 text-red-700",
    ),
    ResourceType.NOTES: ResourceTypeInfo(
        label="Notes",
        description="Written study notes",
        icon="sticky-note",
        color_class="bg-amber-100 text-amber-700",
    ),
    ResourceType.VIDEO: ResourceTypeInfo(
        label="Video",
        description="Video content link",
        icon="video",
        color_class="bg-blue-100 text-blue-700",
    ),
    ResourceType.IMAGE: ResourceTypeInfo(
        label="Image",
        description="Images and diagrams",
        icon="image",
        color_class="bg-emerald-100 text-emerald-700",
    ),
    ResourceType.LINK: ResourceTypeInfo(
        label="External Link",
        description="External resource",
        icon="link",
        color_class="bg-violet-100 text-violet-700",
    ),
}

# Types whose content is an uploaded blob vs. an external URL.
FILE_RESOURCE_TYPES = frozenset({ResourceType.PDF, ResourceType.IMAGE})
LINK_RESOURCE_TYPES = frozenset({ResourceType.VIDEO, ResourceType.LINK})


def parse_resource_type(value: str | None) -> ResourceType | None:
    """Return the ResourceType for ``value``, or None if it is not a known type."""
    if not value:
        return None
    try:
        return ResourceType(value.strip().lower())
    except ValueError:
        return None


def requires_file(resource_type: ResourceType) -> bool:
    return resource_type in FILE_RESOURCE_TYPES


def requires_link(resource_type: ResourceType) -> bool:
    return resource_type in LINK_RESOURCE_TYPES
