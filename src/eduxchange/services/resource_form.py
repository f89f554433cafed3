"""Form state and validation for creating and editing resources."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from eduxchange.constants.resource_types import (
    MAX_RESOURCE_FILE_BYTES,
    MAX_TAGS,
    ResourceType,
    parse_resource_type,
    requires_file,
    requires_link,
)

__all__ = [
    "ResourceFormData",
    "UploadedFile",
    "add_tag",
    "clean_optional",
    "normalize_tags",
    "remove_tag",
    "validate_edit_form",
    "validate_resource_form",
]


@dataclass
class UploadedFile:
    """A file received from a form submission."""

    filename: str
    content_type: str | None
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass
class ResourceFormData:
    """Fields submitted by the upload form."""

    title: str
    resource_type: str = ResourceType.PDF.value
    description: str = ""
    subject: str = ""
    course_code: str = ""
    external_link: str = ""
    is_public: bool = True
    tags: list[str] = field(default_factory=list)


def clean_optional(value: str | None) -> str | None:
    """Strip ``value`` and turn blank input into None."""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


def add_tag(tags: list[str], tag: str) -> list[str]:
    """Return ``tags`` with ``tag`` appended.

    Blank and duplicate tags are ignored, and nothing is added once
    MAX_TAGS entries are present.
    """
    cleaned = tag.strip()
    if not cleaned or cleaned in tags or len(tags) >= MAX_TAGS:
        return list(tags)
    return [*tags, cleaned]


def remove_tag(tags: list[str], tag: str) -> list[str]:
    return [t for t in tags if t != tag]


def normalize_tags(tags: Iterable[str] | None) -> list[str]:
    """Strip tags and drop blanks and duplicates, keeping first-seen order."""
    result: list[str] = []
    for tag in tags or ():
        cleaned = tag.strip()
        if cleaned and cleaned not in result:
            result.append(cleaned)
    return result


def _validate_common(title: str | None, tags: Iterable[str] | None) -> str | None:
    if not (title or "").strip():
        return "Please enter a title"
    if len(normalize_tags(tags)) > MAX_TAGS:
        return f"You can add up to {MAX_TAGS} tags"
    return None


def validate_resource_form(form: ResourceFormData, upload: UploadedFile | None) -> str | None:
    """Validate an upload form submission.

    Args:
        form: Submitted form fields.
        upload: Attached file, if any.

    Returns:
        User-facing error message if validation fails, None if valid.
    """
    error = _validate_common(form.title, form.tags)
    if error:
        return error

    resource_type = parse_resource_type(form.resource_type)
    if resource_type is None:
        return "Please choose a valid resource type"

    has_link = bool(form.external_link.strip())
    has_file = upload is not None and upload.size > 0

    if requires_link(resource_type) and not has_link:
        return "Please enter an external link"
    if requires_file(resource_type) and not has_file:
        return "Please select a file to upload"
    if resource_type is ResourceType.NOTES and has_file and has_link:
        return "Notes can include a file or a link, not both"
    if has_file and not requires_link(resource_type) and upload.size > MAX_RESOURCE_FILE_BYTES:
        return "File is too large"
    return None


def validate_edit_form(
    resource_type: ResourceType,
    *,
    title: str | None,
    external_link: str | None,
    tags: Iterable[str] | None,
    has_file: bool,
) -> str | None:
    """Validate the merged state of an edited resource.

    The file cannot be replaced on edit, so only the link rules apply.
    """
    error = _validate_common(title, tags)
    if error:
        return error

    has_link = bool((external_link or "").strip())
    if requires_link(resource_type) and not has_link:
        return "Please enter an external link"
    if resource_type is ResourceType.NOTES and has_file and has_link:
        return "Notes can include a file or a link, not both"
    return None
