from __future__ import annotations

from eduxchange.constants.profile_options import YEAR_OF_STUDY_OPTIONS
from eduxchange.constants.resource_types import (
    MAX_TAGS,
    RESOURCE_TYPE_INFO,
    ResourceType,
    ResourceTypeInfo,
    parse_resource_type,
    requires_file,
    requires_link,
)

__all__ = [
    "MAX_TAGS",
    "RESOURCE_TYPE_INFO",
    "YEAR_OF_STUDY_OPTIONS",
    "ResourceType",
    "ResourceTypeInfo",
    "parse_resource_type",
    "requires_file",
    "requires_link",
]
