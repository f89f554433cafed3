"""Services"""

from eduxchange.services.auth import get_user_for_token, sign_in, sign_out, sign_up
from eduxchange.services.profile import get_profile, set_avatar, upsert_profile
from eduxchange.services.resources import (
    count_resources,
    create_resource,
    delete_resource,
    get_dashboard_stats,
    get_owned_resource,
    get_resource,
    list_resources,
    record_download,
    record_view,
    update_resource,
)

__all__ = [
    "sign_up",
    "sign_in",
    "sign_out",
    "get_user_for_token",
    "get_profile",
    "upsert_profile",
    "set_avatar",
    "create_resource",
    "update_resource",
    "delete_resource",
    "list_resources",
    "get_owned_resource",
    "get_resource",
    "record_view",
    "record_download",
    "count_resources",
    "get_dashboard_stats",
]
