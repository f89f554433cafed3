"""Route handlers for the API and the HTML pages."""

from eduxchange.api.routes import (
    auth,
    dashboard,
    files,
    health,
    pages,
    profile,
    resources,
)

__all__ = [
    "auth",
    "dashboard",
    "files",
    "health",
    "pages",
    "profile",
    "resources",
]
