"""Server-rendered HTML pages.

Pages authenticate with the session cookie set at sign-in. Redirects carry
a ``message`` or ``error`` query parameter that the base template shows as
a notification.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any
from urllib.parse import urlencode

from fastapi import APIRouter, Cookie, Depends, File, Form, Query, Request, UploadFile, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from eduxchange.config import SESSION_COOKIE_NAME
from eduxchange.constants import (
    MAX_TAGS,
    RESOURCE_TYPE_INFO,
    YEAR_OF_STUDY_OPTIONS,
    ResourceType,
    parse_resource_type,
)
from eduxchange.rendering import (
    filter_tabs,
    format_date,
    format_file_size,
    resource_type_style,
    was_edited,
)
from eduxchange.services.auth import (
    CurrentUser,
    get_user_for_token,
    sign_in,
    sign_out,
    sign_up,
)
from eduxchange.services.profile import get_profile, set_avatar, upsert_profile
from eduxchange.services.resource_form import ResourceFormData, UploadedFile, add_tag
from eduxchange.services.resources import (
    RESOURCE_NOT_FOUND,
    count_resources,
    create_resource,
    delete_resource,
    get_dashboard_stats,
    get_owned_resource,
    list_resources,
    record_view,
    update_resource,
)

TEMPLATES_DIR = Path(__file__).resolve().parents[2] / "templates"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
templates.env.filters["file_size"] = format_file_size
templates.env.filters["date"] = format_date
templates.env.globals.update(
    type_style=resource_type_style,
    was_edited=was_edited,
    resource_types=list(ResourceType),
    type_info=RESOURCE_TYPE_INFO,
    year_options=YEAR_OF_STUDY_OPTIONS,
    max_tags=MAX_TAGS,
)

router = APIRouter(tags=["pages"], include_in_schema=False)


class LoginRequiredError(Exception):
    """Raised by page dependencies when no valid session cookie is present."""


def require_page_user(
    session_cookie: Annotated[str | None, Cookie(alias=SESSION_COOKIE_NAME)] = None,
) -> CurrentUser:
    user = get_user_for_token(session_cookie)
    if user is None:
        raise LoginRequiredError
    return user


PageUser = Annotated[CurrentUser, Depends(require_page_user)]


def _redirect(
    url: str, *, message: str | None = None, error: str | None = None
) -> RedirectResponse:
    params = {k: v for k, v in (("message", message), ("error", error)) if v}
    if params:
        url = f"{url}?{urlencode(params)}"
    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


def _render(
    request: Request,
    name: str,
    user: CurrentUser | None = None,
    status_code: int = status.HTTP_200_OK,
    **context: Any,
) -> HTMLResponse:
    values: dict[str, Any] = {
        "user": user,
        "message": request.query_params.get("message"),
        "error": request.query_params.get("error"),
    }
    values.update(context)
    return templates.TemplateResponse(request, name, values, status_code=status_code)


def _parse_tags(raw: str) -> list[str]:
    """Split comma-separated tags, keeping at most MAX_TAGS unique entries."""
    tags: list[str] = []
    for part in raw.split(","):
        tags = add_tag(tags, part)
    return tags


def _sign_in_response(token: str) -> RedirectResponse:
    response = _redirect("/dashboard")
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
    )
    return response


# --- Authentication ---


@router.get("/")
def index(
    session_cookie: Annotated[str | None, Cookie(alias=SESSION_COOKIE_NAME)] = None,
) -> RedirectResponse:
    if get_user_for_token(session_cookie) is None:
        return _redirect("/login")
    return _redirect("/dashboard")


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request) -> HTMLResponse:
    return _render(request, "login.html")


@router.post("/login", response_model=None)
def login_submit(
    request: Request,
    email: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
) -> HTMLResponse | RedirectResponse:
    token, error = sign_in(email, password)
    if token is None:
        return _render(
            request,
            "login.html",
            status_code=status.HTTP_400_BAD_REQUEST,
            error=error,
            email=email,
        )
    return _sign_in_response(token)


@router.get("/signup", response_class=HTMLResponse)
def signup_page(request: Request) -> HTMLResponse:
    return _render(request, "signup.html")


@router.post("/signup", response_model=None)
def signup_submit(
    request: Request,
    full_name: Annotated[str, Form()] = "",
    email: Annotated[str, Form()] = "",
    password: Annotated[str, Form()] = "",
) -> HTMLResponse | RedirectResponse:
    user, error = sign_up(email, password, full_name)
    token = None
    if user is not None:
        token, error = sign_in(email, password)
    if token is None:
        return _render(
            request,
            "signup.html",
            status_code=status.HTTP_400_BAD_REQUEST,
            error=error,
            email=email,
            full_name=full_name,
        )
    return _sign_in_response(token)


@router.post("/logout")
def logout(
    session_cookie: Annotated[str | None, Cookie(alias=SESSION_COOKIE_NAME)] = None,
) -> RedirectResponse:
    sign_out(session_cookie)
    response = _redirect("/login", message="You have been signed out")
    response.delete_cookie(SESSION_COOKIE_NAME)
    return response


# --- Dashboard ---


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard_page(request: Request, user: PageUser) -> HTMLResponse:
    stats = get_dashboard_stats(user["id"])
    if stats is None:
        stats = {
            "total_resources": 0,
            "total_views": 0,
            "total_downloads": 0,
            "recent_resources": [],
        }
    return _render(
        request,
        "dashboard.html",
        user,
        stats=stats,
        profile=get_profile(user["id"]),
    )


# --- Resources ---


@router.get("/dashboard/resources", response_class=HTMLResponse)
def resources_page(
    request: Request,
    user: PageUser,
    resource_type: Annotated[str | None, Query(alias="type")] = None,
) -> HTMLResponse:
    """List the user's resources; an unknown type filter falls back to "All"."""
    active = parse_resource_type(resource_type)
    resources = list_resources(user["id"], active.value if active else None)
    error = None
    if resources is None:
        resources = []
        error = "Failed to load resources"
    context: dict[str, Any] = {
        "resources": resources,
        "tabs": filter_tabs(active.value if active else None),
    }
    if error:
        context["error"] = error
    return _render(request, "resources.html", user, **context)


@router.get("/dashboard/upload", response_class=HTMLResponse)
def upload_page(
    request: Request,
    user: PageUser,
    resource_type: Annotated[str | None, Query(alias="type")] = None,
) -> HTMLResponse:
    selected = parse_resource_type(resource_type) or ResourceType.PDF
    return _render(
        request,
        "upload.html",
        user,
        form=ResourceFormData(title="", resource_type=selected.value),
        tags_text="",
    )


@router.post("/dashboard/upload", response_model=None)
async def upload_submit(
    request: Request,
    user: PageUser,
    title: Annotated[str, Form()] = "",
    resource_type: Annotated[str, Form()] = ResourceType.PDF.value,
    description: Annotated[str, Form()] = "",
    subject: Annotated[str, Form()] = "",
    course_code: Annotated[str, Form()] = "",
    external_link: Annotated[str, Form()] = "",
    is_public: Annotated[bool, Form()] = False,
    tags: Annotated[str, Form()] = "",
    file: Annotated[UploadFile | None, File()] = None,
) -> HTMLResponse | RedirectResponse:
    form = ResourceFormData(
        title=title,
        resource_type=resource_type,
        description=description,
        subject=subject,
        course_code=course_code,
        external_link=external_link,
        is_public=is_public,
        tags=_parse_tags(tags),
    )
    upload = None
    if file is not None and file.filename:
        upload = UploadedFile(
            filename=file.filename,
            content_type=file.content_type,
            data=await file.read(),
        )

    created, error = create_resource(user["id"], form, upload)
    if created is None:
        return _render(
            request,
            "upload.html",
            user,
            status_code=status.HTTP_400_BAD_REQUEST,
            error=error,
            form=form,
            tags_text=", ".join(form.tags),
        )
    return _redirect(
        f"/dashboard/resources/{created['id']}",
        message="Resource uploaded successfully",
    )


@router.get("/dashboard/resources/{resource_id}", response_model=None)
def resource_detail_page(
    request: Request, resource_id: str, user: PageUser
) -> HTMLResponse | RedirectResponse:
    resource = record_view(resource_id, user["id"])
    if resource is None:
        return _redirect("/dashboard/resources", error=RESOURCE_NOT_FOUND)
    return _render(
        request,
        "resource_detail.html",
        user,
        resource=resource,
        is_owner=resource["user_id"] == user["id"],
    )


@router.get("/dashboard/resources/{resource_id}/edit", response_model=None)
def edit_page(
    request: Request, resource_id: str, user: PageUser
) -> HTMLResponse | RedirectResponse:
    resource = get_owned_resource(user["id"], resource_id)
    if resource is None:
        return _redirect("/dashboard/resources", error=RESOURCE_NOT_FOUND)
    return _render(
        request,
        "resource_edit.html",
        user,
        resource=resource,
        tags_text=", ".join(resource["tags"] or []),
    )


@router.post("/dashboard/resources/{resource_id}/edit", response_model=None)
def edit_submit(
    request: Request,
    resource_id: str,
    user: PageUser,
    title: Annotated[str, Form()] = "",
    description: Annotated[str, Form()] = "",
    subject: Annotated[str, Form()] = "",
    course_code: Annotated[str, Form()] = "",
    external_link: Annotated[str, Form()] = "",
    is_public: Annotated[bool, Form()] = False,
    tags: Annotated[str, Form()] = "",
) -> HTMLResponse | RedirectResponse:
    changes = {
        "title": title,
        "description": description,
        "subject": subject,
        "course_code": course_code,
        "external_link": external_link,
        "is_public": is_public,
        "tags": _parse_tags(tags),
    }
    updated, error = update_resource(user["id"], resource_id, changes)
    if error == RESOURCE_NOT_FOUND:
        return _redirect("/dashboard/resources", error=RESOURCE_NOT_FOUND)
    if updated is None:
        resource = get_owned_resource(user["id"], resource_id)
        if resource is None:
            return _redirect("/dashboard/resources", error=RESOURCE_NOT_FOUND)
        resource.update(changes)
        return _render(
            request,
            "resource_edit.html",
            user,
            status_code=status.HTTP_400_BAD_REQUEST,
            error=error,
            resource=resource,
            tags_text=tags,
        )
    return _redirect(
        f"/dashboard/resources/{resource_id}",
        message="Resource updated successfully",
    )


@router.get("/dashboard/resources/{resource_id}/delete", response_model=None)
def delete_confirm_page(
    request: Request, resource_id: str, user: PageUser
) -> HTMLResponse | RedirectResponse:
    resource = get_owned_resource(user["id"], resource_id)
    if resource is None:
        return _redirect("/dashboard/resources", error=RESOURCE_NOT_FOUND)
    return _render(request, "resource_delete.html", user, resource=resource)


@router.post("/dashboard/resources/{resource_id}/delete")
def delete_submit(resource_id: str, user: PageUser) -> RedirectResponse:
    if not delete_resource(user["id"], resource_id):
        return _redirect("/dashboard/resources", error="Failed to delete resource")
    return _redirect("/dashboard/resources", message="Resource deleted successfully")


# --- Profile ---


@router.get("/dashboard/profile", response_class=HTMLResponse)
def profile_page(request: Request, user: PageUser) -> HTMLResponse:
    return _render(
        request,
        "profile.html",
        user,
        profile=get_profile(user["id"]) or {},
        resource_count=count_resources(user["id"]),
    )


@router.post("/dashboard/profile", response_model=None)
def profile_submit(
    request: Request,
    user: PageUser,
    full_name: Annotated[str, Form()] = "",
    university: Annotated[str, Form()] = "",
    department: Annotated[str, Form()] = "",
    year_of_study: Annotated[str, Form()] = "",
    bio: Annotated[str, Form()] = "",
) -> HTMLResponse | RedirectResponse:
    data = {
        "full_name": full_name,
        "university": university,
        "department": department,
        "year_of_study": year_of_study,
        "bio": bio,
    }
    profile, error = upsert_profile(user["id"], data)
    if profile is None:
        return _render(
            request,
            "profile.html",
            user,
            status_code=status.HTTP_400_BAD_REQUEST,
            error=error,
            profile={**(get_profile(user["id"]) or {}), **data},
            resource_count=count_resources(user["id"]),
        )
    return _redirect("/dashboard/profile", message="Profile updated successfully")


@router.post("/dashboard/profile/avatar")
async def avatar_submit(
    user: PageUser,
    avatar: Annotated[UploadFile | None, File()] = None,
) -> RedirectResponse:
    if avatar is None or not avatar.filename:
        return _redirect("/dashboard/profile", error="Please select an image")
    avatar_url, error = set_avatar(
        user["id"],
        filename=avatar.filename,
        content_type=avatar.content_type,
        data=await avatar.read(),
    )
    if avatar_url is None:
        return _redirect("/dashboard/profile", error=error)
    return _redirect("/dashboard/profile", message="Avatar updated successfully")
