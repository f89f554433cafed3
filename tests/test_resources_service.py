"""Test suite for the resource record manager."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import eduxchange.data.db as db_module
import eduxchange.services.resources as resources_module
from eduxchange.data.models import Base, Resource, User
from eduxchange.services.resource_form import ResourceFormData, UploadedFile
from eduxchange.services.resources import (
    CREATE_FAILED,
    RESOURCE_NOT_FOUND,
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
from eduxchange.services.storage import RESOURCES_BUCKET, LocalObjectStore


@pytest.fixture(scope="function")
def tmp_db(monkeypatch, tmp_path):
    """Create a temporary test database."""
    engine = create_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    monkeypatch.setattr(db_module, "_engine", engine)
    monkeypatch.setattr(db_module, "_SessionLocal", sessionmaker(bind=engine))
    yield
    engine.dispose()


@pytest.fixture
def store(tmp_path: Path) -> LocalObjectStore:
    return LocalObjectStore(tmp_path / "storage", "http://testserver")


def _make_user(email: str) -> str:
    with db_module.get_session() as s:
        u = User(email=email, password_hash="hash")
        s.add(u)
        s.flush()
        return u.id


@pytest.fixture
def test_user(tmp_db) -> str:
    """Create a test user and return its id."""
    return _make_user("student@example.com")


@pytest.fixture
def other_user(tmp_db) -> str:
    return _make_user("other@example.com")


def _pdf() -> UploadedFile:
    return UploadedFile(filename="Lecture 1.PDF", content_type="application/pdf", data=b"%PDF-1.4")


def _stored_files(store: LocalObjectStore) -> list[Path]:
    return [p for p in store.root.rglob("*") if p.is_file()]


def _link_form(**overrides) -> ResourceFormData:
    values = {
        "title": "Calc Notes",
        "resource_type": "link",
        "external_link": "https://x.y",
        "tags": ["calc"],
    }
    values.update(overrides)
    return ResourceFormData(**values)


class TestCreateResource:
    def test_link_resource_has_no_file_fields(self, test_user, store):
        created, error = create_resource(test_user, _link_form(), store=store)

        assert error is None
        assert created["title"] == "Calc Notes"
        assert created["resource_type"] == "link"
        assert created["external_link"] == "https://x.y"
        assert created["tags"] == ["calc"]
        assert created["file_url"] is None
        assert created["file_name"] is None
        assert created["file_size"] is None
        assert created["mime_type"] is None
        assert created["view_count"] == 0
        assert created["download_count"] == 0
        assert created["user_id"] == test_user
        assert created["is_public"] is True
        assert created["created_at"] == created["updated_at"]

    def test_pdf_upload_stores_blob_and_metadata(self, test_user, store):
        form = ResourceFormData(
            title="Lecture 1",
            resource_type="pdf",
            external_link="https://ignored.example",
        )
        created, error = create_resource(test_user, form, _pdf(), store=store)

        assert error is None
        path = created["storage_path"]
        assert path.startswith(f"{test_user}/")
        assert path.endswith(".pdf")
        assert created["file_url"] == f"http://testserver/files/resources/{path}"
        assert created["file_name"] == "Lecture 1.PDF"
        assert created["file_size"] == len(b"%PDF-1.4")
        assert created["mime_type"] == "application/pdf"
        assert created["external_link"] is None
        assert store.resolve(RESOURCES_BUCKET, path).read_bytes() == b"%PDF-1.4"

    def test_video_ignores_attached_file(self, test_user, store):
        form = ResourceFormData(
            title="Lecture recording",
            resource_type="video",
            external_link="https://video.example/1",
        )
        created, error = create_resource(test_user, form, _pdf(), store=store)

        assert error is None
        assert created["file_url"] is None
        assert created["storage_path"] is None
        assert _stored_files(store) == []

    def test_notes_may_carry_a_file(self, test_user, store):
        upload = UploadedFile(filename="notes.txt", content_type=None, data=b"hello")
        form = ResourceFormData(title="Week 2", resource_type="notes")
        created, error = create_resource(test_user, form, upload, store=store)

        assert error is None
        assert created["mime_type"] == "text/plain"
        assert created["external_link"] is None

    def test_blank_optional_fields_are_null(self, test_user, store):
        form = _link_form(description="   ", subject="", course_code=" CS101 ", tags=[" ", ""])
        created, _ = create_resource(test_user, form, store=store)

        assert created["description"] is None
        assert created["subject"] is None
        assert created["course_code"] == "CS101"
        assert created["tags"] is None

    @pytest.mark.parametrize(
        ("form", "upload", "message"),
        [
            (ResourceFormData(title="  ", resource_type="link"), None, "Please enter a title"),
            (ResourceFormData(title="Lecture", resource_type="video"), None,
             "Please enter an external link"),
            (ResourceFormData(title="Lecture", resource_type="pdf"), None,
             "Please select a file to upload"),
            (ResourceFormData(title="Lecture", resource_type="audio"), None,
             "Please choose a valid resource type"),
            (ResourceFormData(title="Both", resource_type="notes", external_link="https://a.b"),
             UploadedFile("n.txt", "text/plain", b"x"),
             "Notes can include a file or a link, not both"),
        ],
    )
    def test_validation_errors_make_no_backend_call(self, test_user, store, form, upload, message):
        created, error = create_resource(test_user, form, upload, store=store)

        assert created is None
        assert error == message
        assert count_resources(test_user) == 0
        assert _stored_files(store) == []

    def test_more_than_five_tags_rejected(self, test_user, store):
        created, error = create_resource(
            test_user, _link_form(tags=["a", "b", "c", "d", "e", "f"]), store=store
        )
        assert created is None
        assert error == "You can add up to 5 tags"

    def test_failed_insert_removes_uploaded_blob(self, test_user, store, monkeypatch):
        def broken_session():
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(resources_module, "get_session", broken_session)
        form = ResourceFormData(title="Lecture 1", resource_type="pdf")

        created, error = create_resource(test_user, form, _pdf(), store=store)

        assert created is None
        assert error == CREATE_FAILED
        assert _stored_files(store) == []


class TestUpdateResource:
    def test_edit_title_refreshes_updated_at(self, test_user, store):
        created, _ = create_resource(test_user, _link_form(), store=store)

        updated, error = update_resource(test_user, created["id"], {"title": "Calc Notes v2"})

        assert error is None
        assert updated["title"] == "Calc Notes v2"
        stored = get_resource(created["id"], test_user)
        assert stored["title"] == "Calc Notes v2"
        assert stored["updated_at"] > stored["created_at"]

    def test_edit_result_timestamps_are_comparable(self, test_user, store):
        created, _ = create_resource(test_user, _link_form(), store=store)

        updated, _ = update_resource(test_user, created["id"], {"title": "Calc Notes v2"})

        assert updated["created_at"] == created["created_at"]
        assert updated["created_at"].utcoffset() == timedelta(0)
        assert updated["updated_at"].utcoffset() == timedelta(0)
        assert updated["updated_at"] > updated["created_at"]
        assert get_resource(created["id"], test_user)["created_at"] == created["created_at"]

    def test_resource_type_cannot_change(self, test_user, store):
        created, _ = create_resource(test_user, _link_form(), store=store)

        updated, error = update_resource(
            test_user, created["id"], {"resource_type": "pdf", "title": "Still a link"}
        )

        assert error is None
        assert updated["resource_type"] == "link"

    def test_model_rejects_type_change(self, test_user, store):
        created, _ = create_resource(test_user, _link_form(), store=store)

        with db_module.get_session() as s:
            resource = s.get(Resource, created["id"])
            with pytest.raises(ValueError):
                resource.resource_type = "pdf"

    def test_link_types_still_require_link(self, test_user, store):
        created, _ = create_resource(test_user, _link_form(), store=store)

        updated, error = update_resource(test_user, created["id"], {"external_link": "  "})

        assert updated is None
        assert error == "Please enter an external link"
        assert get_resource(created["id"], test_user)["external_link"] == "https://x.y"

    def test_file_types_keep_no_link(self, test_user, store):
        created, _ = create_resource(
            test_user, ResourceFormData(title="Slides", resource_type="pdf"), _pdf(), store=store
        )

        updated, error = update_resource(
            test_user, created["id"], {"external_link": "https://a.b", "tags": ["exam", "exam"]}
        )

        assert error is None
        assert updated["external_link"] is None
        assert updated["tags"] == ["exam"]
        assert updated["file_url"] == created["file_url"]

    def test_clearing_tags_stores_null(self, test_user, store):
        created, _ = create_resource(test_user, _link_form(), store=store)

        updated, _ = update_resource(test_user, created["id"], {"tags": []})

        assert updated["tags"] is None

    def test_only_owner_can_edit(self, test_user, other_user, store):
        created, _ = create_resource(test_user, _link_form(), store=store)

        updated, error = update_resource(other_user, created["id"], {"title": "Mine now"})

        assert updated is None
        assert error == RESOURCE_NOT_FOUND
        assert update_resource(test_user, "missing", {"title": "x"}) == (None, RESOURCE_NOT_FOUND)


class TestDeleteResource:
    def test_delete_removes_row_and_blob(self, test_user, store):
        created, _ = create_resource(
            test_user, ResourceFormData(title="Slides", resource_type="pdf"), _pdf(), store=store
        )

        assert delete_resource(test_user, created["id"], store=store) is True
        assert get_resource(created["id"], test_user) is None
        assert record_view(created["id"], test_user) is None
        assert _stored_files(store) == []
        assert delete_resource(test_user, created["id"], store=store) is False

    def test_delete_scoped_to_owner(self, test_user, other_user, store):
        created, _ = create_resource(test_user, _link_form(), store=store)

        assert delete_resource(other_user, created["id"], store=store) is False
        assert get_owned_resource(test_user, created["id"]) is not None


class TestListResources:
    def test_newest_first_with_type_filter(self, test_user, other_user, store):
        first, _ = create_resource(test_user, _link_form(title="First"), store=store)
        second, _ = create_resource(
            test_user,
            ResourceFormData(title="Second", resource_type="video", external_link="https://v"),
            store=store,
        )
        create_resource(other_user, _link_form(title="Not mine"), store=store)

        titles = [r["title"] for r in list_resources(test_user)]
        assert titles == ["Second", "First"]
        assert [r["id"] for r in list_resources(test_user, "link")] == [first["id"]]
        assert [r["id"] for r in list_resources(test_user, "VIDEO")] == [second["id"]]
        assert list_resources(test_user, "pdf") == []
        assert len(list_resources(test_user, limit=1)) == 1

    def test_unknown_type_returns_none(self, test_user):
        assert list_resources(test_user, "podcast") is None


class TestCountersAndVisibility:
    def test_each_view_increments_without_touching_updated_at(self, test_user, store):
        created, _ = create_resource(test_user, _link_form(), store=store)
        before = get_resource(created["id"], test_user)

        record_view(created["id"], test_user)
        viewed = record_view(created["id"], test_user)

        assert viewed["view_count"] == 2
        after = get_resource(created["id"], test_user)
        assert after["view_count"] == 2
        assert after["updated_at"] == before["updated_at"]

    def test_parallel_views_are_all_counted(self, tmp_path, monkeypatch, store):
        engine = create_engine(
            f"sqlite:///{tmp_path / 'parallel.db'}",
            connect_args={"check_same_thread": False, "timeout": 30},
        )
        Base.metadata.create_all(bind=engine)
        monkeypatch.setattr(db_module, "_engine", engine)
        monkeypatch.setattr(
            db_module, "_SessionLocal", sessionmaker(bind=engine, expire_on_commit=False)
        )
        owner = _make_user("parallel@example.com")
        created, _ = create_resource(owner, _link_form(), store=store)
        views = 40

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(lambda _: record_view(created["id"]), range(views)))

        assert all(result is not None for result in results)
        final = get_resource(created["id"])
        assert final["view_count"] == views
        assert final["updated_at"] == created["updated_at"]
        engine.dispose()

    def test_private_resource_hidden_from_others(self, test_user, other_user, store):
        created, _ = create_resource(test_user, _link_form(is_public=False), store=store)

        assert get_resource(created["id"], other_user) is None
        assert get_resource(created["id"]) is None
        assert record_view(created["id"], other_user) is None
        assert record_view(created["id"], test_user)["view_count"] == 1

    def test_public_resource_visible_to_anyone(self, test_user, store):
        created, _ = create_resource(test_user, _link_form(), store=store)
        assert record_view(created["id"])["view_count"] == 1

    def test_download_requires_file(self, test_user, store):
        link, _ = create_resource(test_user, _link_form(), store=store)
        pdf, _ = create_resource(
            test_user, ResourceFormData(title="Slides", resource_type="pdf"), _pdf(), store=store
        )

        assert record_download(link["id"], test_user) is None
        assert record_download(pdf["id"], test_user)["download_count"] == 1
        assert get_resource(pdf["id"], test_user)["view_count"] == 0

    def test_dashboard_stats_sum_counters(self, test_user, store):
        assert get_dashboard_stats(test_user) == {
            "total_resources": 0,
            "total_views": 0,
            "total_downloads": 0,
            "recent_resources": [],
        }
        link, _ = create_resource(test_user, _link_form(), store=store)
        pdf, _ = create_resource(
            test_user, ResourceFormData(title="Slides", resource_type="pdf"), _pdf(), store=store
        )
        for _ in range(3):
            record_view(link["id"], test_user)
        record_view(pdf["id"], test_user)
        record_download(pdf["id"], test_user)

        stats = get_dashboard_stats(test_user)
        assert stats["total_resources"] == 2
        assert stats["total_views"] == 4
        assert stats["total_downloads"] == 1
        assert [r["title"] for r in stats["recent_resources"]] == ["Slides", "Calc Notes"]
        assert count_resources(test_user) == 2
