from __future__ import annotations

import io

import pytest
from openpyxl import load_workbook

from connect_hub.attendance.service import AttendanceService
from connect_hub.auth.model import IdentityUser
from connect_hub.auth.service import AuthService
from connect_hub.blog.service import BlogService
from connect_hub.container import Container
from connect_hub.core.enums import Role
from connect_hub.email.service import EmailService
from connect_hub.events.service import EventNoticeService
from connect_hub.groups.service import GroupService
from connect_hub.health.service import HealthService
from connect_hub.main import create_app
from connect_hub.reports.excel_exporter import ExcelReportExporter
from connect_hub.reports.service import ReportService
from connect_hub.settings import Settings
from connect_hub.users.model import User
from connect_hub.users.service import UserService


class _UnreachableDatabase:
    def connect(self):
        raise RuntimeError("Can't connect to MySQL server")


@pytest.fixture
def container(
    tmp_path,
    user_repo,
    group_repo,
    attendance_repo,
    package_repo,
    post_repo,
    event_repo,
    blob_store,
    identity_provider,
    email_sender,
    connect_groups,
):
    for user_id, role in (("admin-1", Role.ADMIN), ("mentor-1", Role.MENTOR), ("member-1", Role.MEMBER)):
        user_repo.add(User(id=user_id, name=user_id, email=f"{user_id}@example.com", role=role, google_id=f"g-{user_id}"))
        identity_provider.add(f"token-{user_id}", IdentityUser(id=f"g-{user_id}", email=f"{user_id}@example.com"))

    settings = Settings(
        secret_key="test-secret",
        db_config={"host": "localhost", "user": "test", "database": "connect_hub_test"},
        testing=True,
        log_level="WARNING",
        export_dir=str(tmp_path),
        admin_emails=("admin@example.com",),
        form_webhook_api_key="hook-key",
    )
    user_service = UserService(user_repo)
    return Container(
        settings=settings,
        conn=None,
        users_repo=user_repo,
        groups_repo=group_repo,
        attendance_repo=attendance_repo,
        packages_repo=package_repo,
        posts_repo=post_repo,
        event_notices_repo=event_repo,
        blob_store=blob_store,
        user_service=user_service,
        auth_service=AuthService(identity_provider, user_service),
        group_service=GroupService(group_repo, user_repo),
        attendance_service=AttendanceService(attendance_repo, group_repo, blob_store, photo_bucket="connect-attendance"),
        report_service=ReportService(attendance_repo, group_repo, ExcelReportExporter(tmp_path)),
        blog_service=BlogService(package_repo, post_repo, blob_store, image_bucket="blog-images"),
        event_notice_service=EventNoticeService(event_repo, blob_store, poster_bucket="event-posters"),
        email_service=EmailService(email_sender, admin_emails=settings.admin_emails),
        health_service=HealthService(_UnreachableDatabase()),
    )


@pytest.fixture
def client(container):
    return create_app(container).test_client()


def auth(user_id):
    return {"Authorization": f"Bearer token-{user_id}"}


def test_report_json(client):
    resp = client.get("/connect-attendance/report?start_date=2024-01-01&end_date=2024-02-29", headers=auth("mentor-1"))

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["total_groups"] == 3
    assert [m["attendance_percentage"] for m in body["monthly_attendance"]] == ["33.33", "33.33"]


def test_report_download_streams_and_removes_the_file(client, tmp_path):
    resp = client.get(
        "/connect-attendance/report/generate?start_date=2024-01-01&end_date=2024-02-29&format=sheet",
        headers=auth("mentor-1"),
    )

    assert resp.status_code == 200
    assert resp.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
    assert 'filename="attendance-report-' in resp.headers["Content-Disposition"]
    sheet = load_workbook(io.BytesIO(resp.data)).active
    assert sheet["A3"].value == "Alpha"
    resp.close()
    assert list(tmp_path.glob("*.xlsx")) == []


def test_report_download_head_request_still_removes_the_file(client, tmp_path):
    resp = client.head(
        "/connect-attendance/report/generate?start_date=2024-01-01&end_date=2024-02-29&format=sheet",
        headers=auth("mentor-1"),
    )

    assert resp.status_code == 200
    resp.close()
    assert list(tmp_path.glob("*.xlsx")) == []


@pytest.mark.parametrize(
    "query,status,kind",
    [
        ("start_date=2024-01-01&end_date=2024-02-29&format=pdf", 501, "unsupported_format"),
        ("start_date=2024-01-01&end_date=2024-02-29&format=csv", 400, "validation_error"),
        ("start_date=2024-03-01&end_date=2024-02-29", 400, "validation_error"),
        ("end_date=2024-02-29", 400, "validation_error"),
    ],
)
def test_report_download_errors(client, query, status, kind):
    resp = client.get(f"/connect-attendance/report/generate?{query}", headers=auth("admin-1"))
    assert resp.status_code == status
    assert resp.get_json()["error"] == kind


def test_report_requires_login_and_role(client):
    url = "/connect-attendance/report?start_date=2024-01-01&end_date=2024-02-29"
    assert client.get(url).status_code == 401
    assert client.get(url, headers={"Authorization": "Bearer nope"}).status_code == 401
    assert client.get(url, headers=auth("member-1")).status_code == 403


def test_attendance_create_with_photo(client, blob_store):
    resp = client.post(
        "/connect-attendance",
        headers=auth("mentor-1"),
        data={"group_id": "g-gamma", "date": "2024-03-03", "notes": "Prayer night", "photo_file": (io.BytesIO(b"img"), "night.jpg")},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["group_id"] == "g-gamma"
    assert body["date"] == "2024-03-03"
    assert body["photo_url"] == "https://cdn.test/connect-attendance/night.jpg"


def test_attendance_create_for_unknown_group(client):
    resp = client.post("/connect-attendance", headers=auth("mentor-1"), json={"group_id": "nope", "date": "2024-03-03"})
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "not_found", "message": "Group not found"}


def test_attendance_list_and_get(client, attendance_repo):
    resp = client.get("/connect-attendance?group_id=g-alpha&limit=1", headers=auth("mentor-1"))

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["pagination"] == {"total": 2, "page": 1, "limit": 1, "total_pages": 2}
    assert body["records"][0]["date"] == "2024-01-20"

    record_id = body["records"][0]["id"]
    detail = client.get(f"/connect-attendance/{record_id}", headers=auth("mentor-1")).get_json()
    assert detail["group"]["name"] == "Alpha"


def test_attendance_update_cannot_move_groups(client, attendance_repo):
    record = next(iter(attendance_repo.records.values()))
    resp = client.put(f"/connect-attendance/{record.id}", headers=auth("mentor-1"), json={"group_id": "g-beta"})
    assert resp.status_code == 400


def test_attendance_delete_needs_admin(client, attendance_repo):
    record = next(iter(attendance_repo.records.values()))
    assert client.delete(f"/connect-attendance/{record.id}", headers=auth("mentor-1")).status_code == 403
    assert client.delete(f"/connect-attendance/{record.id}", headers=auth("admin-1")).status_code == 200
    assert record.id not in attendance_repo.records


def test_groups_crud(client):
    created = client.post("/connect-groups", headers=auth("admin-1"), json={"name": "Delta"})
    assert created.status_code == 201
    group_id = created.get_json()["id"]

    conflict = client.post("/connect-groups", headers=auth("admin-1"), json={"name": "Delta"})
    assert conflict.status_code == 409

    listing = client.get("/connect-groups", headers=auth("mentor-1")).get_json()
    assert listing["pagination"]["total"] == 4

    assert client.delete(f"/connect-groups/{group_id}", headers=auth("admin-1")).status_code == 200
    assert client.get(f"/connect-groups/{group_id}", headers=auth("admin-1")).status_code == 404


def test_users_me(client):
    resp = client.get("/users/me", headers=auth("member-1"))
    assert resp.status_code == 200
    assert resp.get_json()["role"] == "MEMBER"


def test_health_reports_database_down(client):
    health = client.get("/health").get_json()
    assert health["status"] == "unhealthy"
    assert health["database"]["status"] == "down"

    assert client.get("/health/ready").status_code == 503
    assert client.get("/health/ping").get_json()["status"] == "pong"


def test_health_check_command_never_fails(container):
    app = create_app(container)
    result = app.test_cli_runner().invoke(args=["health-check"])

    assert result.exit_code == 0
    assert "unhealthy" in result.output


def test_form_submission_requires_the_webhook_key(client, email_sender):
    payload = {"name": "Jane", "email": "jane@example.com", "additional_data": {"event": "Retreat"}}

    assert client.post("/email/form-submission", json=payload).status_code == 401
    assert client.post("/email/form-submission", json=payload, headers={"X-API-Key": "wrong"}).status_code == 401

    resp = client.post("/email/form-submission", json=payload, headers={"X-API-Key": "hook-key"})
    assert resp.status_code == 200
    assert resp.get_json() == {"success": True, "message": "Form submitted successfully", "email_id": "msg-1"}
    assert len(email_sender.sent) == 2


def test_public_posts_and_event_notices_need_no_login(client):
    assert client.get("/posts").status_code == 200
    assert client.get("/event-notices/published").get_json() == []


def test_unknown_route_is_json(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "not_found"


def test_request_context_is_bound_for_logging(client, monkeypatch):
    import connect_hub.main as main

    seen = []
    monkeypatch.setattr(main, "bind_request_context", lambda **values: seen.append(values))

    client.get("/health/ping", headers={"X-Request-ID": "req-42"})

    assert seen == [{"request_id": "req-42", "method": "GET", "path": "/health/ping"}]
