from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .auth.service import AuthService
from .auth.supabase_identity_provider import SupabaseIdentityProvider
from .blog.mysql_blog_repository import MySQLPackageRepository, MySQLPostRepository
from .blog.repository import PackageRepository, PostRepository
from .blog.service import BlogService
from .database.connection import DBConfig, DatabaseConnection
from .email.brevo_sender import BrevoEmailSender
from .email.service import EmailService
from .events.mysql_event_notice_repository import MySQLEventNoticeRepository
from .events.repository import EventNoticeRepository
from .events.service import EventNoticeService
from .groups.mysql_group_repository import MySQLGroupRepository
from .groups.repository import GroupRepository
from .groups.service import GroupService
from .health.service import HealthService
from .reports.excel_exporter import ExcelReportExporter
from .reports.service import ReportService
from .settings import Settings
from .storage.blob_store import BlobStore
from .storage.s3_blob_store import S3BlobStore
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import UserService


@dataclass(frozen=True)
class Container:
    settings: Settings
    conn: Optional[DatabaseConnection]

    users_repo: UserRepository
    groups_repo: GroupRepository
    attendance_repo: AttendanceRepository
    packages_repo: PackageRepository
    posts_repo: PostRepository
    event_notices_repo: EventNoticeRepository
    blob_store: BlobStore

    user_service: UserService
    auth_service: AuthService
    group_service: GroupService
    attendance_service: AttendanceService
    report_service: ReportService
    blog_service: BlogService
    event_notice_service: EventNoticeService
    email_service: EmailService
    health_service: HealthService


def build_container(settings: Settings) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(settings.db_config))

    users_repo = MySQLUserRepository(conn)
    groups_repo = MySQLGroupRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    packages_repo = MySQLPackageRepository(conn)
    posts_repo = MySQLPostRepository(conn)
    event_notices_repo = MySQLEventNoticeRepository(conn)
    blob_store = S3BlobStore(settings.storage)

    identity = SupabaseIdentityProvider(
        settings.supabase_url,
        settings.supabase_anon_key,
        redirect_url=settings.oauth_redirect_url,
    )
    mailer = BrevoEmailSender(
        settings.brevo_api_key,
        sender_email=settings.email_from,
        sender_name=settings.email_from_name,
    )

    user_service = UserService(users_repo)
    auth_service = AuthService(identity, user_service)
    group_service = GroupService(groups_repo, users_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        groups_repo,
        blob_store,
        photo_bucket=settings.attendance_photo_bucket,
    )
    report_service = ReportService(attendance_repo, groups_repo, ExcelReportExporter(settings.export_dir))
    blog_service = BlogService(packages_repo, posts_repo, blob_store, image_bucket=settings.blog_image_bucket)
    event_notice_service = EventNoticeService(event_notices_repo, blob_store, poster_bucket=settings.event_poster_bucket)
    email_service = EmailService(mailer, admin_emails=settings.admin_emails)
    health_service = HealthService(conn)

    return Container(
        settings=settings,
        conn=conn,
        users_repo=users_repo,
        groups_repo=groups_repo,
        attendance_repo=attendance_repo,
        packages_repo=packages_repo,
        posts_repo=posts_repo,
        event_notices_repo=event_notices_repo,
        blob_store=blob_store,
        user_service=user_service,
        auth_service=auth_service,
        group_service=group_service,
        attendance_service=attendance_service,
        report_service=report_service,
        blog_service=blog_service,
        event_notice_service=event_notice_service,
        email_service=email_service,
        health_service=health_service,
    )
