from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from ..common.validators import optional_str, require_email, require_non_empty
from ..core.exceptions import DependencyError, ValidationError
from ..core.logging import get_logger
from .model import FormSubmission, Recipient
from .sender import EmailSender
from .templates import admin_notification_html, confirmation_html


@dataclass(frozen=True)
class SubmissionResult:
    success: bool
    message: str
    email_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {"success": self.success, "message": self.message, "email_id": self.email_id}


class EmailService:
    """Confirms form submissions to the submitter and notifies the admins."""

    def __init__(self, sender: EmailSender, *, admin_emails: Sequence[str] = (), logger=None):
        self._sender = sender
        self._admin_emails = [e for e in admin_emails if e]
        self._log = logger or get_logger(__name__)

    @staticmethod
    def validate(submission: FormSubmission) -> FormSubmission:
        if submission.additional_data is not None and not isinstance(submission.additional_data, dict):
            raise ValidationError("additional_data must be an object")
        return FormSubmission(
            name=require_non_empty(submission.name, "name"),
            email=require_email(submission.email),
            phone=optional_str(submission.phone),
            additional_data=dict(submission.additional_data or {}),
        )

    def send_form_confirmation(self, submission: FormSubmission) -> Optional[str]:
        try:
            message_id = self._sender.send(
                to=[Recipient(email=submission.email, name=submission.name)],
                subject="Thank you for your submission!",
                html=confirmation_html(submission),
            )
        except DependencyError as e:
            self._log.error("form_confirmation_failed", email=submission.email, error=str(e))
            return None
        self._log.info("form_confirmation_sent", email=submission.email, message_id=message_id)
        return message_id

    def send_admin_notification(self, submission: FormSubmission) -> Optional[str]:
        if not self._admin_emails:
            self._log.warning("admin_notification_skipped", reason="no admin emails configured")
            return None
        try:
            message_id = self._sender.send(
                to=[Recipient(email=e) for e in self._admin_emails],
                subject=f"New Form Submission from {submission.name}",
                html=admin_notification_html(submission),
            )
        except DependencyError as e:
            self._log.error("admin_notification_failed", error=str(e))
            return None
        self._log.info("admin_notification_sent", message_id=message_id)
        return message_id

    def handle_form_submission(self, submission: FormSubmission) -> SubmissionResult:
        submission = self.validate(submission)
        self._log.info("form_submission_received", email=submission.email)

        email_id = self.send_form_confirmation(submission)
        self.send_admin_notification(submission)

        if email_id is None:
            return SubmissionResult(success=False, message="Form received but the confirmation email could not be sent")
        return SubmissionResult(success=True, message="Form submitted successfully", email_id=email_id)
