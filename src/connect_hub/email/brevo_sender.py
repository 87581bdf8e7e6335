"""
Transactional email delivery through the Brevo API.
"""
from __future__ import annotations

from typing import Optional, Sequence

import sib_api_v3_sdk
from sib_api_v3_sdk.rest import ApiException

from ..core.exceptions import DependencyError
from .model import Recipient
from .sender import EmailSender


class BrevoEmailSender(EmailSender):
    def __init__(self, api_key: Optional[str], *, sender_email: str, sender_name: str = "Connect Hub", api_instance=None):
        self._api_key = api_key
        self._sender = {"name": sender_name, "email": sender_email}
        self._api_instance = api_instance

    @property
    def api_instance(self):
        if self._api_instance is None:
            if not self._api_key:
                raise DependencyError("BREVO_API_KEY is not configured")
            configuration = sib_api_v3_sdk.Configuration()
            configuration.api_key["api-key"] = self._api_key
            self._api_instance = sib_api_v3_sdk.TransactionalEmailsApi(sib_api_v3_sdk.ApiClient(configuration))
        return self._api_instance

    def send(self, *, to: Sequence[Recipient], subject: str, html: str) -> str:
        message = sib_api_v3_sdk.SendSmtpEmail(
            sender=self._sender,
            to=[{"email": r.email, "name": r.name or r.email} for r in to],
            subject=subject,
            html_content=html,
        )
        try:
            response = self.api_instance.send_transac_email(message)
        except ApiException as e:
            raise DependencyError(f"Brevo API error: {e.status} {e.reason}")
        return response.message_id
