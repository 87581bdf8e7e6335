from __future__ import annotations

import hmac

from flask import Flask, request

from ..common.http import json_body, json_response
from ..container import Container
from ..core.exceptions import AuthenticationError
from .model import FormSubmission


def register(app: Flask, container: Container) -> None:
    email = container.email_service
    webhook_key = container.settings.form_webhook_api_key

    @app.post("/email/form-submission", endpoint="email_form_submission")
    def email_form_submission():
        if webhook_key and not hmac.compare_digest(request.headers.get("X-API-Key", ""), webhook_key):
            raise AuthenticationError("Invalid API key")

        body = json_body()
        result = email.handle_form_submission(
            FormSubmission(
                name=body.get("name", ""),
                email=body.get("email", ""),
                phone=body.get("phone"),
                additional_data=body.get("additional_data") or body.get("additionalData") or {},
            )
        )
        return json_response(result.to_dict())
