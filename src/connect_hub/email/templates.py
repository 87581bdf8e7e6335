from __future__ import annotations

from typing import Any, Dict

from markupsafe import Markup, escape

from .model import FormSubmission


def _details_table(submission: FormSubmission) -> Markup:
    rows = [("Name", submission.name), ("Email", submission.email)]
    if submission.phone:
        rows.append(("Phone", submission.phone))
    rows.extend(_humanize(submission.additional_data))

    body = Markup("").join(
        Markup("<tr><td><strong>{}</strong></td><td>{}</td></tr>").format(label, value) for label, value in rows
    )
    return Markup('<table cellpadding="6" style="border-collapse:collapse">{}</table>').format(body)


def _humanize(data: Dict[str, Any]):
    for key, value in (data or {}).items():
        label = str(key).replace("_", " ").strip().capitalize()
        yield label, "" if value is None else str(value)


def confirmation_html(submission: FormSubmission) -> str:
    return str(
        Markup(
            "<h2>Thank you, {name}!</h2>"
            "<p>We have received your submission. Here is a copy of what you sent us:</p>"
            "{details}"
            "<p>We will be in touch soon.</p>"
        ).format(name=submission.name, details=_details_table(submission))
    )


def admin_notification_html(submission: FormSubmission) -> str:
    return str(
        Markup("<h2>New form submission</h2><p>{name} &lt;{email}&gt; submitted a form.</p>{details}").format(
            name=submission.name,
            email=escape(submission.email),
            details=_details_table(submission),
        )
    )
