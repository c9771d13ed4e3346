"""
Subject and HTML body renderers for case notification mails.

Each renderer takes the template data dict built by the dispatcher and returns
``(subject, html)``. Renderers are looked up by template name.
"""

from datetime import date, datetime
from html import escape
from typing import Any, Callable, Dict, Tuple

from app.core.config import settings

CASE_STATUS_CHANGED = "case_status_changed"
HEARING_SCHEDULED = "hearing_scheduled"
HEARING_ADJOURNED = "hearing_adjourned"
DOCUMENT_UPLOADED = "document_uploaded"

_LAYOUT = """<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <title>{title}</title>
  <style>
    body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
    .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
    .content {{ background: #f9f9f9; padding: 30px; border-radius: 10px; }}
    .label {{ font-weight: bold; color: #666; }}
    .footer {{ text-align: center; margin-top: 30px; color: #666; font-size: 12px; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="content">
      <h2>Hello {name},</h2>
      {body}
      <p><a href="{link}">View case</a></p>
    </div>
    <div class="footer">
      <p>&copy; {year} Judiciary Transparency System. All rights reserved.</p>
    </div>
  </div>
</body>
</html>
"""


def _format_date(value: Any) -> str:
    if isinstance(value, (date, datetime)):
        return value.strftime("%A, %B %d, %Y")
    return escape(str(value)) if value else "TBD"


def _row(label: str, value: Any) -> str:
    return f'<p><span class="label">{label}:</span> {escape(str(value))}</p>'


def _layout(data: Dict[str, Any], title: str, body: str) -> str:
    return _LAYOUT.format(
        title=escape(title),
        name=escape(data.get("recipient_name") or "there"),
        body=body,
        link=f"{settings.FRONTEND_URL}/cases/{data.get('case_id', '')}",
        year=datetime.now().year,
    )


def render_case_status_changed(data: Dict[str, Any]) -> Tuple[str, str]:
    subject = f"Case Status Updated: {data['case_number']}"
    body = "".join([
        f"<p>The status of case <strong>{escape(data['case_title'])}</strong> has been updated.</p>",
        _row("Case Number", data["case_number"]),
        _row("Previous Status", data.get("old_status", "")),
        _row("New Status", data.get("new_status", "")),
    ])
    return subject, _layout(data, "Case Status Update", body)


def render_hearing_scheduled(data: Dict[str, Any]) -> Tuple[str, str]:
    subject = f"Hearing Reminder: {data['case_number']} on {_format_date(data.get('hearing_date'))}"
    body = "".join([
        f"<p>A hearing has been scheduled for case <strong>{escape(data['case_title'])}</strong>.</p>",
        _row("Case Number", data["case_number"]),
        f'<p><span class="label">Date:</span> {_format_date(data.get("hearing_date"))}</p>',
        _row("Time", data.get("hearing_time", "")),
        _row("Court Room", data.get("court_room") or "To be announced"),
    ])
    return subject, _layout(data, "Hearing Reminder", body)


def render_hearing_adjourned(data: Dict[str, Any]) -> Tuple[str, str]:
    subject = f"Hearing Adjourned: {data['case_number']}"
    body = "".join([
        f"<p>The hearing for case <strong>{escape(data['case_title'])}</strong> has been adjourned.</p>",
        _row("Case Number", data["case_number"]),
        f'<p><span class="label">Next Hearing:</span> {_format_date(data.get("next_hearing_date"))}</p>',
        _row("Time", data.get("hearing_time", "")),
        _row("Reason", data.get("adjournment_reason") or "Not specified"),
    ])
    return subject, _layout(data, "Hearing Adjourned", body)


def render_document_uploaded(data: Dict[str, Any]) -> Tuple[str, str]:
    subject = f"New Document Uploaded: {data['case_number']}"
    body = "".join([
        f"<p>A new document was filed in case <strong>{escape(data['case_title'])}</strong>.</p>",
        _row("Document", data.get("document_title", "")),
        _row("Type", data.get("document_type", "")),
        _row("Uploaded By", data.get("uploaded_by") or "Unknown"),
    ])
    return subject, _layout(data, "New Document", body)


RENDERERS: Dict[str, Callable[[Dict[str, Any]], Tuple[str, str]]] = {
    CASE_STATUS_CHANGED: render_case_status_changed,
    HEARING_SCHEDULED: render_hearing_scheduled,
    HEARING_ADJOURNED: render_hearing_adjourned,
    DOCUMENT_UPLOADED: render_document_uploaded,
}


def render(template_name: str, data: Dict[str, Any]) -> Tuple[str, str]:
    try:
        renderer = RENDERERS[template_name]
    except KeyError:
        raise ValueError(f"Unknown email template: {template_name}")
    return renderer(data)
