"""
Fan case events out to everyone involved in a case.

Recipients are the filer of the case plus every party on it. A party linked to
a registered account is reached through that account's email, an external
party through the email recorded on the party itself. Addresses are resolved
on the caller's session into plain values; only the sends run on the bounded
worker pool, each with its own timeout. A failed send is logged and never
affects the other recipients or the operation that triggered the event.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from loguru import logger
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.case import Case
from app.models.case_party import CaseParty
from app.models.user import User
from app.templates.email import DOCUMENT_UPLOADED


@dataclass(frozen=True)
class Recipient:
    address: str
    name: str


def normalize_address(address: Optional[str]) -> Optional[str]:
    if not address:
        return None
    address = address.strip().lower()
    return address or None


def resolve_user_recipient(user: Optional[User]) -> Optional[Recipient]:
    if user is None:
        return None
    address = normalize_address(user.email)
    if address is None:
        return None
    return Recipient(address=address, name=user.full_name or user.username)


def resolve_party_recipient(party: CaseParty) -> Optional[Recipient]:
    """Registered account email first, then the party's own email, else nobody"""
    account = resolve_user_recipient(party.user) if party.user_id else None
    if account is not None:
        return Recipient(address=account.address, name=account.name or party.name)
    address = normalize_address(party.email)
    if address is None:
        return None
    return Recipient(address=address, name=party.name)


def dedupe_recipients(recipients: Iterable[Optional[Recipient]]) -> List[Recipient]:
    seen = set()
    unique = []
    for recipient in recipients:
        if recipient is None or recipient.address in seen:
            continue
        seen.add(recipient.address)
        unique.append(recipient)
    return unique


def has_confidential_document(payload: Dict[str, Any]) -> bool:
    documents = payload.get("documents") or []
    return any(doc.get("is_confidential") for doc in documents)


class NotificationDispatcher:
    def __init__(self, mailer, max_workers: int = None, timeout: float = None, executor: ThreadPoolExecutor = None):
        self.mailer = mailer
        self.timeout = timeout or settings.MAIL_TIMEOUT_SECONDS
        self.executor = executor or ThreadPoolExecutor(
            max_workers=max_workers or settings.NOTIFICATION_WORKERS,
            thread_name_prefix="notify",
        )

    def collect_recipients(self, db: Session, case: Case) -> List[Recipient]:
        parties = (
            db.query(CaseParty)
            .filter(CaseParty.case_id == case.id)
            .order_by(CaseParty.created_at, CaseParty.id)
            .all()
        )
        return dedupe_recipients(
            [resolve_user_recipient(case.filer)] + [resolve_party_recipient(p) for p in parties]
        )

    def fan_out(self, db: Session, case: Case, event: str, payload: Optional[Dict[str, Any]] = None) -> None:
        """Queue one mail per recipient and return immediately"""
        payload = payload or {}
        try:
            if event == DOCUMENT_UPLOADED and has_confidential_document(payload):
                logger.info(f"Skipping {event} notifications for case {case.case_number}: confidential document")
                return

            recipients = self.collect_recipients(db, case)
            if not recipients:
                logger.info(f"No recipients for {event} on case {case.case_number}")
                return

            template_data = {
                "case_id": case.id,
                "case_number": case.case_number,
                "case_title": case.title,
                **payload,
            }
            logger.info(f"Dispatching {event} for case {case.case_number} to {len(recipients)} recipients")
            for recipient in recipients:
                self.executor.submit(self._deliver, case.id, case.case_number, event, recipient, template_data)
        except Exception:
            logger.exception(f"Failed to dispatch {event} notifications for case {case.id}")

    def _deliver(self, case_id: str, case_number: str, event: str, recipient: Recipient, template_data: Dict[str, Any]) -> bool:
        data = dict(template_data, recipient_name=recipient.name)
        try:
            delivered = self.mailer.send(recipient.address, event, data, timeout=self.timeout)
        except Exception as e:
            logger.error(
                f"Notification delivery raised: case_id={case_id} case_number={case_number} "
                f"recipient={recipient.address} event={event} error={str(e)}"
            )
            return False
        if not delivered:
            logger.error(
                f"Notification delivery failed: case_id={case_id} case_number={case_number} "
                f"recipient={recipient.address} event={event}"
            )
        return bool(delivered)

    def shutdown(self, wait: bool = True) -> None:
        self.executor.shutdown(wait=wait)
