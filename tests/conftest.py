import os
import threading
import uuid
from datetime import date, datetime

import pytest

# Must be set before any app module builds the engine
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_FILE", os.path.join(os.path.dirname(__file__), "..", "logs", "test.log"))

from app.core.database import SessionLocal, engine, init_db
from app.models.case import Case
from app.models.case_party import CaseParty
from app.models.user import User, UserRole
from app.services.notification_dispatcher import NotificationDispatcher


class RecordingMailer:
    """Mailer double that records every delivery attempt.

    Addresses listed in ``failing`` raise, addresses in ``rejecting`` return False.
    """

    def __init__(self, failing=(), rejecting=()):
        self.failing = set(failing)
        self.rejecting = set(rejecting)
        self.attempts = []
        self._lock = threading.Lock()

    def send(self, address, template_name, template_data, timeout=None):
        with self._lock:
            self.attempts.append({
                "address": address,
                "template": template_name,
                "data": template_data,
                "timeout": timeout,
            })
        if address in self.failing:
            raise ConnectionError(f"connection to mail server refused for {address}")
        return address not in self.rejecting

    @property
    def addresses(self):
        return sorted(a["address"] for a in self.attempts)

    @property
    def delivered(self):
        return sorted(
            a["address"] for a in self.attempts
            if a["address"] not in self.failing and a["address"] not in self.rejecting
        )


class FixedClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def db():
    init_db(recreate=True, bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def dispatcher(mailer):
    dispatcher = NotificationDispatcher(mailer, max_workers=2, timeout=3)
    yield dispatcher
    dispatcher.shutdown(wait=True)


def make_user(db, role=UserRole.LITIGANT, email=None, full_name="Test User"):
    user_id = str(uuid.uuid4())
    user = User(
        id=user_id,
        username=f"user-{user_id[:8]}",
        email=email if email is not None else f"{user_id[:8]}@example.com",
        full_name=full_name,
        role=role.value,
    )
    db.add(user)
    db.commit()
    return user


def make_case(db, filer, case_number=None, title="State v. Doe", status="filed"):
    case = Case(
        id=str(uuid.uuid4()),
        case_number=case_number or f"CR-{uuid.uuid4().hex[:8].upper()}",
        title=title,
        filed_by=filer.id,
        status=status,
        filing_date=date(2024, 1, 15),
        hearing_count=0,
        view_count=0,
        bookmark_count=0,
    )
    db.add(case)
    db.commit()
    return case


def make_party(db, case, name="Party", email=None, user=None, party_type="respondent"):
    party = CaseParty(
        id=str(uuid.uuid4()),
        case_id=case.id,
        user_id=user.id if user else None,
        party_type=party_type,
        name=name,
        email=email,
    )
    db.add(party)
    db.commit()
    return party


@pytest.fixture
def filer(db):
    return make_user(db, email="filer@example.com", full_name="Fiona Filer")


@pytest.fixture
def judge(db):
    return make_user(db, role=UserRole.JUDGE, email="judge@example.com", full_name="Judge Dredd")


@pytest.fixture
def case(db, filer):
    return make_case(db, filer, case_number="CR-2024-001")
