import uuid
from typing import Callable, Dict, FrozenSet, List, Optional, Union

from loguru import logger
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import atomic, store_errors
from app.core.exceptions import ConflictError, InvalidArgumentError, NotFoundError
from app.models.case import Case, CaseStatus
from app.models.user import User
from app.schemas.case import CaseCreate, CaseUpdate
from app.templates.email import CASE_STATUS_CHANGED
from app.utils.dates import utcnow

# Legal moves when strict transitions are switched on. Re-entering the
# current status is always accepted.
LEGAL_TRANSITIONS: Dict[CaseStatus, FrozenSet[CaseStatus]] = {
    CaseStatus.FILED: frozenset({CaseStatus.ADMITTED, CaseStatus.CLOSED, CaseStatus.ARCHIVED}),
    CaseStatus.ADMITTED: frozenset({CaseStatus.HEARING, CaseStatus.JUDGMENT, CaseStatus.CLOSED}),
    CaseStatus.HEARING: frozenset({CaseStatus.JUDGMENT, CaseStatus.CLOSED}),
    CaseStatus.JUDGMENT: frozenset({CaseStatus.CLOSED, CaseStatus.ARCHIVED}),
    CaseStatus.CLOSED: frozenset({CaseStatus.ARCHIVED, CaseStatus.ADMITTED}),
    CaseStatus.ARCHIVED: frozenset(),
}


def parse_status(value: Union[str, CaseStatus]) -> CaseStatus:
    try:
        return CaseStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in CaseStatus)
        raise InvalidArgumentError(f"Invalid case status '{value}', expected one of: {allowed}")


def is_legal_transition(old: CaseStatus, new: CaseStatus) -> bool:
    return old == new or new in LEGAL_TRANSITIONS[old]


class CaseLifecycleManager:
    """Owns case creation and status changes.

    A status change stamps ``admission_date`` / ``judgment_date`` the first
    time the case reaches those statuses and then notifies everyone on the
    case. Notification never decides whether the transition succeeded.
    """

    def __init__(
        self,
        db: Session,
        dispatcher=None,
        strict_transitions: Optional[bool] = None,
        clock: Callable = utcnow,
    ):
        self.db = db
        self.dispatcher = dispatcher
        self.strict_transitions = settings.STRICT_STATUS_TRANSITIONS if strict_transitions is None else strict_transitions
        self.clock = clock

    def create_case(self, case_in: CaseCreate, filed_by: str) -> Case:
        """Create a new case filed by an existing user"""
        case_number = case_in.case_number.strip().upper()
        logger.info(f"Creating new case: {case_number}")

        with atomic(self.db, f"creating case {case_number}"):
            if self.db.get(User, filed_by) is None:
                raise NotFoundError("User not found", {"user_id": filed_by})
            if self.db.query(Case.id).filter(Case.case_number == case_number).first() is not None:
                raise ConflictError("Case with this case number already exists", {"case_number": case_number})

            case_data = case_in.model_dump(exclude={"case_number"})
            db_case = Case(
                id=str(uuid.uuid4()),
                case_number=case_number,
                filed_by=filed_by,
                status=CaseStatus.FILED.value,
                hearing_count=0,
                view_count=0,
                bookmark_count=0,
                **{key: getattr(value, "value", value) for key, value in case_data.items()},
            )
            self.db.add(db_case)

        self.db.refresh(db_case)
        logger.info(f"Successfully created case: {case_number}")
        return db_case

    def get_case(self, case_id: str) -> Case:
        with store_errors(f"fetching case {case_id}"):
            case = self.db.get(Case, case_id)
        if case is None:
            logger.warning(f"Case not found: {case_id}")
            raise NotFoundError("Case not found", {"case_id": case_id})
        return case

    def update_case(self, case_id: str, case_in: CaseUpdate) -> Case:
        """Update descriptive fields; number and status are not editable here"""
        with atomic(self.db, f"updating case {case_id}"):
            case = self.get_case(case_id)
            for key, value in case_in.model_dump(exclude_unset=True).items():
                setattr(case, key, getattr(value, "value", value))
        self.db.refresh(case)
        return case

    def transition(self, case_id: str, new_status: Union[str, CaseStatus]) -> Case:
        status = parse_status(new_status)

        with atomic(self.db, f"changing status of case {case_id}"):
            case = self.get_case(case_id)
            old_status = CaseStatus(case.status)

            if self.strict_transitions and not is_legal_transition(old_status, status):
                raise InvalidArgumentError(
                    f"Illegal status transition from {old_status.value} to {status.value}",
                    {"case_id": case_id, "from": old_status.value, "to": status.value},
                )

            values = {Case.status: status.value}
            now = self.clock()
            # COALESCE keeps the first stamp even under concurrent transitions
            if status == CaseStatus.ADMITTED:
                values[Case.admission_date] = func.coalesce(Case.admission_date, now)
            if status == CaseStatus.JUDGMENT:
                values[Case.judgment_date] = func.coalesce(Case.judgment_date, now)

            self.db.query(Case).filter(Case.id == case_id).update(values, synchronize_session=False)

        self.db.refresh(case)
        logger.info(f"Case {case.case_number} moved from {old_status.value} to {status.value}")

        if self.dispatcher is not None:
            self.dispatcher.fan_out(
                self.db,
                case,
                CASE_STATUS_CHANGED,
                {"old_status": old_status.value, "new_status": status.value},
            )
        return case

    def _count_by(self, column) -> List[Dict]:
        count = func.count(Case.id)
        rows = self.db.query(column, count).group_by(column).order_by(count.desc(), column).all()
        return [{"value": value, "count": total} for value, total in rows]

    def statistics(self) -> Dict:
        with store_errors("computing case statistics"):
            return {
                "total_cases": self.db.query(func.count(Case.id)).scalar(),
                "public_cases": self.db.query(func.count(Case.id)).filter(Case.is_public.is_(True)).scalar(),
                "sensitive_cases": self.db.query(func.count(Case.id)).filter(Case.is_sensitive.is_(True)).scalar(),
                "cases_by_status": self._count_by(Case.status),
                "cases_by_priority": self._count_by(Case.priority),
                "cases_by_stage": self._count_by(Case.stage),
            }
