import uuid
from datetime import date
from typing import Callable, Dict, List, Optional, Union

from loguru import logger
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.database import atomic, store_errors
from app.core.exceptions import InvalidArgumentError, NotFoundError
from app.models.case import Case
from app.models.hearing import Hearing, HearingStatus
from app.models.user import User
from app.schemas.hearing import HearingCreate
from app.templates.email import HEARING_ADJOURNED, HEARING_SCHEDULED
from app.utils.dates import utcnow


def parse_hearing_status(value: Union[str, HearingStatus]) -> HearingStatus:
    try:
        return HearingStatus(value)
    except ValueError:
        raise InvalidArgumentError(f"Invalid hearing status '{value}'")


class HearingScheduler:
    """Schedules hearings and mirrors them onto the parent case.

    ``next_hearing_date`` on the case is overwritten by whichever hearing was
    written last, and is left as is when a hearing is deleted.
    """

    def __init__(self, db: Session, dispatcher=None, clock: Callable = utcnow):
        self.db = db
        self.dispatcher = dispatcher
        self.clock = clock

    def _get_case(self, case_id: str) -> Case:
        case = self.db.get(Case, case_id)
        if case is None:
            logger.warning(f"Case not found: {case_id}")
            raise NotFoundError("Case not found", {"case_id": case_id})
        return case

    def _validate_judge(self, judge_id: str) -> User:
        judge = self.db.get(User, judge_id)
        if judge is None:
            raise NotFoundError("Judge not found", {"judge_id": judge_id})
        if not judge.is_judge:
            raise InvalidArgumentError("User must have judge role", {"judge_id": judge_id, "role": judge.role})
        return judge

    def create(self, hearing_in: HearingCreate) -> Hearing:
        logger.info(f"Scheduling hearing {hearing_in.hearing_number} for case {hearing_in.case_id}")

        with atomic(self.db, f"scheduling hearing for case {hearing_in.case_id}"):
            case = self._get_case(hearing_in.case_id)
            self._validate_judge(hearing_in.judge_id)

            hearing = Hearing(
                id=str(uuid.uuid4()),
                case_id=hearing_in.case_id,
                hearing_number=hearing_in.hearing_number,
                hearing_date=hearing_in.hearing_date,
                hearing_time=hearing_in.hearing_time,
                judge_id=hearing_in.judge_id,
                court_room=hearing_in.court_room,
                purpose=hearing_in.purpose.value,
                status=HearingStatus.SCHEDULED.value,
            )
            self.db.add(hearing)
            self.db.flush()

            self.db.query(Case).filter(Case.id == case.id).update(
                {
                    Case.hearing_count: Case.hearing_count + 1,
                    Case.next_hearing_date: hearing_in.hearing_date,
                },
                synchronize_session=False,
            )

        self.db.refresh(hearing)
        self.db.refresh(case)
        logger.info(f"Scheduled hearing {hearing.id} on {hearing.hearing_date} for case {case.case_number}")

        if self.dispatcher is not None:
            self.dispatcher.fan_out(
                self.db,
                case,
                HEARING_SCHEDULED,
                {
                    "hearing_id": hearing.id,
                    "hearing_date": hearing.hearing_date,
                    "hearing_time": hearing.hearing_time,
                    "court_room": hearing.court_room,
                },
            )
        return hearing

    def get(self, hearing_id: str) -> Hearing:
        with store_errors(f"fetching hearing {hearing_id}"):
            hearing = self.db.get(Hearing, hearing_id)
        if hearing is None:
            raise NotFoundError("Hearing not found", {"hearing_id": hearing_id})
        return hearing

    def update_status(
        self,
        hearing_id: str,
        status: Union[str, HearingStatus],
        notes: Optional[str] = None,
        next_hearing_date: Optional[date] = None,
        adjournment_reason: Optional[str] = None,
    ) -> Hearing:
        new_status = parse_hearing_status(status)

        with atomic(self.db, f"updating hearing {hearing_id}"):
            hearing = self.get(hearing_id)
            hearing.status = new_status.value
            if notes:
                hearing.notes = notes
            if next_hearing_date:
                hearing.next_hearing_date = next_hearing_date
            if adjournment_reason:
                hearing.adjournment_reason = adjournment_reason

            if next_hearing_date:
                self.db.query(Case).filter(Case.id == hearing.case_id).update(
                    {Case.next_hearing_date: next_hearing_date},
                    synchronize_session=False,
                )

        self.db.refresh(hearing)
        logger.info(f"Hearing {hearing_id} is now {new_status.value}")

        if self.dispatcher is not None and next_hearing_date and new_status == HearingStatus.ADJOURNED:
            case = self.db.get(Case, hearing.case_id)
            if case is not None:
                self.db.refresh(case)
                self.dispatcher.fan_out(
                    self.db,
                    case,
                    HEARING_ADJOURNED,
                    {
                        "hearing_id": hearing.id,
                        "next_hearing_date": next_hearing_date,
                        "hearing_time": hearing.hearing_time,
                        "court_room": hearing.court_room,
                        "adjournment_reason": hearing.adjournment_reason,
                    },
                )
        return hearing

    def delete(self, hearing_id: str) -> None:
        with atomic(self.db, f"deleting hearing {hearing_id}"):
            hearing = self.get(hearing_id)
            case_id = hearing.case_id
            self.db.delete(hearing)
            self.db.flush()
            self.db.query(Case).filter(Case.id == case_id, Case.hearing_count > 0).update(
                {Case.hearing_count: Case.hearing_count - 1},
                synchronize_session=False,
            )
        logger.info(f"Deleted hearing {hearing_id} of case {case_id}")

    def list_for_case(self, case_id: str) -> List[Hearing]:
        with store_errors(f"listing hearings of case {case_id}"):
            self._get_case(case_id)
            return (
                self.db.query(Hearing)
                .filter(Hearing.case_id == case_id)
                .order_by(Hearing.hearing_date.desc(), Hearing.id)
                .all()
            )

    def upcoming(self, judge_id: Optional[str] = None, limit: int = 10) -> List[Hearing]:
        today = self.clock().date()
        query = self.db.query(Hearing).filter(
            Hearing.hearing_date >= today,
            Hearing.status == HearingStatus.SCHEDULED.value,
        )
        if judge_id:
            query = query.filter(Hearing.judge_id == judge_id)
        with store_errors("listing upcoming hearings"):
            return query.order_by(Hearing.hearing_date, Hearing.hearing_time).limit(limit).all()

    def todays(self, judge_id: Optional[str] = None) -> List[Hearing]:
        today = self.clock().date()
        query = self.db.query(Hearing).filter(
            Hearing.hearing_date == today,
            Hearing.status.in_([HearingStatus.SCHEDULED.value, HearingStatus.ONGOING.value]),
        )
        if judge_id:
            query = query.filter(Hearing.judge_id == judge_id)
        with store_errors("listing today's hearings"):
            return query.order_by(Hearing.hearing_time).all()

    def _count_by(self, column) -> List[Dict]:
        count = func.count(Hearing.id)
        rows = self.db.query(column, count).group_by(column).order_by(count.desc(), column).all()
        return [{"value": value, "count": total} for value, total in rows]

    def statistics(self) -> Dict:
        today = self.clock().date()
        with store_errors("computing hearing statistics"):
            return {
                "total_hearings": self.db.query(func.count(Hearing.id)).scalar(),
                "upcoming_hearings": self.db.query(func.count(Hearing.id))
                .filter(Hearing.hearing_date >= today, Hearing.status == HearingStatus.SCHEDULED.value)
                .scalar(),
                "hearings_by_status": self._count_by(Hearing.status),
                "hearings_by_purpose": self._count_by(Hearing.purpose),
            }
