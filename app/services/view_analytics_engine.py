"""
Case view tracking and the analytics computed from the view log.

Every call to ``track_view`` appends one event; nothing is deduplicated. All
statistics are aggregated on demand from the raw events, so their cost grows
with the size of the log.
"""

import uuid
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional, Union

from loguru import logger
from sqlalchemy import distinct, extract, func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import atomic, store_errors
from app.core.exceptions import InvalidArgumentError, NotFoundError
from app.models.case import Case
from app.models.case_view import CaseView
from app.models.user import User
from app.utils.dates import end_of_day, iso_day, start_of_day, utcnow

RECENT_VIEWS_LIMIT = 20


def _require_positive(name: str, value: int) -> int:
    if value is None or int(value) <= 0:
        raise InvalidArgumentError(f"{name} must be a positive integer", {name: value})
    return int(value)


class ViewAnalyticsEngine:
    def __init__(self, db: Session, clock: Callable = utcnow):
        self.db = db
        self.clock = clock

    def track_view(
        self,
        case_id: str,
        user_id: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> None:
        with atomic(self.db, f"tracking view of case {case_id}"):
            if self.db.query(Case.id).filter(Case.id == case_id).first() is None:
                raise NotFoundError("Case not found", {"case_id": case_id})
            if user_id and self.db.get(User, user_id) is None:
                raise NotFoundError("User not found", {"user_id": user_id})

            self.db.add(CaseView(
                id=str(uuid.uuid4()),
                case_id=case_id,
                user_id=user_id or None,
                ip_address=ip_address,
                user_agent=user_agent,
                viewed_at=self.clock(),
            ))
            self.db.query(Case).filter(Case.id == case_id).update(
                {Case.view_count: Case.view_count + 1},
                synchronize_session=False,
            )
        logger.debug(f"Tracked view of case {case_id} by {user_id or 'anonymous'}")

    def _ranked_cases(self, since: Optional[datetime], limit: int) -> List[Dict]:
        view_count = func.count(CaseView.id).label("view_count")
        unique_viewers = func.count(distinct(CaseView.user_id)).label("unique_viewer_count")
        query = (
            self.db.query(
                CaseView.case_id,
                view_count,
                unique_viewers,
                Case.case_number,
                Case.title,
                Case.status,
            )
            .join(Case, Case.id == CaseView.case_id)
        )
        if since is not None:
            query = query.filter(CaseView.viewed_at >= since)
        rows = (
            query.group_by(CaseView.case_id, Case.case_number, Case.title, Case.status)
            .order_by(view_count.desc(), CaseView.case_id.asc())
            .limit(limit)
            .all()
        )
        return [
            {
                "case_id": row.case_id,
                "view_count": row.view_count,
                "unique_viewer_count": row.unique_viewer_count,
                "case_number": row.case_number,
                "title": row.title,
                "status": row.status,
            }
            for row in rows
        ]

    def trending(self, window_days: int = None, limit: int = None) -> List[Dict]:
        """Cases ranked by views inside the trailing window, ties broken by case id"""
        window_days = _require_positive(
            "window_days", settings.TRENDING_DEFAULT_DAYS if window_days is None else window_days
        )
        limit = _require_positive("limit", settings.TRENDING_DEFAULT_LIMIT if limit is None else limit)
        since = self.clock() - timedelta(days=window_days)
        with store_errors("computing trending cases"):
            return self._ranked_cases(since, limit)

    def most_viewed(self, limit: int = None) -> List[Dict]:
        limit = _require_positive("limit", settings.TRENDING_DEFAULT_LIMIT if limit is None else limit)
        with store_errors("computing most viewed cases"):
            return self._ranked_cases(None, limit)

    def _views_by_hour(self, *filters) -> List[Dict]:
        hour = extract("hour", CaseView.viewed_at).label("hour")
        count = func.count(CaseView.id).label("count")
        rows = self.db.query(hour, count).filter(*filters).group_by(hour).all()
        return [{"hour": int(row.hour), "count": row.count} for row in rows]

    def peak_hours(self) -> List[Dict]:
        """All-time views per hour of day, busiest first; hours without views are absent"""
        with store_errors("computing peak viewing hours"):
            buckets = self._views_by_hour()
        return sorted(buckets, key=lambda b: (-b["count"], b["hour"]))

    def _views_by_day(self, *filters) -> List[Dict]:
        day = func.date(CaseView.viewed_at).label("day")
        rows = (
            self.db.query(
                day,
                func.count(CaseView.id).label("total_views"),
                func.count(distinct(CaseView.user_id)).label("unique_user_count"),
            )
            .filter(*filters)
            .group_by(day)
            .order_by(day)
            .all()
        )
        return [
            {"date": iso_day(row.day), "total_views": row.total_views, "unique_user_count": row.unique_user_count}
            for row in rows
        ]

    def _summary(self, *filters) -> Dict:
        total = self.db.query(func.count(CaseView.id)).filter(*filters).scalar() or 0
        unique_users = (
            self.db.query(func.count(distinct(CaseView.user_id)))
            .filter(CaseView.user_id.isnot(None), *filters)
            .scalar()
            or 0
        )
        anonymous = (
            self.db.query(func.count(CaseView.id)).filter(CaseView.user_id.is_(None), *filters).scalar() or 0
        )
        return {
            "total": total,
            "unique_users": unique_users,
            "anonymous_views": anonymous,
            "registered_user_views": total - anonymous,
        }

    def date_range_statistics(self, start: Union[date, datetime], end: Union[date, datetime]) -> Dict:
        if start is None or end is None:
            raise InvalidArgumentError("Both start and end are required")
        start_at = start_of_day(start)
        end_at = end_of_day(end)
        if start_at > end_at:
            raise InvalidArgumentError(
                "Start of range is after its end",
                {"start": start_at.isoformat(), "end": end_at.isoformat()},
            )

        in_range = (CaseView.viewed_at >= start_at, CaseView.viewed_at <= end_at)
        with store_errors("computing view statistics by date range"):
            stats = self._summary(*in_range)
            stats["per_day_counts"] = self._views_by_day(*in_range)
        return stats

    def case_analytics(
        self,
        case_id: str,
        start: Optional[Union[date, datetime]] = None,
        end: Optional[Union[date, datetime]] = None,
    ) -> Dict:
        with store_errors(f"computing view analytics of case {case_id}"):
            if self.db.query(Case.id).filter(Case.id == case_id).first() is None:
                raise NotFoundError("Case not found", {"case_id": case_id})

            filters = [CaseView.case_id == case_id]
            if start is not None:
                filters.append(CaseView.viewed_at >= start_of_day(start))
            if end is not None:
                filters.append(CaseView.viewed_at <= end_of_day(end))

            summary = self._summary(*filters)
            recent = (
                self.db.query(CaseView)
                .filter(*filters)
                .order_by(CaseView.viewed_at.desc(), CaseView.id)
                .limit(RECENT_VIEWS_LIMIT)
                .all()
            )
            return {
                "total_views": summary["total"],
                "unique_users": summary["unique_users"],
                "anonymous_views": summary["anonymous_views"],
                "registered_user_views": summary["registered_user_views"],
                "views_by_date": self._views_by_day(*filters),
                "views_by_hour": sorted(self._views_by_hour(*filters), key=lambda b: b["hour"]),
                "recent_views": recent,
            }

    def user_viewed_cases(self, user_id: str, limit: int = RECENT_VIEWS_LIMIT) -> List[CaseView]:
        limit = _require_positive("limit", limit)
        with store_errors(f"listing views of user {user_id}"):
            return (
                self.db.query(CaseView)
                .filter(CaseView.user_id == user_id)
                .order_by(CaseView.viewed_at.desc(), CaseView.id)
                .limit(limit)
                .all()
            )

    def overall_statistics(self) -> Dict:
        now = self.clock()
        today = start_of_day(now.date())

        def views_since(moment: datetime) -> int:
            return self.db.query(func.count(CaseView.id)).filter(CaseView.viewed_at >= moment).scalar() or 0

        with store_errors("computing overall view statistics"):
            summary = self._summary()
            return {
                "total_views": summary["total"],
                "unique_users": summary["unique_users"],
                "anonymous_views": summary["anonymous_views"],
                "registered_user_views": summary["registered_user_views"],
                "today_views": views_since(today),
                "last_7_days_views": views_since(now - timedelta(days=7)),
                "last_30_days_views": views_since(now - timedelta(days=30)),
            }
