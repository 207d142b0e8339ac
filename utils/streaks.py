"""
Watch streak tracking

A streak counts consecutive calendar days on which a student marked a course
as watched. ``record_watch`` is the only writer of ``Enrollment.streak`` and
``Enrollment.last_watch_date``.
"""

from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import case, update
from sqlalchemy.orm import Session

from config import settings
from models import Enrollment, User, WatchEvent
from utils.error_handling import NotEnrolledError, safe_database_operation
from utils.structured_logging import get_logger, LogCategory

logger = get_logger("streaks")

RESET = "reset"
PRESERVE = "preserve"


def current_watch_date() -> date:
    """Calendar day used for watch markings (UTC)"""
    return datetime.now(timezone.utc).date()


def next_streak(old_streak: int, last_watch_date: Optional[date], today: date, same_day_policy: str = RESET) -> int:
    """Pure form of the streak rule, mirrored by the SQL in ``record_watch``"""
    if last_watch_date is None:
        return 1
    diff_days = (today - last_watch_date).days
    if diff_days == 1:
        return old_streak + 1
    if diff_days == 0 and same_day_policy == PRESERVE:
        return old_streak
    return 1


def _streak_expression(today: date, same_day_policy: str):
    yesterday = today - timedelta(days=1)
    whens = [(Enrollment.last_watch_date == yesterday, Enrollment.streak + 1)]
    if same_day_policy == PRESERVE:
        whens.insert(0, (Enrollment.last_watch_date == today, Enrollment.streak))
    # NULL dates, gaps and dates after today all fall through to 1
    return case(*whens, else_=1)


def record_watch(
    db: Session,
    student_id: int,
    course_id: int,
    today: Optional[date] = None,
    same_day_policy: Optional[str] = None,
) -> int:
    """
    Record that a student watched a course today and return the new streak.

    The streak is recomputed by one conditional UPDATE so concurrent calls for
    the same enrollment serialize on the row write lock instead of racing on a
    stale read. The watch event is appended in the same transaction.

    Raises:
        NotEnrolledError: no enrollment for (student_id, course_id)
        PersistenceError: the storage layer failed; nothing is committed
    """
    today = today or current_watch_date()
    policy = same_day_policy or settings.SAME_DAY_WATCH_POLICY

    with safe_database_operation(db, "record watch"):
        result = db.execute(
            update(Enrollment)
            .where(Enrollment.student_id == student_id, Enrollment.course_id == course_id)
            .values(streak=_streak_expression(today, policy), last_watch_date=today)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise NotEnrolledError(student_id=student_id, course_id=course_id)

        db.add(WatchEvent(student_id=student_id, course_id=course_id, watch_date=today))

        streak = (
            db.query(Enrollment.streak)
            .filter(Enrollment.student_id == student_id, Enrollment.course_id == course_id)
            .scalar()
        )
        db.commit()

    logger.info(
        "Watch recorded",
        category=LogCategory.BUSINESS,
        user_id=student_id,
        extra={"course_id": course_id, "watch_date": today.isoformat(), "streak": streak, "policy": policy},
    )
    return streak


def get_course_streak(db: Session, student_id: int, course_id: int) -> int:
    streak = (
        db.query(Enrollment.streak)
        .filter(Enrollment.student_id == student_id, Enrollment.course_id == course_id)
        .scalar()
    )
    return streak or 0


def list_course_streaks(db: Session, course_id: int, exclude_student_id: Optional[int] = None) -> List[dict]:
    """Enrolled students of a course with their current streaks"""
    query = (
        db.query(User.id, User.name, Enrollment.streak)
        .join(Enrollment, Enrollment.student_id == User.id)
        .filter(Enrollment.course_id == course_id)
    )
    if exclude_student_id is not None:
        query = query.filter(User.id != exclude_student_id)

    return [{"id": row.id, "name": row.name, "streak": row.streak} for row in query.order_by(User.id).all()]


def list_watch_history(db: Session, student_id: int, course_id: int) -> List[date]:
    rows = (
        db.query(WatchEvent.watch_date)
        .filter(WatchEvent.student_id == student_id, WatchEvent.course_id == course_id)
        .order_by(WatchEvent.watch_date.desc(), WatchEvent.id.desc())
        .all()
    )
    return [row.watch_date for row in rows]
