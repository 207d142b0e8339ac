"""
Student Service Router
Course registration, course content and watch streaks for students
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from db import get_db
from schemas.api_models import (
    BaseResponse,
    CourseDetailsResponse,
    CourseListResponse,
    CourseRegistrationRequest,
    EnrolledCourseListResponse,
    StudentStreakListResponse,
    WatchHistoryResponse,
    WatchResponse,
)
from utils import course_content, streaks
from utils.auth_dependencies import require_student
from utils.jwt_utils import Identity
from utils.logging_config import logger

router = APIRouter()


@router.get("/courses", response_model=CourseListResponse, summary="All courses open for registration")
def list_courses(identity: Identity = Depends(require_student), db: Session = Depends(get_db)):
    return CourseListResponse(courses=course_content.list_all_courses(db))


@router.get("/my-courses", response_model=EnrolledCourseListResponse, summary="Registered courses with streaks")
def list_my_courses(identity: Identity = Depends(require_student), db: Session = Depends(get_db)):
    return EnrolledCourseListResponse(courses=course_content.list_student_courses(db, identity.user_id))


@router.post("/courses/register", response_model=BaseResponse, summary="Register for a course")
def register_for_course(
    request: CourseRegistrationRequest,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    course_content.register_student(db, identity.user_id, request.course_id)
    return BaseResponse(message="Registered for course successfully")


@router.post("/courses/drop", response_model=BaseResponse, summary="Drop a course")
def drop_course(
    request: CourseRegistrationRequest,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    course_content.drop_course(db, identity.user_id, request.course_id)
    return BaseResponse(message="Dropped course successfully")


@router.post("/courses/{course_id}/watch", response_model=WatchResponse, summary="Mark today's lecture watch")
def mark_watch(course_id: int, identity: Identity = Depends(require_student), db: Session = Depends(get_db)):
    """
    Record a watch for today and return the updated streak.

    Consecutive calendar days extend the streak; any gap starts it over at 1.
    """
    streak = streaks.record_watch(db, identity.user_id, course_id)
    logger.info(f"Watch recorded: student {identity.user_id}, course {course_id}, streak {streak}")
    return WatchResponse(message="Watch recorded and streak updated", streak=streak)


@router.get("/courses/{course_id}/details", response_model=CourseDetailsResponse, summary="Lectures, notes and streak")
def course_details(course_id: int, identity: Identity = Depends(require_student), db: Session = Depends(get_db)):
    return CourseDetailsResponse(**course_content.get_course_details(db, identity.user_id, course_id))


@router.get("/courses/{course_id}/students", response_model=StudentStreakListResponse, summary="Classmates' streaks")
def classmates(course_id: int, identity: Identity = Depends(require_student), db: Session = Depends(get_db)):
    students = streaks.list_course_streaks(db, course_id, exclude_student_id=identity.user_id)
    return StudentStreakListResponse(students=students)


@router.get("/courses/{course_id}/history", response_model=WatchHistoryResponse, summary="Own watch history")
def watch_history(course_id: int, identity: Identity = Depends(require_student), db: Session = Depends(get_db)):
    dates = streaks.list_watch_history(db, identity.user_id, course_id)
    return WatchHistoryResponse(course_id=course_id, watch_dates=dates)
