"""
Teacher Service Router
Course content uploads and student monitoring for course owners
"""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.orm import Session

from db import get_db
from schemas.api_models import (
    CourseListResponse,
    LectureListResponse,
    LectureResponse,
    NoteListResponse,
    NoteResponse,
    StudentStreakListResponse,
)
from utils import course_content, streaks
from utils.auth_dependencies import require_teacher
from utils.error_handling import InvalidUploadError, PlatformError
from utils.file_storage import discard_upload, store_upload
from utils.jwt_utils import Identity
from utils.logging_config import logger

router = APIRouter()


@router.get("/courses", response_model=CourseListResponse, summary="Courses owned by the teacher")
def my_courses(identity: Identity = Depends(require_teacher), db: Session = Depends(get_db)):
    return CourseListResponse(courses=course_content.list_teacher_courses(db, identity.user_id))


@router.post("/courses/{course_id}/lecture", response_model=LectureResponse, status_code=201, summary="Upload a lecture")
def upload_lecture(
    course_id: int,
    title: str = Form(...),
    video: UploadFile = File(...),
    identity: Identity = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    if not title.strip():
        raise InvalidUploadError("missing title")
    course_content.get_owned_course(db, identity.user_id, course_id)

    video_path = store_upload(video, "lectures")
    try:
        lecture = course_content.add_lecture(db, identity.user_id, course_id, title.strip(), video_path)
    except PlatformError:
        discard_upload(video_path)
        raise

    logger.info(f"Lecture {lecture.id} uploaded to course {course_id}")
    return course_content.lecture_to_dict(lecture)


@router.post("/courses/{course_id}/note", response_model=NoteResponse, status_code=201, summary="Upload a note")
def upload_note(
    course_id: int,
    title: str = Form(...),
    note: UploadFile = File(...),
    identity: Identity = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    if not title.strip():
        raise InvalidUploadError("missing title")
    course_content.get_owned_course(db, identity.user_id, course_id)

    file_path = store_upload(note, "notes")
    try:
        stored = course_content.add_note(db, identity.user_id, course_id, title.strip(), file_path)
    except PlatformError:
        discard_upload(file_path)
        raise

    logger.info(f"Note {stored.id} uploaded to course {course_id}")
    return course_content.note_to_dict(stored)


@router.get("/courses/{course_id}/lectures", response_model=LectureListResponse)
def course_lectures(course_id: int, identity: Identity = Depends(require_teacher), db: Session = Depends(get_db)):
    course_content.get_owned_course(db, identity.user_id, course_id)
    return LectureListResponse(lectures=course_content.list_lectures(db, course_id))


@router.get("/courses/{course_id}/notes", response_model=NoteListResponse)
def course_notes(course_id: int, identity: Identity = Depends(require_teacher), db: Session = Depends(get_db)):
    course_content.get_owned_course(db, identity.user_id, course_id)
    return NoteListResponse(notes=course_content.list_notes(db, course_id))


@router.get("/courses/{course_id}/students", response_model=StudentStreakListResponse, summary="Student streak roster")
def course_students(course_id: int, identity: Identity = Depends(require_teacher), db: Session = Depends(get_db)):
    course_content.get_owned_course(db, identity.user_id, course_id)
    return StudentStreakListResponse(students=streaks.list_course_streaks(db, course_id))
