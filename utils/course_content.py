"""
Courses, lecture and note records, and student registration
"""

from datetime import datetime
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import Course, Enrollment, Lecture, Note, User, UserRole
from utils.error_handling import (
    AlreadyEnrolledError,
    CourseNotFoundError,
    ForbiddenError,
    NotEnrolledError,
    UserNotFoundError,
    safe_database_operation,
)
from utils.logging_config import logger
from utils.streaks import get_course_streak


def course_to_dict(course: Course, teacher_name: str = None) -> dict:
    data = {"id": course.id, "title": course.title, "teacher_id": course.teacher_id}
    if teacher_name is not None:
        data["teacher_name"] = teacher_name
    return data


def lecture_to_dict(lecture: Lecture) -> dict:
    return {
        "id": lecture.id,
        "course_id": lecture.course_id,
        "title": lecture.title,
        "video_path": lecture.video_path,
        "upload_date": lecture.upload_date,
    }


def note_to_dict(note: Note) -> dict:
    return {
        "id": note.id,
        "course_id": note.course_id,
        "title": note.title,
        "file_path": note.file_path,
        "upload_date": note.upload_date,
    }


# ============================================================================
# COURSES
# ============================================================================


def create_course(db: Session, title: str, teacher_id: int) -> Course:
    teacher = db.query(User).filter(User.id == teacher_id, User.role == UserRole.TEACHER).first()
    if not teacher:
        raise UserNotFoundError(teacher_id=teacher_id)

    with safe_database_operation(db, "create course"):
        course = Course(title=title, teacher_id=teacher_id)
        db.add(course)
        db.commit()
        db.refresh(course)

    logger.info(f"Course {course.id} created for teacher {teacher_id}")
    return course


def list_all_courses(db: Session) -> List[dict]:
    rows = db.query(Course, User.name).join(User, Course.teacher_id == User.id).order_by(Course.id).all()
    return [course_to_dict(course, teacher_name) for course, teacher_name in rows]


def list_teacher_courses(db: Session, teacher_id: int) -> List[dict]:
    courses = db.query(Course).filter(Course.teacher_id == teacher_id).order_by(Course.id).all()
    return [course_to_dict(course) for course in courses]


def get_owned_course(db: Session, teacher_id: int, course_id: int) -> Course:
    """Course owned by the teacher; missing and foreign courses are both forbidden"""
    course = db.query(Course).filter(Course.id == course_id, Course.teacher_id == teacher_id).first()
    if not course:
        raise ForbiddenError(course_id=course_id, teacher_id=teacher_id)
    return course


def get_course(db: Session, course_id: int) -> Course:
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise CourseNotFoundError(course_id=course_id)
    return course


# ============================================================================
# LECTURES AND NOTES
# ============================================================================


def add_lecture(db: Session, teacher_id: int, course_id: int, title: str, video_path: str) -> Lecture:
    get_owned_course(db, teacher_id, course_id)

    with safe_database_operation(db, "upload lecture"):
        lecture = Lecture(course_id=course_id, title=title, video_path=video_path, upload_date=datetime.utcnow())
        db.add(lecture)
        db.commit()
        db.refresh(lecture)
    return lecture


def add_note(db: Session, teacher_id: int, course_id: int, title: str, file_path: str) -> Note:
    get_owned_course(db, teacher_id, course_id)

    with safe_database_operation(db, "upload note"):
        note = Note(course_id=course_id, title=title, file_path=file_path, upload_date=datetime.utcnow())
        db.add(note)
        db.commit()
        db.refresh(note)
    return note


def list_lectures(db: Session, course_id: int) -> List[dict]:
    lectures = db.query(Lecture).filter(Lecture.course_id == course_id).order_by(Lecture.id).all()
    return [lecture_to_dict(lecture) for lecture in lectures]


def list_notes(db: Session, course_id: int) -> List[dict]:
    notes = db.query(Note).filter(Note.course_id == course_id).order_by(Note.id).all()
    return [note_to_dict(note) for note in notes]


# ============================================================================
# REGISTRATION
# ============================================================================


def register_student(db: Session, student_id: int, course_id: int) -> Enrollment:
    """Enroll a student with a fresh streak (0, no last watch date)"""
    get_course(db, course_id)

    existing = (
        db.query(Enrollment.id)
        .filter(Enrollment.student_id == student_id, Enrollment.course_id == course_id)
        .first()
    )
    if existing:
        raise AlreadyEnrolledError(student_id=student_id, course_id=course_id)

    with safe_database_operation(db, "register for course"):
        enrollment = Enrollment(student_id=student_id, course_id=course_id, streak=0, last_watch_date=None)
        db.add(enrollment)
        try:
            db.commit()
        except IntegrityError as e:
            raise AlreadyEnrolledError(student_id=student_id, course_id=course_id) from e
        db.refresh(enrollment)

    logger.info(f"Student {student_id} registered for course {course_id}")
    return enrollment


def drop_course(db: Session, student_id: int, course_id: int) -> None:
    """Remove the enrollment; the watch history stays"""
    with safe_database_operation(db, "drop course"):
        deleted = (
            db.query(Enrollment)
            .filter(Enrollment.student_id == student_id, Enrollment.course_id == course_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            raise NotEnrolledError(student_id=student_id, course_id=course_id)
        db.commit()

    logger.info(f"Student {student_id} dropped course {course_id}")


def list_student_courses(db: Session, student_id: int) -> List[dict]:
    rows = (
        db.query(Enrollment, Course, User.name)
        .join(Course, Enrollment.course_id == Course.id)
        .join(User, Course.teacher_id == User.id)
        .filter(Enrollment.student_id == student_id)
        .order_by(Course.id)
        .all()
    )
    return [
        {
            **course_to_dict(course, teacher_name),
            "streak": enrollment.streak,
            "last_watch_date": enrollment.last_watch_date,
        }
        for enrollment, course, teacher_name in rows
    ]


def get_course_details(db: Session, student_id: int, course_id: int) -> dict:
    get_course(db, course_id)
    return {
        "lectures": list_lectures(db, course_id),
        "notes": list_notes(db, course_id),
        "streak": get_course_streak(db, student_id, course_id),
    }
