"""
Quiz Service Router
Quiz authoring for teachers, attempts and review for students
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from db import get_db
from schemas.api_models import (
    AttemptListResponse,
    QuizCreateRequest,
    QuizCreateResponse,
    QuizListResponse,
    QuizSubmitRequest,
    QuizSubmitResponse,
    QuizAttemptViewResponse,
    TeacherQuizViewResponse,
)
from utils import quiz_scoring
from utils.auth_dependencies import require_student, require_teacher
from utils.jwt_utils import Identity
from utils.logging_config import logger

router = APIRouter()


@router.post(
    "/courses/{course_id}/quizzes", response_model=QuizCreateResponse, status_code=201, summary="Create a quiz"
)
def create_quiz(
    course_id: int,
    payload: QuizCreateRequest,
    identity: Identity = Depends(require_teacher),
    db: Session = Depends(get_db),
):
    """
    Create a quiz with all of its questions.

    Either the quiz and every question are stored, or nothing is.
    """
    logger.info(
        f"Quiz creation request: course {course_id}, teacher {identity.user_id}, "
        f"{len(payload.questions)} questions"
    )
    quiz_id = quiz_scoring.create_quiz(
        db,
        identity.user_id,
        course_id,
        payload.title,
        payload.description,
        [question.model_dump() for question in payload.questions],
    )
    return QuizCreateResponse(message="Quiz created successfully", quiz_id=quiz_id)


@router.get("/courses/{course_id}/quizzes", response_model=QuizListResponse, summary="Quizzes of a course")
def course_quizzes(course_id: int, identity: Identity = Depends(require_student), db: Session = Depends(get_db)):
    return QuizListResponse(quizzes=quiz_scoring.list_course_quizzes(db, identity.user_id, course_id))


@router.get(
    "/quizzes/{quiz_id}", response_model=QuizAttemptViewResponse, summary="Quiz with questions and own attempt"
)
def quiz_view(quiz_id: int, identity: Identity = Depends(require_student), db: Session = Depends(get_db)):
    """Correct answers are only included once the student has submitted an attempt."""
    return QuizAttemptViewResponse(**quiz_scoring.get_attempt_view(db, identity.user_id, quiz_id))


@router.post("/quizzes/{quiz_id}/submit", response_model=QuizSubmitResponse, summary="Submit answers for grading")
def submit_quiz(
    quiz_id: int,
    payload: QuizSubmitRequest,
    identity: Identity = Depends(require_student),
    db: Session = Depends(get_db),
):
    result = quiz_scoring.submit_attempt(db, identity.user_id, quiz_id, payload.answers)
    return QuizSubmitResponse(message="Quiz submitted successfully", **result)


@router.get(
    "/quizzes/{quiz_id}/teacher", response_model=TeacherQuizViewResponse, summary="Quiz with answer key for its teacher"
)
def teacher_quiz_view(quiz_id: int, identity: Identity = Depends(require_teacher), db: Session = Depends(get_db)):
    return TeacherQuizViewResponse(**quiz_scoring.get_teacher_quiz_view(db, identity.user_id, quiz_id))


@router.get("/quizzes/{quiz_id}/attempts", response_model=AttemptListResponse, summary="Attempts on a quiz")
def quiz_attempts(quiz_id: int, identity: Identity = Depends(require_teacher), db: Session = Depends(get_db)):
    return AttemptListResponse(attempts=quiz_scoring.list_attempts(db, quiz_id, teacher_id=identity.user_id))
