"""
Quiz authoring, grading and review

Every question is worth one point. A student gets exactly one graded attempt
per quiz; the attempt row stores the verbatim answers and is never updated.
"""

from datetime import datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

from sqlalchemy import and_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from models import ANSWER_KEYS, Course, Quiz, QuizAttempt, QuizQuestion, User
from utils.error_handling import (
    DuplicateAttemptError,
    ForbiddenError,
    InvalidQuestionError,
    PersistenceError,
    QuizNotFoundError,
    safe_database_operation,
)
from utils.structured_logging import get_logger, LogCategory

logger = get_logger("quiz_scoring")

OPTION_FIELDS = tuple(f"option_{key.lower()}" for key in ANSWER_KEYS)


# ============================================================================
# SERIALIZATION
# ============================================================================


def quiz_to_dict(quiz: Quiz) -> dict:
    return {
        "id": quiz.id,
        "course_id": quiz.course_id,
        "title": quiz.title,
        "description": quiz.description,
        "created_at": quiz.created_at,
    }


def attempt_to_dict(attempt: QuizAttempt) -> dict:
    return {
        "id": attempt.id,
        "student_id": attempt.student_id,
        "quiz_id": attempt.quiz_id,
        "score": attempt.score,
        "total_questions": attempt.total_questions,
        "answers": attempt.answers,
        "submitted_at": attempt.submitted_at,
    }


# ============================================================================
# GRADING
# ============================================================================


def normalize_answers(answers: Optional[Mapping[Any, Any]]) -> Dict[str, Any]:
    """Key answers by question id as a string, the form JSON bodies arrive in"""
    return {str(question_id): choice for question_id, choice in (answers or {}).items()}


def score_answers(questions: Iterable[QuizQuestion], answers: Optional[Mapping[Any, Any]]) -> int:
    """Count exact matches against the key; missing or unknown ids score nothing"""
    chosen = normalize_answers(answers)
    return sum(1 for question in questions if chosen.get(str(question.id)) == question.correct_answer)


def submit_attempt(db: Session, student_id: int, quiz_id: int, answers: Optional[Mapping[Any, Any]]) -> dict:
    """
    Grade a submission against the stored key and persist it.

    Returns:
        {"score": int, "total_questions": int}

    Raises:
        QuizNotFoundError: the quiz does not exist
        DuplicateAttemptError: the student already has an attempt on this quiz
        PersistenceError: the attempt could not be stored
    """
    recorded = normalize_answers(answers)

    with safe_database_operation(db, "submit quiz attempt"):
        quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if not quiz:
            raise QuizNotFoundError(quiz_id=quiz_id)

        already = (
            db.query(QuizAttempt.id)
            .filter(QuizAttempt.student_id == student_id, QuizAttempt.quiz_id == quiz_id)
            .first()
        )
        if already:
            raise DuplicateAttemptError(student_id=student_id, quiz_id=quiz_id)

        questions = db.query(QuizQuestion).filter(QuizQuestion.quiz_id == quiz_id).all()
        score = score_answers(questions, recorded)
        total = len(questions)

        db.add(
            QuizAttempt(
                student_id=student_id,
                quiz_id=quiz_id,
                score=score,
                total_questions=total,
                answers=recorded,
                submitted_at=datetime.utcnow(),
            )
        )
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            # A concurrent submission won the unique (student_id, quiz_id) slot
            raced = (
                db.query(QuizAttempt.id)
                .filter(QuizAttempt.student_id == student_id, QuizAttempt.quiz_id == quiz_id)
                .first()
            )
            if raced:
                raise DuplicateAttemptError(student_id=student_id, quiz_id=quiz_id) from e
            raise PersistenceError("submit quiz attempt failed") from e

    logger.info(
        "Quiz attempt graded",
        category=LogCategory.BUSINESS,
        user_id=student_id,
        extra={"quiz_id": quiz_id, "score": score, "total_questions": total},
    )
    return {"score": score, "total_questions": total}


# ============================================================================
# REVIEW
# ============================================================================


def get_attempt_view(db: Session, student_id: int, quiz_id: int) -> dict:
    """
    Quiz, questions and the student's attempt.

    Correct answers stay hidden until the student has an attempt on record.
    """
    with safe_database_operation(db, "load attempt view"):
        quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
        if not quiz:
            raise QuizNotFoundError(quiz_id=quiz_id)

        attempt = (
            db.query(QuizAttempt).filter(QuizAttempt.student_id == student_id, QuizAttempt.quiz_id == quiz_id).first()
        )
        reveal = attempt is not None

        return {
            "quiz": quiz_to_dict(quiz),
            "questions": [question.to_dict(include_answer=reveal) for question in quiz.questions],
            "attempt": attempt_to_dict(attempt) if attempt else None,
        }


def list_course_quizzes(db: Session, student_id: int, course_id: int) -> List[dict]:
    """Quizzes of a course flagged with whether this student attempted them"""
    rows = (
        db.query(Quiz, QuizAttempt.score)
        .outerjoin(QuizAttempt, and_(QuizAttempt.quiz_id == Quiz.id, QuizAttempt.student_id == student_id))
        .filter(Quiz.course_id == course_id)
        .order_by(Quiz.id)
        .all()
    )
    return [{**quiz_to_dict(quiz), "attempted": score is not None, "attempt_score": score} for quiz, score in rows]


def _quiz_for_reviewer(db: Session, quiz_id: int, teacher_id: Optional[int]) -> Quiz:
    with safe_database_operation(db, "load quiz"):
        quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
        owner_id = quiz.course.teacher_id if quiz else None

    if teacher_id is None:
        if not quiz:
            raise QuizNotFoundError(quiz_id=quiz_id)
        return quiz

    # Missing and foreign quizzes look the same to a teacher
    if not quiz or owner_id != teacher_id:
        raise ForbiddenError(quiz_id=quiz_id, teacher_id=teacher_id)
    return quiz


def list_attempts(db: Session, quiz_id: int, teacher_id: Optional[int] = None) -> List[dict]:
    """
    Attempts on a quiz with student names, newest first.

    With ``teacher_id`` the quiz must belong to one of that teacher's courses;
    without it (administrator oversight) any existing quiz is listed.
    """
    _quiz_for_reviewer(db, quiz_id, teacher_id)

    rows = (
        db.query(QuizAttempt, User.name)
        .join(User, User.id == QuizAttempt.student_id)
        .filter(QuizAttempt.quiz_id == quiz_id)
        .order_by(QuizAttempt.submitted_at.desc(), QuizAttempt.id.desc())
        .all()
    )
    return [{**attempt_to_dict(attempt), "student_name": name} for attempt, name in rows]


def get_teacher_quiz_view(db: Session, teacher_id: int, quiz_id: int) -> dict:
    quiz = _quiz_for_reviewer(db, quiz_id, teacher_id)
    return {
        "quiz": quiz_to_dict(quiz),
        "questions": [question.to_dict(include_answer=True) for question in quiz.questions],
    }


# ============================================================================
# AUTHORING
# ============================================================================


def _clean_text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def validate_questions(questions: Optional[List[Mapping[str, Any]]]) -> List[dict]:
    """
    Check authoring input and return clean column values.

    Each question needs text and four non-empty options. The correct answer must
    be one of the letters A-D exactly as stored; it is not trimmed or upper-cased.
    """
    if not questions:
        raise InvalidQuestionError("a quiz needs at least one question")

    cleaned = []
    for index, question in enumerate(questions, start=1):
        text = _clean_text(question.get("question"))
        options = {field: _clean_text(question.get(field)) for field in OPTION_FIELDS}
        answer = question.get("correct_answer")

        if not text or not all(options.values()) or answer not in ANSWER_KEYS:
            raise InvalidQuestionError(f"question {index} is incomplete", index=index)

        cleaned.append({"question": text, **options, "correct_answer": answer})
    return cleaned


def create_quiz(
    db: Session,
    teacher_id: int,
    course_id: int,
    title: str,
    description: Optional[str],
    questions: Optional[List[Mapping[str, Any]]],
) -> int:
    """
    Create a quiz with its questions in one transaction and return its id.

    Raises:
        ForbiddenError: the course does not exist or belongs to another teacher
        InvalidQuestionError: a question is malformed; nothing is written
        PersistenceError: the insert failed; nothing is written
    """
    with safe_database_operation(db, "create quiz"):
        course = db.query(Course).filter(Course.id == course_id, Course.teacher_id == teacher_id).first()
        if not course:
            raise ForbiddenError(course_id=course_id, teacher_id=teacher_id)

        cleaned = validate_questions(questions)

        quiz = Quiz(course_id=course_id, title=title, description=description, created_at=datetime.utcnow())
        db.add(quiz)
        db.flush()
        quiz_id = quiz.id

        db.add_all([QuizQuestion(quiz_id=quiz_id, **question) for question in cleaned])
        db.commit()

    logger.info(
        "Quiz created",
        category=LogCategory.BUSINESS,
        user_id=teacher_id,
        extra={"quiz_id": quiz_id, "course_id": course_id, "questions": len(cleaned)},
    )
    return quiz_id
