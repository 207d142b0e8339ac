import pytest
from datetime import date, datetime
from sqlalchemy.exc import IntegrityError
from models import Course, Enrollment, Quiz, QuizAttempt, QuizQuestion, User, UserRole


class TestUserModel:
    """Test User model operations"""

    def test_create_user(self, test_db):
        """Test creating a user"""
        user = User(username="carol", password="hash", role=UserRole.TEACHER, name="Carol")
        test_db.add(user)
        test_db.commit()

        assert user.id is not None
        assert user.role == UserRole.TEACHER

    def test_username_unique(self, test_db):
        """Test that username must be unique"""
        test_db.add(User(username="same", password="hash", role=UserRole.STUDENT, name="One"))
        test_db.commit()

        test_db.add(User(username="same", password="hash", role=UserRole.STUDENT, name="Two"))
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()


class TestEnrollmentModel:
    """Test enrollment constraints"""

    def test_new_enrollment_defaults(self, test_db, student, course):
        enrollment = Enrollment(student_id=student.id, course_id=course.id)
        test_db.add(enrollment)
        test_db.commit()

        assert enrollment.streak == 0
        assert enrollment.last_watch_date is None

    def test_one_enrollment_per_student_and_course(self, test_db, student, course, enrollment):
        test_db.add(Enrollment(student_id=student.id, course_id=course.id))
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()

    def test_streak_never_negative(self, test_db, student, course):
        test_db.add(Enrollment(student_id=student.id, course_id=course.id, streak=-1, last_watch_date=date.today()))
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()

    def test_course_requires_existing_teacher(self, test_db):
        test_db.add(Course(title="Orphan", teacher_id=12345))
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()


class TestQuizModels:
    """Test quiz question and attempt constraints"""

    @pytest.fixture
    def quiz(self, test_db, course):
        quiz = Quiz(course_id=course.id, title="Quiz", created_at=datetime.utcnow())
        test_db.add(quiz)
        test_db.commit()
        return quiz

    def test_correct_answer_limited_to_letters(self, test_db, quiz):
        test_db.add(
            QuizQuestion(
                quiz_id=quiz.id, question="Q", option_a="a", option_b="b", option_c="c", option_d="d", correct_answer="E"
            )
        )
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()

    def test_to_dict_hides_answer_on_request(self, test_db, quiz):
        question = QuizQuestion(
            quiz_id=quiz.id, question="Q", option_a="a", option_b="b", option_c="c", option_d="d", correct_answer="C"
        )
        test_db.add(question)
        test_db.commit()

        assert question.to_dict()["correct_answer"] == "C"
        assert "correct_answer" not in question.to_dict(include_answer=False)

    def test_one_attempt_per_student_and_quiz(self, test_db, student, quiz):
        attempt = dict(student_id=student.id, quiz_id=quiz.id, score=0, total_questions=0, answers={})
        test_db.add(QuizAttempt(**attempt))
        test_db.commit()

        test_db.add(QuizAttempt(**attempt))
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()

    def test_score_within_total(self, test_db, student, quiz):
        test_db.add(QuizAttempt(student_id=student.id, quiz_id=quiz.id, score=3, total_questions=2, answers={}))
        with pytest.raises(IntegrityError):
            test_db.commit()
        test_db.rollback()
