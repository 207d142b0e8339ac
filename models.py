from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Enum, JSON, Text
from sqlalchemy import UniqueConstraint, CheckConstraint, Index
from sqlalchemy.orm import declarative_base, relationship
import enum
from datetime import datetime

Base = declarative_base()

ANSWER_KEYS = ("A", "B", "C", "D")


class UserRole(enum.Enum):
    STUDENT = "student"
    TEACHER = "teacher"
    ADMIN = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)  # bcrypt hash
    role = Column(Enum(UserRole, values_callable=lambda roles: [r.value for r in roles]), nullable=False, index=True)
    name = Column(String, nullable=False)

    courses = relationship("Course", back_populates="teacher")


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    teacher_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    teacher = relationship("User", back_populates="courses")
    lectures = relationship("Lecture", back_populates="course", order_by="Lecture.id")
    notes = relationship("Note", back_populates="course", order_by="Note.id")
    quizzes = relationship("Quiz", back_populates="course", order_by="Quiz.id")


class Lecture(Base):
    __tablename__ = "lectures"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    video_path = Column(String, nullable=False)
    upload_date = Column(DateTime, default=datetime.utcnow, nullable=False)

    course = relationship("Course", back_populates="lectures")


class Note(Base):
    __tablename__ = "notes"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    file_path = Column(String, nullable=False)
    upload_date = Column(DateTime, default=datetime.utcnow, nullable=False)

    course = relationship("Course", back_populates="notes")


class Enrollment(Base):
    """Registration of a student on a course, carrying the watch streak"""

    __tablename__ = "student_courses"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    streak = Column(Integer, default=0, nullable=False)
    last_watch_date = Column(Date, nullable=True)

    student = relationship("User")
    course = relationship("Course")

    __table_args__ = (
        UniqueConstraint("student_id", "course_id", name="unique_student_course"),
        CheckConstraint("streak >= 0", name="non_negative_streak"),
    )


class WatchEvent(Base):
    """Append-only log of watch markings"""

    __tablename__ = "watch_history"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False)
    watch_date = Column(Date, nullable=False)

    __table_args__ = (Index("idx_watch_history_student_course", "student_id", "course_id"),)


class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    course = relationship("Course", back_populates="quizzes")
    questions = relationship("QuizQuestion", back_populates="quiz", order_by="QuizQuestion.id")


class QuizQuestion(Base):
    __tablename__ = "quiz_questions"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False, index=True)
    question = Column(Text, nullable=False)
    option_a = Column(String, nullable=False)
    option_b = Column(String, nullable=False)
    option_c = Column(String, nullable=False)
    option_d = Column(String, nullable=False)
    correct_answer = Column(String(1), nullable=False)

    quiz = relationship("Quiz", back_populates="questions")

    __table_args__ = (
        CheckConstraint("correct_answer IN ('A', 'B', 'C', 'D')", name="valid_correct_answer"),
    )

    def to_dict(self, include_answer: bool = True) -> dict:
        data = {
            "id": self.id,
            "quiz_id": self.quiz_id,
            "question": self.question,
            "option_a": self.option_a,
            "option_b": self.option_b,
            "option_c": self.option_c,
            "option_d": self.option_d,
        }
        if include_answer:
            data["correct_answer"] = self.correct_answer
        return data


class QuizAttempt(Base):
    """One graded submission; never updated after insert"""

    __tablename__ = "quiz_attempts"

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False, index=True)
    score = Column(Integer, nullable=False)
    total_questions = Column(Integer, nullable=False)
    answers = Column(JSON, nullable=False)
    submitted_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    student = relationship("User")

    __table_args__ = (
        UniqueConstraint("student_id", "quiz_id", name="unique_student_quiz_attempt"),
        CheckConstraint("score >= 0 AND score <= total_questions", name="score_within_total"),
    )
