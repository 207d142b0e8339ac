"""
Pydantic schemas for API v1
JSON bodies use camelCase keys; Python code uses snake_case attributes
"""

from pydantic import BaseModel, Field, ConfigDict, field_validator, model_serializer
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional
from datetime import date, datetime


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class BaseResponse(CamelModel):
    """Base response with common fields"""

    success: bool = True
    message: Optional[str] = None


# ============================================================================
# USER MODELS
# ============================================================================


class UserResponse(CamelModel):
    id: int
    username: str
    name: str
    role: str


class UserListResponse(BaseResponse):
    users: List[UserResponse]


class LoginResponse(BaseResponse):
    token: str
    role: str
    name: str
    user_id: int


class IdentityResponse(BaseResponse):
    user_id: int
    role: str


# ============================================================================
# COURSE MODELS
# ============================================================================


class CourseResponse(CamelModel):
    id: int
    title: str
    teacher_id: int
    teacher_name: Optional[str] = None


class EnrolledCourseResponse(CourseResponse):
    streak: int
    last_watch_date: Optional[date] = None


class CourseListResponse(BaseResponse):
    courses: List[CourseResponse]


class EnrolledCourseListResponse(BaseResponse):
    courses: List[EnrolledCourseResponse]


class CourseRegistrationRequest(CamelModel):
    course_id: int = Field(..., gt=0)


class LectureResponse(CamelModel):
    id: int
    course_id: int
    title: str
    video_path: str
    upload_date: datetime


class NoteResponse(CamelModel):
    id: int
    course_id: int
    title: str
    file_path: str
    upload_date: datetime


class LectureListResponse(BaseResponse):
    lectures: List[LectureResponse]


class NoteListResponse(BaseResponse):
    notes: List[NoteResponse]


class CourseDetailsResponse(BaseResponse):
    lectures: List[LectureResponse]
    notes: List[NoteResponse]
    streak: int


# ============================================================================
# STREAK MODELS
# ============================================================================


class StudentStreak(CamelModel):
    id: int
    name: str
    streak: int


class StudentStreakListResponse(BaseResponse):
    students: List[StudentStreak]


class WatchResponse(BaseResponse):
    streak: int


class WatchHistoryResponse(BaseResponse):
    course_id: int
    watch_dates: List[date]


# ============================================================================
# QUIZ MODELS
# ============================================================================


class QuizQuestionInput(CamelModel):
    """Authoring input; completeness is checked when the quiz is created"""

    question: Optional[Any] = None
    option_a: Optional[Any] = None
    option_b: Optional[Any] = None
    option_c: Optional[Any] = None
    option_d: Optional[Any] = None
    correct_answer: Optional[Any] = None


class QuizCreateRequest(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=2000)
    questions: List[QuizQuestionInput] = Field(default_factory=list)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip()


class QuizCreateResponse(BaseResponse):
    quiz_id: int


class QuizSubmitRequest(CamelModel):
    answers: Dict[str, Any] = Field(default_factory=dict, description="Question id -> chosen option letter")


class QuizSubmitResponse(BaseResponse):
    score: int
    total_questions: int


class QuizSummary(CamelModel):
    id: int
    course_id: int
    title: str
    description: Optional[str] = None
    created_at: datetime
    attempted: bool
    attempt_score: Optional[int] = None


class QuizListResponse(BaseResponse):
    quizzes: List[QuizSummary]


class AttemptSummary(CamelModel):
    id: int
    student_id: int
    student_name: str
    quiz_id: int
    score: int
    total_questions: int
    answers: Dict[str, Any]
    submitted_at: datetime


class AttemptListResponse(BaseResponse):
    attempts: List[AttemptSummary]


class QuizDetail(CamelModel):
    id: int
    course_id: int
    title: str
    description: Optional[str] = None
    created_at: datetime


class QuestionView(CamelModel):
    id: int
    quiz_id: int
    question: str
    option_a: str
    option_b: str
    option_c: str
    option_d: str
    correct_answer: Optional[str] = None

    @model_serializer(mode="wrap")
    def omit_hidden_answer(self, handler):
        data = handler(self)
        if self.correct_answer is None:
            data.pop("correctAnswer", None)
            data.pop("correct_answer", None)
        return data


class AttemptView(CamelModel):
    id: int
    student_id: int
    quiz_id: int
    score: int
    total_questions: int
    answers: Dict[str, Any]
    submitted_at: datetime


class QuizAttemptViewResponse(BaseResponse):
    """Student view; ``correctAnswer`` is left out of every question until an attempt exists"""

    quiz: QuizDetail
    questions: List[QuestionView]
    attempt: Optional[AttemptView] = None


class TeacherQuizViewResponse(BaseResponse):
    quiz: QuizDetail
    questions: List[QuestionView]
