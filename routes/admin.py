"""
Admin Service Router
Account and course administration, plus read-only quiz oversight
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from db import get_db
from schemas.api_models import AttemptListResponse, CourseListResponse, CourseResponse, UserListResponse, UserResponse
from schemas.validation import AdminUserCreateSchema, CourseCreateSchema
from utils import accounts, course_content, quiz_scoring
from utils.auth_dependencies import require_admin
from utils.jwt_utils import Identity

router = APIRouter()


@router.get("/users", response_model=UserListResponse)
def list_users(identity: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    return UserListResponse(users=[accounts.user_to_dict(user) for user in accounts.list_users(db)])


@router.post("/users", response_model=UserResponse, status_code=201, summary="Create an account of any role")
def create_user(data: AdminUserCreateSchema, identity: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    user = accounts.register_user(db, data.username, data.password, data.name, data.user_role)
    return accounts.user_to_dict(user)


@router.get("/courses", response_model=CourseListResponse)
def list_courses(identity: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    return CourseListResponse(courses=course_content.list_all_courses(db))


@router.post("/courses", response_model=CourseResponse, status_code=201, summary="Create a course for a teacher")
def create_course(data: CourseCreateSchema, identity: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    course = course_content.create_course(db, data.title, data.teacherId)
    return course_content.course_to_dict(course)


@router.get("/quizzes/{quiz_id}/attempts", response_model=AttemptListResponse, summary="Attempts on any quiz")
def quiz_attempts(quiz_id: int, identity: Identity = Depends(require_admin), db: Session = Depends(get_db)):
    return AttemptListResponse(attempts=quiz_scoring.list_attempts(db, quiz_id))
