from pydantic import BaseModel, Field, field_validator
from typing import Literal

from models import UserRole


class UserRegistrationSchema(BaseModel):
    """Schema for self-service registration (students and teachers)"""

    username: str = Field(..., min_length=3, max_length=50, description="Username")
    password: str = Field(..., min_length=6, max_length=100, description="Password")
    name: str = Field(..., min_length=1, max_length=120, description="Display name")
    role: Literal["student", "teacher"] = Field("student", description="Account role")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v):
        if not v.replace("_", "").replace("-", "").isalnum():
            raise ValueError("Username can only contain letters, numbers, hyphens, and underscores")
        return v.lower().strip()

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        if not any(c.isdigit() for c in v):
            raise ValueError("Password must contain at least one digit")
        return v

    @field_validator("name")
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("Name cannot be empty")
        return v.strip()

    @property
    def user_role(self) -> UserRole:
        return UserRole(self.role)


class AdminUserCreateSchema(UserRegistrationSchema):
    """Administrators may create accounts of any role"""

    role: Literal["student", "teacher", "admin"] = Field(..., description="Account role")


class LoginSchema(BaseModel):
    username: str = Field(..., min_length=3, max_length=50)
    password: str = Field(..., min_length=6, max_length=100)

    @field_validator("username")
    @classmethod
    def normalize_username(cls, v):
        return v.lower().strip()


class CourseCreateSchema(BaseModel):
    """Schema for creating courses"""

    title: str = Field(..., min_length=1, max_length=200, description="Course title")
    teacherId: int = Field(..., gt=0, description="Owning teacher's user ID")

    @field_validator("title")
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError("Title cannot be empty")
        return v.strip()

