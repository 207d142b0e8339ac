"""
Authentication Service Router
Handles account registration, login and token introspection
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from db import get_db
from schemas.api_models import IdentityResponse, LoginResponse, UserResponse
from schemas.validation import LoginSchema, UserRegistrationSchema
from utils.accounts import authenticate, register_user, user_to_dict
from utils.auth_dependencies import get_current_identity
from utils.jwt_utils import Identity, jwt_manager

router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=201, summary="Register a student or teacher")
def register(data: UserRegistrationSchema, db: Session = Depends(get_db)):
    user = register_user(db, data.username, data.password, data.name, data.user_role)
    return user_to_dict(user)


@router.post("/login", response_model=LoginResponse, summary="Exchange credentials for an access token")
def login(data: LoginSchema, db: Session = Depends(get_db)):
    user = authenticate(db, data.username, data.password)
    token = jwt_manager.create_access_token(user.id, user.role)
    return LoginResponse(message="Login successful", token=token, role=user.role.value, name=user.name, user_id=user.id)


@router.get("/me", response_model=IdentityResponse, summary="Identity carried by the current token")
async def me(identity: Identity = Depends(get_current_identity)):
    return IdentityResponse(user_id=identity.user_id, role=identity.role.value)
