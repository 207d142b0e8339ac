"""User accounts: registration, password checks and listing"""

from typing import List, Optional

from passlib.hash import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import settings
from models import User, UserRole
from utils.error_handling import (
    InvalidCredentialsError,
    UsernameTakenError,
    log_operation_success,
    safe_database_operation,
)
from utils.logging_config import logger

password_hasher = bcrypt.using(rounds=settings.BCRYPT_ROUNDS)


def hash_password(password: str) -> str:
    return password_hasher.hash(password)


def user_to_dict(user: User) -> dict:
    return {"id": user.id, "username": user.username, "name": user.name, "role": user.role.value}


def register_user(db: Session, username: str, password: str, name: str, role: UserRole) -> User:
    if db.query(User.id).filter(User.username == username).first():
        raise UsernameTakenError(username=username)

    with safe_database_operation(db, "user registration"):
        user = User(username=username, password=hash_password(password), name=name, role=role)
        db.add(user)
        try:
            db.commit()
        except IntegrityError as e:
            # Lost a race for the unique username
            raise UsernameTakenError(username=username) from e
        db.refresh(user)

    log_operation_success("User registration", f"Username: {username}, role: {role.value}")
    return user


def authenticate(db: Session, username: str, password: str) -> User:
    user = db.query(User).filter(User.username == username).first()
    if not user or not bcrypt.verify(password, user.password):
        logger.warning(f"Failed login attempt for username: {username}")
        raise InvalidCredentialsError(username=username)

    logger.info(f"Successful login for user: {user.username}")
    return user


def list_users(db: Session, role: Optional[UserRole] = None) -> List[User]:
    query = db.query(User)
    if role is not None:
        query = query.filter(User.role == role)
    return query.order_by(User.id).all()
