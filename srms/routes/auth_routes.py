import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from srms.auth import jwt_handler
from srms.auth.dependencies import get_current_user
from srms.auth.passwords import hash_password, verify_password
from srms.core.responses import database_unavailable, success
from srms.database import get_db
from srms.models.student import Student
from srms.models.user import User
from srms.schemas import (
    LoginData,
    LoginRequest,
    RegisterData,
    RegisterRequest,
    TokenUser,
    User as UserSchema,
    VerifyData,
)

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


def authenticate_user(email: str, password: str, db: Session) -> UserSchema | None:
    """Check administrator accounts first, then students."""
    admin = db.query(User).filter(User.email == email, User.is_active.is_(True)).first()
    if admin and verify_password(password, admin.hashed_password):
        return UserSchema(id=admin.id, email=admin.email, name=admin.name, role='admin')

    student = db.query(Student).filter(Student.email == email, Student.is_active.is_(True)).first()
    if student and verify_password(password, student.hashed_password):
        return UserSchema(id=student.id, email=student.email, name=student.name, role='student')

    return None


@router.post('/login')
def login(data: LoginRequest, db: Session = Depends(get_db)):
    try:
        user = authenticate_user(data.email, data.password, db)
    except SQLAlchemyError as exc:
        logger.exception('Authentication lookup failed for %s', data.email)
        raise database_unavailable() from exc

    if user is None:
        logger.info('Rejected login for %s', data.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='Invalid credentials')

    token = jwt_handler.create_access_token(subject=user.id, role=user.role, email=user.email, name=user.name)
    logger.info('User %s signed in as %s', user.email, user.role)
    return success('Login successful', LoginData(user=user, token=token))


@router.post('/register', status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    try:
        if db.query(Student).filter(Student.roll_number == data.roll_number).first():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Roll number already exists')

        email_taken = (
            db.query(Student).filter(Student.email == data.email).first()
            or db.query(User).filter(User.email == data.email).first()
        )
        if email_taken:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Email already exists')

        student = Student(
            roll_number=data.roll_number,
            name=data.name,
            email=data.email,
            hashed_password=hash_password(data.password),
            class_name=data.class_name,
            phone=data.phone,
        )
        db.add(student)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Registration failed for %s', data.email)
        raise database_unavailable() from exc

    return success(
        'Registration successful',
        RegisterData(message='Account created. You can now sign in.', status='registered'),
    )


@router.get('/verify')
def verify(current_user: TokenUser = Depends(get_current_user)):
    return success('Token valid', VerifyData(user=current_user))


@router.get('/me')
def me(current_user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    model = User if current_user.role == 'admin' else Student
    try:
        account = db.query(model).filter(model.id == current_user.id, model.is_active.is_(True)).first()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    if account is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail='User not found')

    return success(
        'User retrieved successfully',
        UserSchema(id=account.id, email=account.email, name=account.name, role=current_user.role),
    )


@router.post('/logout')
def logout():
    # Tokens are stateless; the client drops its copy.
    return success('Logged out successfully')
