import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from srms.auth.dependencies import ensure_self_or_admin, get_current_user, require_admin
from srms.auth.passwords import hash_password
from srms.core import grading
from srms.core.responses import database_unavailable, success
from srms.database import get_db
from srms.models.result import Result
from srms.models.student import Student
from srms.models.user import User
from srms.routes.result_routes import serialize_result
from srms.schemas import (
    Student as StudentSchema,
    StudentCreate,
    StudentOption,
    StudentStatistics,
    StudentUpdate,
    TokenUser,
)

router = APIRouter(tags=['students'])

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 500


def get_active_student(student_id: str, db: Session) -> Student | None:
    return db.query(Student).filter(Student.id == student_id, Student.is_active.is_(True)).first()


def get_student_or_404(student_id: str, db: Session) -> Student:
    student = get_active_student(student_id, db)
    if student is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Student not found')
    return student


def roll_number_exists(roll_number: str, db: Session, exclude_id: str | None = None) -> bool:
    query = db.query(Student.id).filter(Student.roll_number == roll_number)
    if exclude_id:
        query = query.filter(Student.id != exclude_id)
    return query.first() is not None


def email_exists(email: str, db: Session, exclude_id: str | None = None) -> bool:
    query = db.query(Student.id).filter(Student.email == email)
    if exclude_id:
        query = query.filter(Student.id != exclude_id)
    if query.first() is not None:
        return True
    return db.query(User.id).filter(User.email == email).first() is not None


def compute_student_statistics(student_id: str, db: Session) -> StudentStatistics:
    marks = [row.marks for row in db.query(Result.marks).filter(Result.student_id == student_id).all()]
    average_marks = grading.average(marks)
    return StudentStatistics(
        total_subjects=len(marks),
        average_marks=average_marks,
        overall_grade=grading.overall_grade(marks),
        gpa=grading.gpa_for_average(average_marks),
    )


@router.get('')
def list_students(
    limit: int = Query(default=DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(default=0, ge=0),
    class_name: str | None = Query(default=None, alias='class'),
    search: str | None = Query(default=None),
    current_user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        query = db.query(Student).filter(Student.is_active.is_(True))
        if class_name:
            query = query.filter(Student.class_name == class_name)
        if search:
            pattern = f'%{search.strip()}%'
            query = query.filter(
                or_(
                    Student.name.ilike(pattern),
                    Student.roll_number.ilike(pattern),
                    Student.email.ilike(pattern),
                )
            )
        students = query.order_by(Student.roll_number.asc()).offset(offset).limit(limit).all()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching students')
        raise database_unavailable() from exc

    return success(
        'Students retrieved successfully',
        [StudentSchema.model_validate(student) for student in students],
    )


@router.get('/dropdown')
def list_students_for_dropdown(
    current_user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        students = db.query(Student).filter(Student.is_active.is_(True)).order_by(Student.roll_number.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return success(
        'Students for dropdown retrieved successfully',
        [StudentOption.model_validate(student) for student in students],
    )


@router.get('/results/{student_id}')
def list_student_results(
    student_id: str,
    current_user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_self_or_admin(current_user, student_id)

    try:
        get_student_or_404(student_id, db)
        results = db.query(Result).options(
            joinedload(Result.student),
            joinedload(Result.course),
        ).filter(
            Result.student_id == student_id,
        ).order_by(Result.exam_date.desc(), Result.created_at.desc()).all()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching results for student %s', student_id)
        raise database_unavailable() from exc

    return success('Student results retrieved successfully', [serialize_result(result) for result in results])


@router.get('/statistics/{student_id}')
def get_student_statistics(
    student_id: str,
    current_user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_self_or_admin(current_user, student_id)

    try:
        get_student_or_404(student_id, db)
        statistics = compute_student_statistics(student_id, db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return success('Student statistics retrieved successfully', statistics)


@router.get('/{student_id}')
def get_student(
    student_id: str,
    current_user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_self_or_admin(current_user, student_id)

    try:
        student = get_student_or_404(student_id, db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return success('Student retrieved successfully', StudentSchema.model_validate(student))


@router.post('', status_code=status.HTTP_201_CREATED)
def create_student(
    data: StudentCreate,
    current_user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        if roll_number_exists(data.roll_number, db):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Roll number already exists')

        if email_exists(data.email, db):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Email already exists')

        student = Student(
            roll_number=data.roll_number,
            name=data.name,
            email=data.email,
            hashed_password=hash_password(data.password),
            class_name=data.class_name,
            date_of_birth=data.date_of_birth,
            phone=data.phone,
            address=data.address,
            guardian_name=data.guardian_name,
            guardian_phone=data.guardian_phone,
            enrollment_date=data.enrollment_date,
        )
        db.add(student)
        db.commit()
        db.refresh(student)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error creating student %s', data.roll_number)
        raise database_unavailable() from exc

    logger.info('Created student %s (%s)', student.roll_number, student.id)
    return success('Student created successfully', StudentSchema.model_validate(student))


@router.put('/{student_id}')
def update_student(
    student_id: str,
    data: StudentUpdate,
    current_user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ensure_self_or_admin(current_user, student_id)

    try:
        student = get_student_or_404(student_id, db)

        if email_exists(data.email, db, exclude_id=student_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Email already exists')

        student.name = data.name
        student.email = data.email
        student.class_name = data.class_name
        student.date_of_birth = data.date_of_birth
        student.phone = data.phone
        student.address = data.address
        student.guardian_name = data.guardian_name
        student.guardian_phone = data.guardian_phone
        student.enrollment_date = data.enrollment_date
        db.commit()
        db.refresh(student)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error updating student %s', student_id)
        raise database_unavailable() from exc

    return success('Student updated successfully', StudentSchema.model_validate(student))


@router.delete('/{student_id}')
def delete_student(
    student_id: str,
    current_user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        student = get_student_or_404(student_id, db)
        student.is_active = False
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error deleting student %s', student_id)
        raise database_unavailable() from exc

    return success('Student deleted successfully')
