import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from srms.auth.dependencies import get_current_user, require_admin
from srms.core import grading
from srms.core.responses import database_unavailable, success
from srms.database import get_db
from srms.models.course import Course
from srms.models.result import Result
from srms.models.student import Student
from srms.schemas import (
    Course as CourseSchema,
    CourseCreate,
    CourseOption,
    CourseStatistics,
    CourseUpdate,
    TokenUser,
)

router = APIRouter(tags=['courses'])

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 500


def get_active_course(course_id: str, db: Session) -> Course | None:
    return db.query(Course).filter(Course.id == course_id, Course.is_active.is_(True)).first()


def get_course_or_404(course_id: str, db: Session) -> Course:
    course = get_active_course(course_id, db)
    if course is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Course not found')
    return course


def course_code_exists(course_code: str, db: Session, exclude_id: str | None = None) -> bool:
    query = db.query(Course.id).filter(Course.course_code == course_code)
    if exclude_id:
        query = query.filter(Course.id != exclude_id)
    return query.first() is not None


def compute_course_statistics(course_id: str, db: Session) -> CourseStatistics:
    rows = db.query(Result.marks).join(Student, Result.student_id == Student.id).filter(
        Result.course_id == course_id,
        Student.is_active.is_(True),
    ).all()
    marks = [row.marks for row in rows]
    passed = sum(1 for value in marks if grading.is_pass(value))
    return CourseStatistics(
        total_students=len(marks),
        average_marks=grading.average(marks),
        highest_marks=max(marks) if marks else 0,
        lowest_marks=min(marks) if marks else 0,
        passed_students=passed,
        failed_students=len(marks) - passed,
    )


@router.get('')
def list_courses(
    limit: int = Query(default=DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(default=0, ge=0),
    search: str | None = Query(default=None),
    current_user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        query = db.query(Course).filter(Course.is_active.is_(True))
        if search:
            pattern = f'%{search.strip()}%'
            query = query.filter(or_(Course.course_name.ilike(pattern), Course.course_code.ilike(pattern)))
        courses = query.order_by(Course.course_code.asc()).offset(offset).limit(limit).all()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching courses')
        raise database_unavailable() from exc

    return success('Courses retrieved successfully', [CourseSchema.model_validate(course) for course in courses])


@router.get('/dropdown')
def list_courses_for_dropdown(
    current_user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        courses = db.query(Course).filter(Course.is_active.is_(True)).order_by(Course.course_code.asc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return success(
        'Courses for dropdown retrieved successfully',
        [CourseOption.model_validate(course) for course in courses],
    )


@router.get('/statistics/{course_id}')
def get_course_statistics(
    course_id: str,
    current_user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        statistics = compute_course_statistics(course_id, db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return success('Course statistics retrieved successfully', statistics)


@router.get('/{course_id}')
def get_course(
    course_id: str,
    current_user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        course = get_course_or_404(course_id, db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return success('Course retrieved successfully', CourseSchema.model_validate(course))


@router.post('', status_code=status.HTTP_201_CREATED)
def create_course(
    data: CourseCreate,
    current_user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        if course_code_exists(data.course_code, db):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Course code already exists')

        course = Course(
            course_name=data.course_name,
            course_code=data.course_code,
            description=data.description,
            credits=data.credits,
            semester=data.semester,
        )
        db.add(course)
        db.commit()
        db.refresh(course)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error creating course %s', data.course_code)
        raise database_unavailable() from exc

    logger.info('Created course %s (%s)', course.course_code, course.id)
    return success('Course created successfully', CourseSchema.model_validate(course))


@router.put('/{course_id}')
def update_course(
    course_id: str,
    data: CourseUpdate,
    current_user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        course = get_course_or_404(course_id, db)

        if course_code_exists(data.course_code, db, exclude_id=course_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Course code already exists')

        course.course_name = data.course_name
        course.course_code = data.course_code
        course.description = data.description
        course.credits = data.credits
        course.semester = data.semester
        db.commit()
        db.refresh(course)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error updating course %s', course_id)
        raise database_unavailable() from exc

    return success('Course updated successfully', CourseSchema.model_validate(course))


@router.delete('/{course_id}')
def delete_course(
    course_id: str,
    current_user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        course = get_course_or_404(course_id, db)

        if db.query(Result.id).filter(Result.course_id == course_id).first() is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail='Cannot delete course with existing results',
            )

        course.is_active = False
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error deleting course %s', course_id)
        raise database_unavailable() from exc

    return success('Course deleted successfully')
