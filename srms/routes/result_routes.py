import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from srms.auth.dependencies import ensure_self_or_admin, get_current_user, require_admin, require_student
from srms.core import grading
from srms.core.responses import database_unavailable, success
from srms.database import get_db
from srms.models.course import Course
from srms.models.result import Result
from srms.models.student import Student
from srms.routes.course_routes import get_active_course
from srms.schemas import (
    DashboardStats,
    GradeBucket,
    Result as ResultSchema,
    ResultCreate,
    ResultUpdate,
    TokenUser,
    TopPerformer,
)

router = APIRouter(tags=['results'])

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 50
MAX_PAGE_LIMIT = 500
TOP_PERFORMERS_LIMIT = 10
RECENT_RESULTS_LIMIT = 5
GRADE_ORDER = [grade for _, grade in grading.GRADE_SCALE] + [grading.FAILING_GRADE]


def serialize_result(result: Result) -> ResultSchema:
    student = result.student
    course = result.course
    return ResultSchema(
        id=result.id,
        student_id=result.student_id,
        course_id=result.course_id,
        marks=result.marks,
        grade=result.grade,
        percentage=result.percentage,
        exam_date=result.exam_date,
        exam_type=result.exam_type,
        remarks=result.remarks,
        created_at=result.created_at,
        updated_at=result.updated_at,
        student_name=student.name if student else None,
        roll_number=student.roll_number if student else None,
        course_name=course.course_name if course else None,
        course_code=course.course_code if course else None,
        credits=course.credits if course else None,
    )


def with_active_student(query):
    return query.join(Student, Result.student_id == Student.id).filter(Student.is_active.is_(True))


def results_query(db: Session):
    return with_active_student(db.query(Result)).options(joinedload(Result.student), joinedload(Result.course))


def get_result_or_404(result_id: str, db: Session) -> Result:
    result = results_query(db).filter(Result.id == result_id).first()
    if result is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Result not found')
    return result


def result_exists(data: ResultCreate, db: Session, exclude_id: str | None = None) -> bool:
    query = db.query(Result.id).filter(
        Result.student_id == data.student_id,
        Result.course_id == data.course_id,
        Result.exam_type == data.exam_type,
        Result.exam_date == data.exam_date,
    )
    if exclude_id:
        query = query.filter(Result.id != exclude_id)
    return query.first() is not None


def validate_result_references(data: ResultCreate, db: Session, exclude_id: str | None = None) -> None:
    student = db.query(Student.id).filter(Student.id == data.student_id, Student.is_active.is_(True)).first()
    if student is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Student not found')

    if get_active_course(data.course_id, db) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Course not found')

    if result_exists(data, db, exclude_id=exclude_id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Result already exists for this student, course, exam type, and date',
        )


def apply_marks(result: Result, marks: float) -> None:
    result.marks = marks
    result.percentage = grading.percentage_for_marks(marks)
    result.grade = grading.grade_for_marks(marks)


def compute_dashboard_stats(db: Session) -> DashboardStats:
    total_students = db.query(func.count(Student.id)).filter(Student.is_active.is_(True)).scalar() or 0
    total_courses = db.query(func.count(Course.id)).filter(Course.is_active.is_(True)).scalar() or 0
    marks = [row.marks for row in with_active_student(db.query(Result.marks)).all()]

    grade_counts = dict(
        with_active_student(db.query(Result.grade, func.count(Result.id))).group_by(Result.grade).all()
    )
    grade_distribution = [
        GradeBucket(
            grade=grade,
            count=grade_counts[grade],
            percentage=round(grade_counts[grade] / len(marks) * 100, 2),
        )
        for grade in GRADE_ORDER
        if grade_counts.get(grade)
    ]

    average_marks = func.avg(Result.marks)
    top_rows = db.query(
        Student.name,
        Student.roll_number,
        average_marks.label('average_marks'),
    ).join(
        Result, Result.student_id == Student.id,
    ).filter(
        Student.is_active.is_(True),
    ).group_by(
        Student.id, Student.name, Student.roll_number,
    ).order_by(average_marks.desc(), Student.roll_number.asc()).limit(TOP_PERFORMERS_LIMIT).all()
    top_performers = [
        TopPerformer(
            name=row.name,
            roll_number=row.roll_number,
            average_marks=round(row.average_marks, 2),
            grade=grading.grade_for_marks(row.average_marks),
        )
        for row in top_rows
    ]

    recent_results = results_query(db).order_by(
        Result.created_at.desc(),
    ).limit(RECENT_RESULTS_LIMIT).all()

    return DashboardStats(
        total_students=total_students,
        total_courses=total_courses,
        total_results=len(marks),
        average_grade=grading.overall_grade(marks),
        pass_rate=grading.pass_rate(marks),
        top_performers=top_performers,
        grade_distribution=grade_distribution,
        recent_results=[serialize_result(result) for result in recent_results],
    )


@router.get('/dashboard')
def get_dashboard_stats(
    current_user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        stats = compute_dashboard_stats(db)
    except SQLAlchemyError as exc:
        logger.exception('Error computing dashboard statistics')
        raise database_unavailable() from exc

    return success('Dashboard statistics retrieved successfully', stats)


@router.get('/student')
def list_my_results(
    current_user: TokenUser = Depends(require_student),
    db: Session = Depends(get_db),
):
    try:
        results = results_query(db).filter(
            Result.student_id == current_user.id,
        ).order_by(Result.exam_date.desc(), Result.created_at.desc()).all()
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return success('Student results retrieved successfully', [serialize_result(result) for result in results])


@router.get('')
def list_results(
    limit: int = Query(default=DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    offset: int = Query(default=0, ge=0),
    student_id: str | None = Query(default=None),
    course_id: str | None = Query(default=None),
    current_user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        query = results_query(db)
        if student_id:
            query = query.filter(Result.student_id == student_id)
        if course_id:
            query = query.filter(Result.course_id == course_id)
        results = query.order_by(
            Result.exam_date.desc(),
            Result.created_at.desc(),
        ).offset(offset).limit(limit).all()
    except SQLAlchemyError as exc:
        logger.exception('Error fetching results')
        raise database_unavailable() from exc

    return success('Results retrieved successfully', [serialize_result(result) for result in results])


@router.get('/{result_id}')
def get_result(
    result_id: str,
    current_user: TokenUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        result = get_result_or_404(result_id, db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    ensure_self_or_admin(current_user, result.student_id)
    return success('Result retrieved successfully', serialize_result(result))


@router.post('', status_code=status.HTTP_201_CREATED)
def create_result(
    data: ResultCreate,
    current_user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        validate_result_references(data, db)

        result = Result(
            student_id=data.student_id,
            course_id=data.course_id,
            exam_date=data.exam_date,
            exam_type=data.exam_type,
            remarks=data.remarks,
        )
        apply_marks(result, data.marks)
        db.add(result)
        db.commit()
        result = get_result_or_404(result.id, db)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error creating result for student %s', data.student_id)
        raise database_unavailable() from exc

    logger.info('Recorded %s for student %s in course %s', result.grade, result.student_id, result.course_id)
    return success('Result created successfully', serialize_result(result))


@router.put('/{result_id}')
def update_result(
    result_id: str,
    data: ResultUpdate,
    current_user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        result = get_result_or_404(result_id, db)
        validate_result_references(data, db, exclude_id=result_id)

        result.student_id = data.student_id
        result.course_id = data.course_id
        result.exam_date = data.exam_date
        result.exam_type = data.exam_type
        result.remarks = data.remarks
        apply_marks(result, data.marks)
        db.commit()
        db.expire_all()
        result = get_result_or_404(result_id, db)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error updating result %s', result_id)
        raise database_unavailable() from exc

    return success('Result updated successfully', serialize_result(result))


@router.delete('/{result_id}')
def delete_result(
    result_id: str,
    current_user: TokenUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        result = get_result_or_404(result_id, db)
        db.delete(result)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception('Error deleting result %s', result_id)
        raise database_unavailable() from exc

    return success('Result deleted successfully')
