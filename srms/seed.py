"""Seed the demo accounts, courses and results shown on the login page.

Usage:
    python -m srms.seed

Every demo account uses the password ``password``. Existing rows (matched by
email, course code, or the student/course/exam combination) are left alone,
so the script can be run repeatedly.
"""
import logging
from datetime import date

from sqlalchemy.orm import Session

from srms.auth.passwords import hash_password
from srms.core import grading
from srms.database import SessionLocal, ensure_schema
from srms.models.course import Course
from srms.models.result import Result
from srms.models.student import Student
from srms.models.user import User

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password"

DEMO_ADMINS = [
    {"email": "admin@school.edu", "name": "System Administrator"},
]

DEMO_STUDENTS = [
    {
        "roll_number": "2024001",
        "name": "John Smith",
        "email": "john.smith@student.edu",
        "class_name": "10-A",
        "phone": "123-456-7890",
        "guardian_name": "Robert Smith",
        "guardian_phone": "123-456-7891",
    },
    {
        "roll_number": "2024002",
        "name": "Emily Johnson",
        "email": "emily.johnson@student.edu",
        "class_name": "10-A",
        "phone": "123-456-7892",
        "guardian_name": "Michael Johnson",
        "guardian_phone": "123-456-7893",
    },
    {
        "roll_number": "2024003",
        "name": "Sarah Wilson",
        "email": "sarah.wilson@student.edu",
        "class_name": "10-B",
        "phone": "123-456-7894",
        "guardian_name": "David Wilson",
        "guardian_phone": "123-456-7895",
    },
    {
        "roll_number": "2024004",
        "name": "Michael Brown",
        "email": "michael.brown@student.edu",
        "class_name": "10-B",
        "phone": "123-456-7896",
        "guardian_name": "Lisa Brown",
        "guardian_phone": "123-456-7897",
    },
]

DEMO_COURSES = [
    {"course_code": "MATH101", "course_name": "Mathematics", "description": "Basic Mathematics and Algebra", "credits": 4, "semester": "Fall 2024"},
    {"course_code": "PHY101", "course_name": "Physics", "description": "Introduction to Physics", "credits": 3, "semester": "Fall 2024"},
    {"course_code": "CHEM101", "course_name": "Chemistry", "description": "General Chemistry", "credits": 3, "semester": "Fall 2024"},
]

# (roll number, course code, marks, exam date)
DEMO_RESULTS = [
    ("2024001", "MATH101", 95, date(2024, 3, 10)),
    ("2024002", "MATH101", 88, date(2024, 3, 15)),
    ("2024003", "PHY101", 78, date(2024, 3, 20)),
    ("2024004", "CHEM101", 65, date(2024, 3, 25)),
]
DEMO_EXAM_TYPE = "Final Exam"


def seed_demo_data(db: Session) -> dict[str, int]:
    created = {"admins": 0, "students": 0, "courses": 0, "results": 0}
    hashed_password = hash_password(DEMO_PASSWORD)

    for admin in DEMO_ADMINS:
        if db.query(User).filter(User.email == admin["email"]).first() is None:
            db.add(User(email=admin["email"], name=admin["name"], hashed_password=hashed_password, role="admin"))
            created["admins"] += 1

    students_by_roll = {}
    for fields in DEMO_STUDENTS:
        student = db.query(Student).filter(Student.roll_number == fields["roll_number"]).first()
        if student is None:
            student = Student(hashed_password=hashed_password, enrollment_date=date(2024, 1, 15), **fields)
            db.add(student)
            created["students"] += 1
        students_by_roll[fields["roll_number"]] = student

    courses_by_code = {}
    for fields in DEMO_COURSES:
        course = db.query(Course).filter(Course.course_code == fields["course_code"]).first()
        if course is None:
            course = Course(**fields)
            db.add(course)
            created["courses"] += 1
        courses_by_code[fields["course_code"]] = course

    db.flush()

    for roll_number, course_code, marks, exam_date in DEMO_RESULTS:
        student = students_by_roll[roll_number]
        course = courses_by_code[course_code]
        existing = db.query(Result.id).filter(
            Result.student_id == student.id,
            Result.course_id == course.id,
            Result.exam_type == DEMO_EXAM_TYPE,
            Result.exam_date == exam_date,
        ).first()
        if existing is None:
            db.add(
                Result(
                    student_id=student.id,
                    course_id=course.id,
                    marks=marks,
                    percentage=grading.percentage_for_marks(marks),
                    grade=grading.grade_for_marks(marks),
                    exam_date=exam_date,
                    exam_type=DEMO_EXAM_TYPE,
                )
            )
            created["results"] += 1

    db.commit()
    logger.info("Seeded demo data: %s", created)
    return created


def main() -> None:
    logging.basicConfig(level=logging.INFO)
    ensure_schema()
    db = SessionLocal()
    try:
        created = seed_demo_data(db)
    finally:
        db.close()
    print("Created:", ", ".join(f"{count} {kind}" for kind, count in created.items()))
    print(f"Sign in as {DEMO_ADMINS[0]['email']} / {DEMO_PASSWORD}")


if __name__ == "__main__":
    main()
