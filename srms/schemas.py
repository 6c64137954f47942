"""Request and response shapes shared by the API routes and the client."""

import math
import re
from datetime import date, datetime
from typing import Any, Generic, Literal, TypeVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel
from pydantic.networks import validate_email

T = TypeVar("T")

Role = Literal["admin", "student"]
ROLES = ("admin", "student")

COURSE_CODE_PATTERN = re.compile(r"^[A-Z]{2,4}\d{3}$")
MIN_PASSWORD_LENGTH = 6


def _class_field():
    return Field(
        validation_alias=AliasChoices("class", "class_name"),
        serialization_alias="class",
    )


def _required_text(value: Any, info: ValidationInfo) -> str:
    if value is None or not str(value).strip():
        field = "class" if info.field_name == "class_name" else info.field_name
        raise ValueError(f"Field '{field}' is required")
    return str(value).strip()


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    normalized = str(value).strip()
    return normalized or None


def _normalize_email(value: Any) -> str:
    if value is None or not str(value).strip():
        raise ValueError("Field 'email' is required")
    try:
        _, email = validate_email(str(value).strip())
    except ValueError as exc:
        raise ValueError("Invalid email format") from exc
    return email.lower()


def _strict_date(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return datetime.strptime(value.strip(), "%Y-%m-%d").date()
        except ValueError as exc:
            raise ValueError("Invalid exam date format. Use YYYY-MM-DD") from exc
    return value


class ApiResponse(BaseModel, Generic[T]):
    """Envelope every API response is normalized into."""
    success: bool
    message: str = ""
    data: T | None = None
    error: str | None = None
    errors: Any = None


# Auth

class User(BaseModel):
    id: str
    email: str
    name: str
    role: Role

    class Config:
        from_attributes = True


class LoginRequest(BaseModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def validate_email_address(cls, value: Any) -> str:
        return _normalize_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, value: Any, info: ValidationInfo) -> str:
        return _required_text(value, info)


class LoginData(BaseModel):
    user: User
    token: str


class TokenUser(BaseModel):
    """Identity carried by a verified bearer token."""
    id: str
    email: str
    role: Role
    name: str | None = None


class VerifyData(BaseModel):
    user: TokenUser


class RegisterRequest(BaseModel):
    roll_number: str
    name: str
    email: str
    password: str
    class_name: str = _class_field()
    phone: str | None = None

    @field_validator("roll_number", "name", "class_name", mode="before")
    @classmethod
    def validate_required(cls, value: Any, info: ValidationInfo) -> str:
        return _required_text(value, info)

    @field_validator("email", mode="before")
    @classmethod
    def validate_email_address(cls, value: Any) -> str:
        return _normalize_email(value)

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, value: Any, info: ValidationInfo) -> str:
        password = _required_text(value, info)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return password

    @field_validator("phone", mode="before")
    @classmethod
    def validate_phone(cls, value: Any) -> str | None:
        return _optional_text(value)


class RegisterData(BaseModel):
    message: str
    status: str


# Students

class StudentFields(BaseModel):
    name: str
    email: str
    class_name: str = _class_field()
    date_of_birth: date | None = None
    phone: str | None = None
    address: str | None = None
    guardian_name: str | None = None
    guardian_phone: str | None = None
    enrollment_date: date | None = None

    class Config:
        populate_by_name = True

    @field_validator("name", "class_name", mode="before")
    @classmethod
    def validate_required(cls, value: Any, info: ValidationInfo) -> str:
        return _required_text(value, info)

    @field_validator("email", mode="before")
    @classmethod
    def validate_email_address(cls, value: Any) -> str:
        return _normalize_email(value)

    @field_validator("phone", "address", "guardian_name", "guardian_phone", mode="before")
    @classmethod
    def validate_optional(cls, value: Any) -> str | None:
        return _optional_text(value)


class StudentCreate(StudentFields):
    roll_number: str
    password: str

    @field_validator("roll_number", mode="before")
    @classmethod
    def validate_roll_number(cls, value: Any, info: ValidationInfo) -> str:
        return _required_text(value, info)

    @field_validator("password", mode="before")
    @classmethod
    def validate_password(cls, value: Any, info: ValidationInfo) -> str:
        password = _required_text(value, info)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return password


class StudentUpdate(StudentFields):
    pass


class Student(BaseModel):
    id: str
    roll_number: str
    name: str
    email: str
    class_name: str = _class_field()
    date_of_birth: date | None = None
    phone: str | None = None
    address: str | None = None
    guardian_name: str | None = None
    guardian_phone: str | None = None
    enrollment_date: date | None = None
    is_active: bool = True
    created_at: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
        populate_by_name = True


class StudentOption(BaseModel):
    id: str
    name: str
    roll_number: str

    class Config:
        from_attributes = True


class StudentStatistics(BaseModel):
    total_subjects: int
    average_marks: float
    overall_grade: str
    gpa: float


# Courses

class CourseCreate(BaseModel):
    course_name: str
    course_code: str
    description: str | None = None
    credits: int
    semester: str

    @field_validator("course_name", "semester", mode="before")
    @classmethod
    def validate_required(cls, value: Any, info: ValidationInfo) -> str:
        return _required_text(value, info)

    @field_validator("course_code", mode="before")
    @classmethod
    def validate_course_code(cls, value: Any, info: ValidationInfo) -> str:
        code = _required_text(value, info).upper()
        if not COURSE_CODE_PATTERN.match(code):
            raise ValueError("Course code must be in format like MATH101, CS201")
        return code

    @field_validator("credits", mode="before")
    @classmethod
    def validate_credits(cls, value: Any) -> int:
        try:
            credits = int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError("Credits must be between 1 and 10") from exc
        if credits < 1 or credits > 10:
            raise ValueError("Credits must be between 1 and 10")
        return credits

    @field_validator("description", mode="before")
    @classmethod
    def validate_description(cls, value: Any) -> str | None:
        return _optional_text(value)


class CourseUpdate(CourseCreate):
    pass


class Course(BaseModel):
    id: str
    course_name: str
    course_code: str
    description: str | None = None
    credits: int
    semester: str
    is_active: bool = True
    created_at: datetime
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class CourseOption(BaseModel):
    id: str
    course_name: str
    course_code: str

    class Config:
        from_attributes = True


class CourseStatistics(BaseModel):
    total_students: int
    average_marks: float
    highest_marks: float
    lowest_marks: float
    passed_students: int
    failed_students: int


# Results

class ResultCreate(BaseModel):
    student_id: str
    course_id: str
    marks: float
    exam_date: date
    exam_type: str
    remarks: str | None = None

    @field_validator("student_id", "course_id", "exam_type", mode="before")
    @classmethod
    def validate_required(cls, value: Any, info: ValidationInfo) -> str:
        return _required_text(value, info)

    @field_validator("marks", mode="before")
    @classmethod
    def validate_marks(cls, value: Any) -> float:
        if value is None or isinstance(value, bool):
            raise ValueError("Marks must be between 0 and 100")
        try:
            marks = float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError("Marks must be between 0 and 100") from exc
        if not math.isfinite(marks) or marks < 0 or marks > 100:
            raise ValueError("Marks must be between 0 and 100")
        return marks

    @field_validator("exam_date", mode="before")
    @classmethod
    def validate_exam_date(cls, value: Any) -> Any:
        return _strict_date(value)

    @field_validator("remarks", mode="before")
    @classmethod
    def validate_remarks(cls, value: Any) -> str | None:
        return _optional_text(value)


class ResultUpdate(ResultCreate):
    pass


class Result(BaseModel):
    id: str
    student_id: str
    course_id: str
    marks: float
    grade: str
    percentage: float
    exam_date: date
    exam_type: str
    remarks: str | None = None
    created_at: datetime
    updated_at: datetime | None = None
    student_name: str | None = None
    roll_number: str | None = None
    course_name: str | None = None
    course_code: str | None = None
    credits: int | None = None


# Dashboard

class TopPerformer(BaseModel):
    name: str
    roll_number: str
    average_marks: float
    grade: str


class GradeBucket(BaseModel):
    grade: str
    count: int
    percentage: float


class DashboardStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_students: int
    total_courses: int
    total_results: int
    average_grade: str
    pass_rate: float
    top_performers: list[TopPerformer]
    grade_distribution: list[GradeBucket]
    recent_results: list[Result]
