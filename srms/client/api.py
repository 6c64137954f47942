"""JSON HTTP client for the result management API.

Every call goes through :meth:`ApiClient.request`, which attaches the bearer
token, raises :class:`ApiError` for transport failures and non-2xx answers,
and normalizes successful bodies into the ``{success, message, data}``
envelope. The resource helpers (``client.students``, ``client.results`` ...)
only build paths and query strings and validate ``data`` into typed models.
"""
import logging
from typing import Any

import httpx
from pydantic import BaseModel

from srms.core import config
from srms.schemas import (
    ApiResponse,
    Course,
    CourseOption,
    CourseStatistics,
    DashboardStats,
    LoginData,
    RegisterData,
    Result,
    Student,
    StudentOption,
    StudentStatistics,
    VerifyData,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 50
GENERIC_ERROR_MESSAGE = "Network error"


class ApiError(Exception):
    def __init__(self, message: str, status_code: int | None = None, payload: Any = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload


def _payload(data: BaseModel | dict[str, Any]) -> dict[str, Any]:
    if isinstance(data, BaseModel):
        return data.model_dump(mode="json", by_alias=True, exclude_none=True)
    return dict(data)


def _query(**params: Any) -> dict[str, Any]:
    return {key: value for key, value in params.items() if value not in (None, "")}


def _mask(token: str | None) -> str | None:
    if not token:
        return None
    return token[:10] + "..."


class ApiClient:
    def __init__(
        self,
        base_url: str | None = None,
        http_client: httpx.Client | None = None,
        token: str | None = None,
    ):
        self.base_url = (base_url or config.API_URL).rstrip("/")
        self._http = http_client or httpx.Client()
        self.token = token

        self.auth = AuthApi(self)
        self.students = StudentsApi(self)
        self.courses = CoursesApi(self)
        self.results = ResultsApi(self)
        self.dashboard = DashboardApi(self)

    def set_token(self, token: str) -> None:
        self.token = token

    def clear_token(self) -> None:
        self.token = None

    def close(self) -> None:
        self._http.close()

    def build_headers(self, headers: dict[str, str] | None = None) -> dict[str, str]:
        merged = {"Content-Type": "application/json"}
        if self.token:
            merged["Authorization"] = f"Bearer {self.token}"
        merged.update(headers or {})
        return merged

    def request(
        self,
        endpoint: str,
        method: str = "GET",
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> ApiResponse:
        url = f"{self.base_url}{endpoint}"
        logger.debug("API request %s %s params=%s token=%s", method, url, params, _mask(self.token))

        try:
            response = self._http.request(method, url, json=json, params=params, headers=self.build_headers(headers))
        except httpx.HTTPError as exc:
            logger.debug("API request to %s failed: %s", url, exc)
            raise ApiError(f"{GENERIC_ERROR_MESSAGE}: {exc}") from exc

        logger.debug("API response %s for %s %s", response.status_code, method, url)

        if not response.is_success:
            try:
                error_data = response.json()
            except ValueError:
                error_data = {"message": GENERIC_ERROR_MESSAGE}
            message = error_data.get("message") if isinstance(error_data, dict) else None
            raise ApiError(
                message or f"HTTP error! status: {response.status_code}",
                status_code=response.status_code,
                payload=error_data,
            )

        if not response.content:
            body = None
        else:
            try:
                body = response.json()
            except ValueError as exc:
                raise ApiError("Invalid JSON in response", status_code=response.status_code) from exc

        if isinstance(body, dict) and "success" in body:
            return ApiResponse.model_validate(body)
        return ApiResponse(success=True, message="Request successful", data=body)

    def request_as(self, model: Any, endpoint: str, method: str = "GET", **kwargs: Any) -> ApiResponse:
        """Issue a request and validate the envelope's ``data`` as ``model``."""
        response = self.request(endpoint, method, **kwargs)
        if response.data is None:
            return response
        return ApiResponse[model].model_validate(response.model_dump())


class _Resource:
    def __init__(self, client: ApiClient):
        self.client = client


class AuthApi(_Resource):
    def login(self, email: str, password: str) -> ApiResponse:
        return self.client.request_as(
            LoginData, "/auth/login", "POST", json={"email": email, "password": password}
        )

    def register(self, user_data: BaseModel | dict[str, Any]) -> ApiResponse:
        return self.client.request_as(RegisterData, "/auth/register", "POST", json=_payload(user_data))

    def verify(self) -> ApiResponse:
        return self.client.request_as(VerifyData, "/auth/verify")

    def logout(self) -> ApiResponse:
        return self.client.request("/auth/logout", "POST")


class StudentsApi(_Resource):
    def get_all(
        self,
        page: int | None = None,
        limit: int | None = None,
        class_name: str | None = None,
        search: str | None = None,
    ) -> ApiResponse:
        params = _query(limit=limit, search=search, **{"class": class_name})
        if page:
            params["offset"] = (page - 1) * (limit or DEFAULT_PAGE_LIMIT)
        return self.client.request_as(list[Student], "/students", params=params)

    def get_by_id(self, student_id: str) -> ApiResponse:
        return self.client.request_as(Student, f"/students/{student_id}")

    def create(self, student: BaseModel | dict[str, Any]) -> ApiResponse:
        return self.client.request_as(Student, "/students", "POST", json=_payload(student))

    def update(self, student_id: str, student: BaseModel | dict[str, Any]) -> ApiResponse:
        return self.client.request_as(Student, f"/students/{student_id}", "PUT", json=_payload(student))

    def delete(self, student_id: str) -> ApiResponse:
        return self.client.request(f"/students/{student_id}", "DELETE")

    def get_results(self, student_id: str) -> ApiResponse:
        return self.client.request_as(list[Result], f"/students/results/{student_id}")

    def get_statistics(self, student_id: str) -> ApiResponse:
        return self.client.request_as(StudentStatistics, f"/students/statistics/{student_id}")

    def get_for_dropdown(self) -> ApiResponse:
        return self.client.request_as(list[StudentOption], "/students/dropdown")


class CoursesApi(_Resource):
    def get_all(self, search: str | None = None) -> ApiResponse:
        return self.client.request_as(list[Course], "/courses", params=_query(search=search))

    def get_by_id(self, course_id: str) -> ApiResponse:
        return self.client.request_as(Course, f"/courses/{course_id}")

    def create(self, course: BaseModel | dict[str, Any]) -> ApiResponse:
        return self.client.request_as(Course, "/courses", "POST", json=_payload(course))

    def update(self, course_id: str, course: BaseModel | dict[str, Any]) -> ApiResponse:
        return self.client.request_as(Course, f"/courses/{course_id}", "PUT", json=_payload(course))

    def delete(self, course_id: str) -> ApiResponse:
        return self.client.request(f"/courses/{course_id}", "DELETE")

    def get_statistics(self, course_id: str) -> ApiResponse:
        return self.client.request_as(CourseStatistics, f"/courses/statistics/{course_id}")

    def get_for_dropdown(self) -> ApiResponse:
        return self.client.request_as(list[CourseOption], "/courses/dropdown")


class ResultsApi(_Resource):
    def get_all(self, student_id: str | None = None, course_id: str | None = None) -> ApiResponse:
        params = _query(student_id=student_id, course_id=course_id)
        return self.client.request_as(list[Result], "/results", params=params)

    def get_by_id(self, result_id: str) -> ApiResponse:
        return self.client.request_as(Result, f"/results/{result_id}")

    def create(self, result: BaseModel | dict[str, Any]) -> ApiResponse:
        return self.client.request_as(Result, "/results", "POST", json=_payload(result))

    def update(self, result_id: str, result: BaseModel | dict[str, Any]) -> ApiResponse:
        return self.client.request_as(Result, f"/results/{result_id}", "PUT", json=_payload(result))

    def delete(self, result_id: str) -> ApiResponse:
        return self.client.request(f"/results/{result_id}", "DELETE")

    def get_student_results(self) -> ApiResponse:
        return self.client.request_as(list[Result], "/results/student")


class DashboardApi(_Resource):
    def get_stats(self) -> ApiResponse:
        return self.client.request_as(DashboardStats, "/results/dashboard")

    def get_student_stats(self, student_id: str) -> ApiResponse:
        return self.client.request_as(StudentStatistics, f"/students/statistics/{student_id}")
