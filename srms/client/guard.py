from dataclasses import dataclass
from typing import Callable, TypeVar

from srms.client.session import SessionStore
from srms.schemas import ROLES, User

T = TypeVar("T")

LOGIN_ROUTE = "/login"


@dataclass(frozen=True)
class GuardState:
    user: User | None
    is_authenticated: bool
    has_access: bool
    is_admin: bool
    is_student: bool


@dataclass(frozen=True)
class Redirect:
    location: str


def _check_role(required_role: str | None) -> None:
    if required_role is not None and required_role not in ROLES:
        raise ValueError(f"Unknown role: {required_role}")


def auth_guard(session: SessionStore, required_role: str | None = None) -> GuardState:
    """Derive access for the current session. Nothing is cached."""
    _check_role(required_role)
    user = session.user
    is_authenticated = session.is_authenticated()
    has_access = is_authenticated and (required_role is None or (user is not None and user.role == required_role))
    return GuardState(
        user=user,
        is_authenticated=is_authenticated,
        has_access=has_access,
        is_admin=user is not None and user.role == "admin",
        is_student=user is not None and user.role == "student",
    )


class RouteGuard:
    def __init__(self, session: SessionStore, required_role: str | None = None, login_route: str = LOGIN_ROUTE):
        _check_role(required_role)
        self.session = session
        self.required_role = required_role
        self.login_route = login_route

    @property
    def state(self) -> GuardState:
        return auth_guard(self.session, self.required_role)

    @property
    def has_access(self) -> bool:
        return self.state.has_access

    def resolve(self, render: Callable[[], T]) -> T | Redirect:
        if not self.has_access:
            return Redirect(location=self.login_route)
        return render()
