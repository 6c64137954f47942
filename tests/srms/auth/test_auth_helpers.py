import jwt
import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from srms.auth import jwt_handler
from srms.auth.dependencies import ensure_self_or_admin, get_current_user, require_role
from srms.auth.passwords import hash_password, verify_password
from srms.core import config
from srms.schemas import TokenUser


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme='Bearer', credentials=token)


def test_hash_password_verifies_only_the_original_password() -> None:
    hashed = hash_password('secret123')

    assert hashed != 'secret123'
    assert verify_password('secret123', hashed)
    assert not verify_password('secret124', hashed)


def test_verify_password_rejects_missing_or_malformed_hash() -> None:
    assert not verify_password('secret123', None)
    assert not verify_password('secret123', 'not-a-bcrypt-hash')


def test_access_token_round_trips_identity_claims() -> None:
    token = jwt_handler.create_access_token(subject='s-1', role='student', email='a@student.edu', name='A')

    payload = jwt_handler.decode_access_token(token)

    assert payload['sub'] == 's-1'
    assert payload['role'] == 'student'
    assert payload['email'] == 'a@student.edu'


def test_get_current_user_builds_token_user() -> None:
    token = jwt_handler.create_access_token(subject='s-1', role='student', email='a@student.edu', name='A')

    current_user = get_current_user(_credentials(token))

    assert current_user == TokenUser(id='s-1', email='a@student.edu', role='student', name='A')


def test_get_current_user_requires_token() -> None:
    with pytest.raises(HTTPException) as exception_info:
        get_current_user(None)

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'Authentication token required'


def test_get_current_user_rejects_tampered_token() -> None:
    token = jwt.encode({'sub': 's-1', 'role': 'admin'}, 'some-other-secret', algorithm=config.JWT_ALGORITHM)

    with pytest.raises(HTTPException) as exception_info:
        get_current_user(_credentials(token))

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'Invalid or expired token'


def test_get_current_user_rejects_expired_token() -> None:
    token = jwt_handler.create_access_token(subject='s-1', role='student', email='a@student.edu', expires_minutes=-1)

    with pytest.raises(HTTPException) as exception_info:
        get_current_user(_credentials(token))

    assert exception_info.value.detail == 'Invalid or expired token'


def test_get_current_user_rejects_unknown_role() -> None:
    token = jwt.encode({'sub': 's-1', 'role': 'teacher'}, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)

    with pytest.raises(HTTPException) as exception_info:
        get_current_user(_credentials(token))

    assert exception_info.value.detail == 'Invalid token subject'


def test_require_role_rejects_other_roles() -> None:
    require_admin = require_role('admin')
    student = TokenUser(id='s-1', email='a@student.edu', role='student')

    with pytest.raises(HTTPException) as exception_info:
        require_admin(student)

    assert exception_info.value.status_code == 403
    assert exception_info.value.detail == 'Insufficient permissions'


def test_require_role_rejects_unknown_role_name() -> None:
    with pytest.raises(ValueError):
        require_role('teacher')


def test_ensure_self_or_admin() -> None:
    admin = TokenUser(id='admin-1', email='admin@school.edu', role='admin')
    student = TokenUser(id='s-1', email='a@student.edu', role='student')

    ensure_self_or_admin(admin, 's-2')
    ensure_self_or_admin(student, 's-1')
    with pytest.raises(HTTPException) as exception_info:
        ensure_self_or_admin(student, 's-2')

    assert exception_info.value.status_code == 403
