import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from srms.auth import jwt_handler
from srms.auth.passwords import hash_password
from srms.models.student import Student
from srms.models.user import User
from srms.routes import auth_routes
from srms.schemas import LoginRequest, RegisterRequest, TokenUser


@pytest.fixture
def accounts(db):
    admin = User(email='admin@school.edu', name='Admin', hashed_password=hash_password('password'), role='admin')
    student = Student(
        roll_number='2024001',
        name='John Smith',
        email='john.smith@student.edu',
        hashed_password=hash_password('password'),
        class_name='10-A',
    )
    retired = Student(
        roll_number='2019001',
        name='Old Student',
        email='old@student.edu',
        hashed_password=hash_password('password'),
        class_name='12-C',
        is_active=False,
    )
    db.add_all([admin, student, retired])
    db.commit()
    return {'admin': admin, 'student': student}


def test_login_request_normalizes_email() -> None:
    request = LoginRequest(email=' ADMIN@School.EDU ', password='password')

    assert request.email == 'admin@school.edu'


@pytest.mark.parametrize(
    ('email', 'password', 'message'),
    [
        ('not-an-email', 'password', 'Invalid email format'),
        ('   ', 'password', "Field 'email' is required"),
        ('admin@school.edu', '  ', "Field 'password' is required"),
    ],
)
def test_login_request_rejects_bad_input(email: str, password: str, message: str) -> None:
    with pytest.raises(ValidationError) as exception_info:
        LoginRequest(email=email, password=password)

    assert message in str(exception_info.value)


def test_login_returns_admin_user_and_token(db, accounts) -> None:
    response = auth_routes.login(LoginRequest(email='admin@school.edu', password='password'), db=db)

    assert response['success'] is True
    assert response['message'] == 'Login successful'
    user = response['data']['user']
    assert user == {'id': accounts['admin'].id, 'email': 'admin@school.edu', 'name': 'Admin', 'role': 'admin'}

    payload = jwt_handler.decode_access_token(response['data']['token'])
    assert payload['sub'] == accounts['admin'].id
    assert payload['role'] == 'admin'


def test_login_falls_back_to_student_accounts(db, accounts) -> None:
    response = auth_routes.login(LoginRequest(email='john.smith@student.edu', password='password'), db=db)

    assert response['data']['user']['role'] == 'student'
    assert response['data']['user']['id'] == accounts['student'].id


@pytest.mark.parametrize(
    ('email', 'password'),
    [
        ('admin@school.edu', 'wrong-password'),
        ('nobody@school.edu', 'password'),
        ('old@student.edu', 'password'),
    ],
)
def test_login_rejects_invalid_credentials(db, accounts, email: str, password: str) -> None:
    with pytest.raises(HTTPException) as exception_info:
        auth_routes.login(LoginRequest(email=email, password=password), db=db)

    assert exception_info.value.status_code == 401
    assert exception_info.value.detail == 'Invalid credentials'


def test_register_creates_student_that_can_sign_in(db, accounts) -> None:
    request = RegisterRequest(
        roll_number='2024010',
        name='New Student',
        email='new@student.edu',
        password='secret123',
        **{'class': '9-A'},
    )

    response = auth_routes.register(request, db=db)

    assert response['data'] == {'message': 'Account created. You can now sign in.', 'status': 'registered'}
    login = auth_routes.login(LoginRequest(email='new@student.edu', password='secret123'), db=db)
    assert login['data']['user']['name'] == 'New Student'


@pytest.mark.parametrize(
    ('roll_number', 'email', 'detail'),
    [
        ('2024001', 'fresh@student.edu', 'Roll number already exists'),
        ('2024099', 'john.smith@student.edu', 'Email already exists'),
        ('2024099', 'admin@school.edu', 'Email already exists'),
    ],
)
def test_register_rejects_duplicates(db, accounts, roll_number: str, email: str, detail: str) -> None:
    request = RegisterRequest(
        roll_number=roll_number,
        name='Someone',
        email=email,
        password='secret123',
        class_name='9-A',
    )

    with pytest.raises(HTTPException) as exception_info:
        auth_routes.register(request, db=db)

    assert exception_info.value.status_code == 400
    assert exception_info.value.detail == detail


def test_register_request_enforces_password_length() -> None:
    with pytest.raises(ValidationError) as exception_info:
        RegisterRequest(roll_number='1', name='A', email='a@student.edu', password='123', class_name='9-A')

    assert 'Password must be at least 6 characters' in str(exception_info.value)


def test_verify_echoes_token_identity() -> None:
    current_user = TokenUser(id='s-1', email='a@student.edu', role='student')

    response = auth_routes.verify(current_user=current_user)

    assert response['message'] == 'Token valid'
    assert response['data']['user']['id'] == 's-1'


def test_me_returns_account_details(db, accounts) -> None:
    current_user = TokenUser(id=accounts['student'].id, email='john.smith@student.edu', role='student')

    response = auth_routes.me(current_user=current_user, db=db)

    assert response['data']['name'] == 'John Smith'
    assert response['data']['role'] == 'student'


def test_me_rejects_deleted_account(db, accounts) -> None:
    current_user = TokenUser(id='missing', email='ghost@student.edu', role='student')

    with pytest.raises(HTTPException) as exception_info:
        auth_routes.me(current_user=current_user, db=db)

    assert exception_info.value.status_code == 401


def test_login_endpoint_wraps_errors_in_envelope(app_client, db, accounts) -> None:
    response = app_client.post('/auth/login', json={'email': 'admin@school.edu', 'password': 'nope'})

    assert response.status_code == 401
    assert response.json() == {'success': False, 'message': 'Invalid credentials'}


def test_login_endpoint_reports_validation_errors(app_client) -> None:
    response = app_client.post('/auth/login', json={'email': 'admin@school.edu'})

    assert response.status_code == 400
    body = response.json()
    assert body['success'] is False
    assert body['message'] == "Field 'password' is required"


def test_protected_endpoint_requires_token(app_client) -> None:
    response = app_client.get('/auth/verify')

    assert response.status_code == 401
    assert response.json()['message'] == 'Authentication token required'
