import os

os.environ.setdefault('DATABASE_URL', 'sqlite:///./test.db')
os.environ.setdefault('BCRYPT_ROUNDS', '4')
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret-key')

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from srms.auth import jwt_handler  # noqa: E402
from srms.database import Base, get_db  # noqa: E402
from srms.models import course, result, student, user  # noqa: E402,F401
from srms.schemas import TokenUser  # noqa: E402


@pytest.fixture
def db_engine():
    engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def db(db_engine):
    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def app_client(db_engine):
    from srms.main import app

    testing_session_local = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)

    def override_get_db():
        session = testing_session_local()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def admin_user() -> TokenUser:
    return TokenUser(id='admin-1', email='admin@school.edu', role='admin', name='Admin')


@pytest.fixture
def auth_headers():
    def build(user_id: str, role: str, email: str = 'someone@school.edu') -> dict[str, str]:
        token = jwt_handler.create_access_token(subject=user_id, role=role, email=email)
        return {'Authorization': f'Bearer {token}'}

    return build
