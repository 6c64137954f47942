import pytest

from srms.client.api import ApiClient, ApiError
from srms.client.guard import auth_guard
from srms.client.session import SessionStore
from srms.client.storage import LocalStorage
from srms.client.table import DataTable, TableColumn
from srms.seed import seed_demo_data


@pytest.fixture
def api(app_client, db) -> ApiClient:
    seed_demo_data(db)
    return ApiClient(base_url='http://testserver', http_client=app_client)


@pytest.fixture
def session(api, tmp_path) -> SessionStore:
    return SessionStore(api, LocalStorage(str(tmp_path / 'storage.json')))


def test_admin_signs_in_and_browses_students(api, session) -> None:
    assert session.login('admin@school.edu', 'password') is True
    assert auth_guard(session, required_role='admin').has_access is True

    students = api.students.get_all().data
    table = DataTable(
        students,
        [TableColumn(key='name', label='Name', sortable=True), TableColumn(key='class', label='Class')],
        page_size=2,
    )
    table.set_search('10-b')

    assert [student.roll_number for student in students] == ['2024001', '2024002', '2024003', '2024004']
    assert [row.cells for row in table.render().rows] == [['Sarah Wilson', '10-B'], ['Michael Brown', '10-B']]


def test_admin_records_result_and_sees_dashboard(api, session) -> None:
    session.login('admin@school.edu', 'password')
    student = api.students.get_for_dropdown().data[0]
    course = next(option for option in api.courses.get_for_dropdown().data if option.course_code == 'PHY101')

    created = api.results.create({
        'student_id': student.id,
        'course_id': course.id,
        'marks': 72,
        'exam_date': '2024-06-01',
        'exam_type': 'Final Exam',
    })
    stats = api.dashboard.get_stats().data

    assert created.data.grade == 'B+'
    assert stats.total_results == 5
    assert stats.total_students == 4


def test_student_is_limited_to_own_records(api, session) -> None:
    assert session.login('john.smith@student.edu', 'password') is True
    assert auth_guard(session, required_role='admin').has_access is False

    own_results = api.results.get_student_results().data
    statistics = api.students.get_statistics(session.user.id).data

    assert [result.course_code for result in own_results] == ['MATH101']
    assert statistics.overall_grade == 'A+'
    with pytest.raises(ApiError) as exception_info:
        api.dashboard.get_stats()
    assert exception_info.value.status_code == 403
    assert exception_info.value.message == 'Insufficient permissions'


def test_logout_drops_authorization(api, session) -> None:
    session.login('admin@school.edu', 'password')
    session.logout()

    with pytest.raises(ApiError) as exception_info:
        api.students.get_all()

    assert exception_info.value.status_code == 401
    assert exception_info.value.message == 'Authentication token required'
