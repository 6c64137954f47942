import pytest

from srms.core import grading


@pytest.mark.parametrize(
    ('marks', 'expected_grade'),
    [
        (100, 'A+'),
        (90, 'A+'),
        (89.99, 'A'),
        (80, 'A'),
        (70, 'B+'),
        (60, 'B'),
        (50, 'C+'),
        (40, 'C'),
        (33, 'D'),
        (32.5, 'F'),
        (0, 'F'),
    ],
)
def test_grade_for_marks_follows_scale(marks: float, expected_grade: str) -> None:
    assert grading.grade_for_marks(marks) == expected_grade


def test_is_pass_uses_forty_as_pass_mark() -> None:
    assert grading.is_pass(40)
    assert not grading.is_pass(39.5)


def test_aggregates_for_empty_marks() -> None:
    assert grading.average([]) == 0.0
    assert grading.overall_grade([]) == 'N/A'
    assert grading.pass_rate([]) == 0.0


def test_aggregates_round_to_two_decimals() -> None:
    marks = [95, 88, 78, 65]

    assert grading.average(marks) == 81.5
    assert grading.overall_grade(marks) == 'A'
    assert grading.gpa_for_average(81.5) == 3.26
    assert grading.pass_rate([95, 30, 20]) == 33.33


def test_percentage_matches_marks_out_of_hundred() -> None:
    assert grading.percentage_for_marks(72.5) == 72.5
