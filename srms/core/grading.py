"""Grade scale and aggregate helpers used by the result and statistics endpoints."""

PASS_MARK = 40
MAX_MARKS = 100
NO_GRADE = "N/A"

# Lower bound of each grade, highest first.
GRADE_SCALE = (
    (90, "A+"),
    (80, "A"),
    (70, "B+"),
    (60, "B"),
    (50, "C+"),
    (40, "C"),
    (33, "D"),
)
FAILING_GRADE = "F"


def grade_for_marks(marks: float) -> str:
    for lower_bound, grade in GRADE_SCALE:
        if marks >= lower_bound:
            return grade
    return FAILING_GRADE


def percentage_for_marks(marks: float) -> float:
    return round(marks * 100 / MAX_MARKS, 2)


def is_pass(marks: float) -> bool:
    return marks >= PASS_MARK


def average(values: list[float]) -> float:
    if not values:
        return 0.0
    return round(sum(values) / len(values), 2)


def gpa_for_average(average_marks: float) -> float:
    return round(average_marks * 4.0 / 100, 2)


def overall_grade(values: list[float]) -> str:
    if not values:
        return NO_GRADE
    return grade_for_marks(sum(values) / len(values))


def pass_rate(values: list[float]) -> float:
    if not values:
        return 0.0
    passed = sum(1 for value in values if is_pass(value))
    return round(passed / len(values) * 100, 2)
