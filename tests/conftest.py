import pytest
import sys
from pathlib import Path

# Add src to sys.path so we can import spt_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from spt_toolkit.core.models import (  # noqa: E402
    AssessmentCategory,
    COMarkEntry,
    CourseOutcomeTarget,
    MarkRecord,
    Student,
)


# Common test fixtures
@pytest.fixture
def simple_record() -> MarkRecord:
    """Internal 40/50 and exam 30/50, two COs."""
    return MarkRecord(
        year="2024",
        internal=40,
        exam=30,
        total_internal=50,
        total_exam=50,
        co_mapping=(
            COMarkEntry("CO1", internal=8, exam=35, total_internal=10, total_exam=50),
            COMarkEntry("CO2", internal=5, exam=20, total_internal=10, total_exam=50),
        ),
    )


@pytest.fixture
def sample_student(simple_record) -> Student:
    return Student(
        student_id="S1",
        name="Asha",
        department="CSE",
        marks=(simple_record,),
        course_outcomes=(CourseOutcomeTarget("CO1", 70), CourseOutcomeTarget("CO2", 60)),
    )


@pytest.fixture
def backend_student_payload() -> dict:
    """A student as returned by GET /students."""
    return {
        "student_id": "S1",
        "name": "Asha",
        "department": "CSE",
        "average": "70.00",
        "Marks": [
            {
                "year": "2024",
                "internal": 40,
                "exam": 30,
                "totalInternal": 50,
                "totalExam": 50,
                "coMapping": [
                    {"coId": "CO1", "internal": 8, "exam": 35, "totalInternal": 10, "totalExam": 50},
                ],
            }
        ],
        "CourseOutcomes": [{"coId": "CO1", "target": 70}],
    }


@pytest.fixture
def cia_records() -> list[MarkRecord]:
    """CO1 internal 80%, assignment 60%, class test 70%; no exam data."""
    def record(category, internal, instance=1):
        return MarkRecord(
            co_mapping=(COMarkEntry("CO1", internal=internal, total_internal=100),),
            category=category,
            instance=instance,
        )
    return [
        record(AssessmentCategory.INTERNAL, 80),
        record(AssessmentCategory.ASSIGNMENT, 60),
        record(AssessmentCategory.CLASS_TEST, 70),
    ]
