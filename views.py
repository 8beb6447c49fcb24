"""
Derived views over the current collections.

Nothing here is cached or stored. Date-relative views take an optional
``today`` and otherwise read the local calendar date at call time.
"""
import datetime as dt
from typing import Dict, List, Optional, Sequence

from schemas import ATTENDANCE_STATUSES, AttendanceRecord, Doubt, Student, Test

ALL = "All"
UNKNOWN_STUDENT = "Unknown Student"
NOT_APPLICABLE = "N/A"


def _today(today: Optional[dt.date]) -> dt.date:
    return today if today is not None else dt.date.today()


def pending_doubts_count(doubts: Sequence[Doubt]) -> int:
    return sum(1 for d in doubts if d.status == "Open")


def is_upcoming(test: Test, today: Optional[dt.date] = None) -> bool:
    # a test dated today is still upcoming
    return test.date >= _today(today)


def upcoming_tests(tests: Sequence[Test], today: Optional[dt.date] = None) -> List[Test]:
    today = _today(today)
    return sorted((t for t in tests if is_upcoming(t, today)), key=lambda t: t.date)


def completed_tests(tests: Sequence[Test], today: Optional[dt.date] = None) -> List[Test]:
    today = _today(today)
    return sorted((t for t in tests if not is_upcoming(t, today)), key=lambda t: t.date, reverse=True)


def average_score_percent(tests: Sequence[Test], today: Optional[dt.date] = None) -> Optional[float]:
    """Mean percentage over completed, scored tests, to one decimal.

    Returns None when no test qualifies.
    """
    today = _today(today)
    scored = [t for t in tests if t.date < today and t.scored_marks is not None]
    if not scored:
        return None
    percents = [t.scored_marks / t.total_marks * 100 for t in scored]
    return round(sum(percents) / len(percents), 1)


def format_average(value: Optional[float]) -> str:
    if value is None:
        return NOT_APPLICABLE
    return f"{value:.1f}%"


def filter_students_by_batch(students: Sequence[Student], batch: Optional[str] = None) -> List[Student]:
    if batch in (None, ALL):
        return list(students)
    return [s for s in students if s.batch == batch]


def filter_doubts_by_status(doubts: Sequence[Doubt], status: Optional[str] = None) -> List[Doubt]:
    if status in (None, ALL):
        return list(doubts)
    return [d for d in doubts if d.status == status]


def attendance_status_for(attendance: Sequence[AttendanceRecord], student_id: str, on_date: dt.date) -> Optional[str]:
    """Status marked for the student on that day, or None when unmarked."""
    for a in attendance:
        if a.student_id == student_id and a.date == on_date:
            return a.status
    return None


def attendance_counts(roster: Sequence[Dict]) -> Dict[str, int]:
    """Tally the marked statuses of a roster; unmarked students are skipped."""
    counts = {status: 0 for status in ATTENDANCE_STATUSES}
    for entry in roster:
        if entry["status"] is not None:
            counts[entry["status"]] += 1
    return counts


def attendance_roster(
    students: Sequence[Student],
    attendance: Sequence[AttendanceRecord],
    on_date: dt.date,
    batch: Optional[str] = None,
) -> List[Dict]:
    return [
        {"student": s, "status": attendance_status_for(attendance, s.id, on_date)}
        for s in filter_students_by_batch(students, batch)
    ]


def student_name(students: Sequence[Student], student_id: str) -> str:
    for s in students:
        if s.id == student_id:
            return s.name
    return UNKNOWN_STUDENT


def summary(
    students: Sequence[Student],
    tests: Sequence[Test],
    doubts: Sequence[Doubt],
    today: Optional[dt.date] = None,
) -> Dict:
    return {
        "total_students": len(students),
        "pending_doubts": pending_doubts_count(doubts),
        "average_score": format_average(average_score_percent(tests, today)),
    }
