"""
Application state for Tutor Desk.

``TutorDesk`` owns the four collections and mirrors each one to the store.
Every mutation runs validate -> change in memory -> save the whole
collection -> notify observers, and touches a single collection.
"""
import datetime as dt
import logging
import math
from typing import Callable, Dict, List, Optional

import views
from database import JsonStore, generate_id
from records import RecordCollection, toggle_doubt_status, upsert_attendance
from schemas import (
    ATTENDANCE_STATUSES,
    BATCHES,
    AttendanceRecord,
    Doubt,
    Student,
    Test,
)

logger = logging.getLogger(__name__)

STUDENTS = "students"
ATTENDANCE = "attendance"
TESTS = "tests"
DOUBTS = "doubts"

TABS = (ATTENDANCE, TESTS, DOUBTS)

Observer = Callable[[str], None]


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class TutorDesk:
    def __init__(self, store: JsonStore):
        self.store = store
        self._collections: Dict[str, RecordCollection] = {
            STUDENTS: RecordCollection(store.load(STUDENTS, Student)),
            ATTENDANCE: RecordCollection(store.load(ATTENDANCE, AttendanceRecord)),
            TESTS: RecordCollection(store.load(TESTS, Test)),
            DOUBTS: RecordCollection(store.load(DOUBTS, Doubt)),
        }
        self._observers: List[Observer] = []
        # which module the front end shows; not persisted
        self.active_tab = ATTENDANCE

    # -----------------
    # Current state
    # -----------------
    @property
    def students(self) -> List[Student]:
        return self._collections[STUDENTS].list()

    @property
    def attendance(self) -> List[AttendanceRecord]:
        return self._collections[ATTENDANCE].list()

    @property
    def tests(self) -> List[Test]:
        return self._collections[TESTS].list()

    @property
    def doubts(self) -> List[Doubt]:
        return self._collections[DOUBTS].list()

    def subscribe(self, callback: Observer) -> None:
        self._observers.append(callback)

    def unsubscribe(self, callback: Observer) -> None:
        if callback in self._observers:
            self._observers.remove(callback)

    def select_tab(self, name: str) -> bool:
        if name not in TABS:
            return False
        self.active_tab = name
        return True

    def _commit(self, key: str) -> None:
        self.store.save(key, self._collections[key].list())
        for callback in list(self._observers):
            callback(key)

    # -----------------
    # Mutations
    # -----------------
    def add_student(self, name: str, batch: str) -> Optional[Student]:
        if _blank(name) or batch not in BATCHES:
            return None
        student = Student(id=generate_id(), name=name.strip(), batch=batch)
        self._collections[STUDENTS].add(student)
        self._commit(STUDENTS)
        logger.info("Added student %s (%s)", student.id, batch)
        return student

    def mark_attendance(self, student_id: str, on_date: Optional[dt.date], status: str) -> Optional[AttendanceRecord]:
        if _blank(student_id) or on_date is None or status not in ATTENDANCE_STATUSES:
            return None
        record = upsert_attendance(self._collections[ATTENDANCE], student_id, on_date, status)
        self._commit(ATTENDANCE)
        return record

    def add_test(self, subject: str, on_date: Optional[dt.date], total_marks: float = 100) -> Optional[Test]:
        if _blank(subject) or on_date is None or total_marks is None:
            return None
        if not math.isfinite(total_marks) or total_marks <= 0:
            return None
        test = Test(id=generate_id(), subject=subject.strip(), date=on_date, total_marks=total_marks)
        self._collections[TESTS].add(test)
        self._commit(TESTS)
        logger.info("Added test %s on %s", test.id, on_date.isoformat())
        return test

    def add_doubt(self, student_id: str, subject: str, topic: str, doubt_text: str) -> Optional[Doubt]:
        if _blank(student_id) or _blank(subject) or _blank(doubt_text):
            return None
        doubt = Doubt(
            id=generate_id(),
            student_id=student_id,
            subject=subject.strip(),
            topic=(topic or "").strip(),
            doubt_text=doubt_text.strip(),
        )
        self._collections[DOUBTS].add(doubt)
        self._commit(DOUBTS)
        return doubt

    def toggle_doubt(self, doubt_id: str) -> bool:
        if not toggle_doubt_status(self._collections[DOUBTS], doubt_id):
            logger.debug("Toggle ignored, no doubt with id %s", doubt_id)
            return False
        self._commit(DOUBTS)
        return True

    # -----------------
    # Derived views
    # -----------------
    def summary(self, today: Optional[dt.date] = None) -> Dict:
        return views.summary(self.students, self.tests, self.doubts, today)

    def upcoming_tests(self, today: Optional[dt.date] = None) -> List[Test]:
        return views.upcoming_tests(self.tests, today)

    def completed_tests(self, today: Optional[dt.date] = None) -> List[Test]:
        return views.completed_tests(self.tests, today)

    def students_in_batch(self, batch: Optional[str] = None) -> List[Student]:
        return views.filter_students_by_batch(self.students, batch)

    def roster(self, on_date: dt.date, batch: Optional[str] = None) -> List[Dict]:
        return views.attendance_roster(self.students, self.attendance, on_date, batch)

    def attendance_counts(self, on_date: dt.date, batch: Optional[str] = None) -> Dict[str, int]:
        return views.attendance_counts(self.roster(on_date, batch))

    def attendance_status(self, student_id: str, on_date: dt.date) -> Optional[str]:
        return views.attendance_status_for(self.attendance, student_id, on_date)

    def doubts_by_status(self, status: Optional[str] = None) -> List[Doubt]:
        return views.filter_doubts_by_status(self.doubts, status)

    def student_name(self, student_id: str) -> str:
        return views.student_name(self.students, student_id)
