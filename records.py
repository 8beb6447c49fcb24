"""
In-memory record collections.

Collections trust their input: callers validate before ``add``.
"""
import datetime as dt
from typing import Callable, Generic, Iterable, List, Optional, TypeVar

from schemas import AttendanceRecord, AttendanceStatus, Doubt

T = TypeVar("T")


class RecordCollection(Generic[T]):
    def __init__(self, records: Optional[Iterable[T]] = None):
        self._records: List[T] = list(records or [])

    def __len__(self) -> int:
        return len(self._records)

    def add(self, record: T) -> None:
        self._records.append(record)

    def list(self) -> List[T]:
        return list(self._records)

    def update(self, predicate: Callable[[T], bool], mutation: Callable[[T], None]) -> int:
        """Apply ``mutation`` in place to every member matching ``predicate``."""
        matched = 0
        for record in self._records:
            if predicate(record):
                mutation(record)
                matched += 1
        return matched


def upsert_attendance(
    collection: RecordCollection[AttendanceRecord],
    student_id: str,
    on_date: dt.date,
    status: AttendanceStatus,
) -> AttendanceRecord:
    """Set the status for (student_id, on_date), appending only when unmarked."""
    def matches(a: AttendanceRecord) -> bool:
        return a.student_id == student_id and a.date == on_date

    def set_status(a: AttendanceRecord) -> None:
        a.status = status

    if collection.update(matches, set_status) == 0:
        collection.add(AttendanceRecord(student_id=student_id, date=on_date, status=status))
    return next(a for a in collection.list() if matches(a))


def toggle_doubt_status(collection: RecordCollection[Doubt], doubt_id: str) -> bool:
    def flip(d: Doubt) -> None:
        d.status = "Resolved" if d.status == "Open" else "Open"

    return collection.update(lambda d: d.id == doubt_id, flip) > 0
