"""
Record Schemas for Tutor Desk

Each Pydantic model below maps to one locally stored collection:
Student -> "students", AttendanceRecord -> "attendance",
Test -> "tests", Doubt -> "doubts".

Persisted JSON uses camelCase keys (studentId, totalMarks, ...); Python code
uses the snake_case attribute names. Unknown keys are ignored on load.
"""
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, Literal
import datetime as dt

BatchName = Literal["A", "B", "C"]
AttendanceStatus = Literal["Present", "Absent", "Late"]
DoubtStatus = Literal["Open", "Resolved"]

BATCHES = ("A", "B", "C")
ATTENDANCE_STATUSES = ("Present", "Absent", "Late")
DOUBT_STATUSES = ("Open", "Resolved")


class Record(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Student(Record):
    id: str
    name: str = Field(..., description="Full name of student")
    batch: BatchName = Field(..., description="Cohort A, B or C")

    @field_validator("batch", mode="before")
    @classmethod
    def strip_batch_prefix(cls, value):
        # older data stored the label shown in the form, e.g. "Batch A"
        if isinstance(value, str) and value.startswith("Batch "):
            return value[len("Batch "):]
        return value


class AttendanceRecord(Record):
    student_id: str = Field(..., alias="studentId", description="Reference to Student.id")
    date: dt.date = Field(..., description="Attendance date (YYYY-MM-DD)")
    status: AttendanceStatus


class Test(Record):
    id: str
    subject: str
    date: dt.date = Field(..., description="Scheduled date (YYYY-MM-DD)")
    total_marks: float = Field(100, alias="totalMarks", gt=0, allow_inf_nan=False)
    scored_marks: Optional[float] = Field(None, alias="scoredMarks", allow_inf_nan=False)
    remarks: str = ""


class Doubt(Record):
    id: str
    student_id: str = Field(..., alias="studentId", description="Reference to Student.id")
    subject: str
    topic: str = ""
    doubt_text: str = Field(..., alias="doubtText")
    status: DoubtStatus = "Open"
