import os
import logging
import datetime as dt
from typing import List, Optional, Dict
from fastapi import Depends, FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

import views
from database import JsonStore
from schemas import AttendanceRecord, Student, Test, Doubt, BatchName, AttendanceStatus
from state import TABS, TutorDesk

logger = logging.getLogger(__name__)

DATA_DIR = os.getenv("DATA_DIR", "data")

app = FastAPI(title="Tutor Desk", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

desk = TutorDesk(JsonStore(DATA_DIR))


def get_desk() -> TutorDesk:
    return desk


# Helpers
class IdResponse(BaseModel):
    id: Optional[str] = None


def id_of(record) -> Dict:
    # rejected adds are a silent no-op, reported as a null id
    return {"id": record.id if record is not None else None}


# Health
@app.get("/")
def root():
    return {"name": "Tutor Desk API", "status": "ok", "data_dir": DATA_DIR}


@app.get("/summary")
def get_summary(desk: TutorDesk = Depends(get_desk)):
    return desk.summary()


# -----------------
# Students
# -----------------
class AddStudentRequest(BaseModel):
    name: str
    batch: BatchName = "A"


@app.post("/students", response_model=IdResponse)
def add_student(payload: AddStudentRequest, desk: TutorDesk = Depends(get_desk)):
    return id_of(desk.add_student(payload.name, payload.batch))


@app.get("/students")
def list_students(batch: Optional[str] = None, desk: TutorDesk = Depends(get_desk)):
    return desk.students_in_batch(batch)


# -----------------
# Attendance
# -----------------
class MarkAttendanceRequest(BaseModel):
    student_id: str = Field(..., alias="studentId")
    date: dt.date
    status: AttendanceStatus


@app.post("/attendance")
def mark_attendance(payload: MarkAttendanceRequest, desk: TutorDesk = Depends(get_desk)):
    record = desk.mark_attendance(payload.student_id, payload.date, payload.status)
    return {"marked": record is not None, "record": record}


@app.get("/attendance")
def attendance_roster(
    on_date: Optional[dt.date] = Query(None, alias="date"),
    batch: Optional[str] = None,
    desk: TutorDesk = Depends(get_desk),
):
    on_date = on_date or dt.date.today()
    roster = desk.roster(on_date, batch)
    return {"date": on_date, "counts": views.attendance_counts(roster), "roster": roster}


# -----------------
# Tests
# -----------------
class AddTestRequest(BaseModel):
    subject: str
    date: Optional[dt.date] = None
    total_marks: float = Field(100, alias="totalMarks", allow_inf_nan=False)


@app.post("/tests", response_model=IdResponse)
def add_test(payload: AddTestRequest, desk: TutorDesk = Depends(get_desk)):
    return id_of(desk.add_test(payload.subject, payload.date, payload.total_marks))


@app.get("/tests")
def list_tests(desk: TutorDesk = Depends(get_desk)):
    today = dt.date.today()
    return {"upcoming": desk.upcoming_tests(today), "completed": desk.completed_tests(today)}


# -----------------
# Doubts
# -----------------
class AddDoubtRequest(BaseModel):
    student_id: str = Field(..., alias="studentId")
    subject: str
    topic: str = ""
    doubt_text: str = Field(..., alias="doubtText")


@app.post("/doubts", response_model=IdResponse)
def add_doubt(payload: AddDoubtRequest, desk: TutorDesk = Depends(get_desk)):
    return id_of(desk.add_doubt(payload.student_id, payload.subject, payload.topic, payload.doubt_text))


@app.get("/doubts")
def list_doubts(status: Optional[str] = None, desk: TutorDesk = Depends(get_desk)):
    return [
        {**d.model_dump(by_alias=True), "studentName": desk.student_name(d.student_id)}
        for d in desk.doubts_by_status(status)
    ]


@app.post("/doubts/{doubt_id}/toggle")
def toggle_doubt(doubt_id: str, desk: TutorDesk = Depends(get_desk)):
    return {"toggled": desk.toggle_doubt(doubt_id)}


# -----------------
# Active tab (front-end state only)
# -----------------
class TabRequest(BaseModel):
    tab: str


@app.get("/tab")
def get_tab(desk: TutorDesk = Depends(get_desk)):
    return {"tab": desk.active_tab, "tabs": list(TABS)}


@app.put("/tab")
def set_tab(payload: TabRequest, desk: TutorDesk = Depends(get_desk)):
    desk.select_tab(payload.tab)
    return {"tab": desk.active_tab, "tabs": list(TABS)}


# Schema viewer for admin tools
@app.get("/schema")
def get_schema_definitions():
    models: List[type] = [Student, AttendanceRecord, Test, Doubt]
    return {m.__name__: m.model_json_schema(by_alias=True) for m in models}


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO").upper(),
        format="%(levelname)s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler()],
    )
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", 8000))
    logger.info("Serving %s on %s:%d", DATA_DIR, host, port)
    uvicorn.run(app, host=host, port=port)
