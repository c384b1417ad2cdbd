"""
Exam API Router - REST endpoints over the exams table.

Provides endpoints for:
- Reporting the server reference time
- Listing live exams (expired ones are reaped as a side effect)
- Creating, cancelling, rescheduling, and re-timing exams by natural key
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from api.response_models import (
    DurationRequest,
    ExamCreate,
    ExamOut,
    MutationResponse,
    RescheduleRequest,
)
from lib.clock import ClockSource, get_clock, to_iso
from lib.errors import ExamBoardError, NotFoundError, StoreError, ValidationError
from lib.exam_lifecycle import ExamKey, ExamRecord
from lib.exam_store import ExamStore
from lib.reaper import ExpiryReaper

logger = logging.getLogger(__name__)

exam_router = APIRouter(
    prefix="/api",
    tags=["Exams"],
)


def get_exam_store() -> ExamStore:
    return ExamStore()


def _http_error(e: ExamBoardError, failure: str) -> HTTPException:
    """Map a domain error to the HTTP status the API promises."""
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=str(e))
    if isinstance(e, NotFoundError):
        return HTTPException(status_code=404, detail="Exam not found")
    logger.error(f"{failure}: {e}", exc_info=isinstance(e, StoreError))
    return HTTPException(status_code=500, detail=failure)


@exam_router.get("/time", response_model=str)
def get_time(clock: ClockSource = Depends(get_clock)) -> str:
    """Current reference instant (UTC+6 wall-clock, tagged UTC) as a bare ISO string."""
    return to_iso(clock.now())


@exam_router.get("/exams", response_model=list[ExamOut])
def list_exams(
    store: ExamStore = Depends(get_exam_store),
    clock: ClockSource = Depends(get_clock),
) -> list[dict]:
    """
    List live exams.

    Every exam whose end has passed is permanently deleted before the
    response is built.
    """
    try:
        result = ExpiryReaper(store, clock).reap()
    except ExamBoardError as e:
        raise _http_error(e, "Server error") from e

    return [
        {
            **item.record.to_dict(),
            "finish_time": item.finish_time,
            "status": item.status.value,
        }
        for item in result.kept
    ]


@exam_router.post("/exams", response_model=MutationResponse, status_code=201)
def create_exam(body: ExamCreate, store: ExamStore = Depends(get_exam_store)) -> dict:
    """Add a new exam. Batch must fall within the configured range."""
    try:
        store.create(
            ExamRecord(
                course_name=body.course_name,
                exam_no=body.exam_no,
                batch=body.batch,
                exam_date=body.exam_date,
                start_time=body.start_time,
                duration_minutes=body.duration_minutes,
            )
        )
    except ExamBoardError as e:
        raise _http_error(e, "Failed to add exam") from e
    return {"success": True}


@exam_router.delete("/exams/{course}/{exam_no}/{batch}", response_model=MutationResponse)
def cancel_exam(
    course: str, exam_no: int, batch: int, store: ExamStore = Depends(get_exam_store)
) -> dict:
    """Cancel (delete) every exam matching the natural key."""
    try:
        store.cancel(ExamKey(course, exam_no, batch))
    except ExamBoardError as e:
        raise _http_error(e, "Failed to cancel exam") from e
    return {"success": True}


@exam_router.put(
    "/exams/{course}/{exam_no}/{batch}/reschedule", response_model=MutationResponse
)
def reschedule_exam(
    course: str,
    exam_no: int,
    batch: int,
    body: RescheduleRequest,
    store: ExamStore = Depends(get_exam_store),
) -> dict:
    """Move an exam to a new date and start time."""
    try:
        store.reschedule(ExamKey(course, exam_no, batch), body.new_date, body.new_time)
    except ExamBoardError as e:
        raise _http_error(e, "Failed to reschedule exam") from e
    return {"success": True}


@exam_router.patch(
    "/exams/{course}/{exam_no}/{batch}/duration", response_model=MutationResponse
)
def update_duration(
    course: str,
    exam_no: int,
    batch: int,
    body: DurationRequest,
    store: ExamStore = Depends(get_exam_store),
) -> dict:
    """Change an exam's duration in minutes."""
    try:
        store.change_duration(ExamKey(course, exam_no, batch), body.new_duration)
    except ExamBoardError as e:
        raise _http_error(e, "Failed to update duration") from e
    return {"success": True}
