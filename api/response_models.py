"""
Pydantic request/response models for the exam endpoints.

These give FastAPI the type information it needs for validation and
accurate OpenAPI schemas.
"""

from datetime import date, time

from pydantic import BaseModel, Field

# ==== Requests ====


class ExamCreate(BaseModel):
    """POST /api/exams body. Batch range is checked by the store, not here."""

    course_name: str = Field(min_length=1)
    exam_no: int
    batch: int
    exam_date: date = Field(description="Civil date, YYYY-MM-DD")
    start_time: time = Field(description="UTC wall-clock, HH:MM or HH:MM:SS")
    duration_minutes: int


class RescheduleRequest(BaseModel):
    new_date: date
    new_time: time


class DurationRequest(BaseModel):
    new_duration: int


# ==== Responses ====


class ExamOut(BaseModel):
    """One live exam as listed by GET /api/exams."""

    course_name: str
    exam_no: int
    batch: int
    exam_date: str
    start_time: str
    duration_minutes: int
    finish_time: str = Field(description="HH:MM:SS wall-clock end of the exam")
    status: str = Field(description="ongoing or upcoming at listing time")


class MutationResponse(BaseModel):
    """Standard mutation result."""

    success: bool = Field(description="Whether the operation succeeded")


class HealthResponse(BaseModel):
    status: str = Field(description="healthy or error")
    timestamp: str = Field(description="ISO timestamp")
