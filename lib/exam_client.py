"""Exam Board HTTP API client."""

import logging
from datetime import date, datetime, time
from typing import Any
from urllib.parse import quote

import requests

from lib import config
from lib.clock import parse_iso
from lib.errors import ExamServiceError
from lib.exam_lifecycle import ExamKey, ExamRecord

logger = logging.getLogger(__name__)


def _key_path(key: ExamKey) -> str:
    return f"/api/exams/{quote(key.course_name, safe='')}/{key.exam_no}/{key.batch}"


def _iso(value: Any) -> str:
    if isinstance(value, time):
        return value.strftime("%H:%M:%S")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


class ExamService:
    """Thin wrapper over the REST endpoints. Raises ExamServiceError on any failure."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        session: requests.Session | None = None,
    ):
        self.base_url = (base_url or config.API_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else config.HTTP_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error("%s %s failed: %s", method, url, e)
            raise ExamServiceError(f"Could not reach exam service: {e}") from e

        if not resp.ok:
            try:
                detail = resp.json().get("detail", resp.text)
            except ValueError:
                detail = resp.text
            logger.error("%s %s returned %d: %s", method, url, resp.status_code, detail)
            raise ExamServiceError(f"{detail}", status_code=resp.status_code)

        return resp.json()

    def get_time(self) -> datetime:
        """Server reference instant."""
        return parse_iso(self._request("GET", "/api/time"))

    def get_all_exams(self) -> list[ExamRecord]:
        """Exams still live after the server-side reap."""
        return [ExamRecord.from_row(row) for row in self._request("GET", "/api/exams")]

    def create_exam(self, record: ExamRecord) -> None:
        self._request("POST", "/api/exams", json=record.to_dict())

    def cancel_exam(self, key: ExamKey) -> None:
        self._request("DELETE", _key_path(key))

    def reschedule_exam(self, key: ExamKey, new_date: date | str, new_time: time | str) -> None:
        self._request(
            "PUT",
            f"{_key_path(key)}/reschedule",
            json={"new_date": _iso(new_date), "new_time": _iso(new_time)},
        )

    def update_duration(self, key: ExamKey, new_duration: int) -> None:
        self._request(
            "PATCH",
            f"{_key_path(key)}/duration",
            json={"new_duration": int(new_duration)},
        )
