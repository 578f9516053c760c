"""
In-memory exam store (one process, no persistence).
"""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel

from .schema import ExamPaper, GenerationConfig


class ExamRecord(BaseModel):
    exam_id: str
    exam: ExamPaper
    config: GenerationConfig | None = None
    created_at: str
    updated_at: str


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ExamStore:
    """Maps exam ids to the latest ExamPaper. Last write wins."""

    def __init__(self):
        self._records: dict[str, ExamRecord] = {}

    def add(self, exam: ExamPaper, config: GenerationConfig | None = None) -> ExamRecord:
        now = _now()
        record = ExamRecord(exam_id=str(uuid.uuid4()), exam=exam, config=config, created_at=now, updated_at=now)
        self._records[record.exam_id] = record
        return record

    def get(self, exam_id: str) -> ExamRecord:
        """Raises KeyError for unknown ids."""
        return self._records[exam_id]

    def put(self, exam_id: str, exam: ExamPaper) -> ExamRecord:
        record = self.get(exam_id)
        record.exam = exam
        record.updated_at = _now()
        return record
