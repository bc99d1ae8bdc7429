from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import ExamType
from .model import MarksEntry, MarksRecord


class MarksRepository(Protocol):
    def get_by_id(self, mark_id: int) -> Optional[MarksRecord]:
        raise NotImplementedError

    def list_all(self) -> Sequence[MarksRecord]:
        """Latest exam first."""
        raise NotImplementedError

    def list_for_students(
        self,
        student_ids: Sequence[int],
        *,
        created_by: Optional[int] = None,
        subject: Optional[str] = None,
        exam_type: Optional[ExamType] = None,
    ) -> Sequence[MarksRecord]:
        """Latest exam first; empty ``student_ids`` gives an empty result."""
        raise NotImplementedError

    def create(self, *, student_id: int, created_by: int, entry: MarksEntry) -> int:
        raise NotImplementedError

    def update(self, mark_id: int, *, entry: MarksEntry) -> bool:
        raise NotImplementedError

    def delete_by_id(self, mark_id: int) -> bool:
        raise NotImplementedError

    def delete_for_student(self, student_id: int) -> int:
        raise NotImplementedError
