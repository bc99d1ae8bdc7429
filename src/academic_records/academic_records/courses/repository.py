from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import Course


class CourseRepository(Protocol):
    def list_all(self) -> Sequence[Course]:
        """Sorted by name."""
        raise NotImplementedError

    def get_by_id(self, course_id: int) -> Optional[Course]:
        raise NotImplementedError

    def get_by_name(self, name: str) -> Optional[Course]:
        raise NotImplementedError

    def create(self, *, name: str, subjects: Sequence[str]) -> int:
        raise NotImplementedError

    def update(self, course_id: int, *, name: str, subjects: Sequence[str]) -> bool:
        raise NotImplementedError

    def delete_by_id(self, course_id: int) -> bool:
        raise NotImplementedError
