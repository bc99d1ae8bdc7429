from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class Course:
    course_id: int
    name: str
    subjects: tuple[str, ...] = field(default_factory=tuple)
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.course_id,
            "name": self.name,
            "subjects": list(self.subjects),
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
