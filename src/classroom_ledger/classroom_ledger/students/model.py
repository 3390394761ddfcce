from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional


def dedup_key(name: str, mobile: Optional[str]) -> str:
    """Composite identity used to spot the same person across imports."""
    return f"{(name or '').strip().lower()}_{(mobile or '').strip()}"


@dataclass(frozen=True)
class Student:
    """Domain entity: one roster entry.

    ``opening_quiz_points`` is the quiz total carried in from a spreadsheet
    import; points earned from logged quiz placements live in the point ledger.
    """

    student_id: str
    name: str
    class_label: str
    mobile: str = ""
    opening_quiz_points: int = 0

    @property
    def dedup_key(self) -> str:
        return dedup_key(self.name, self.mobile)

    def to_document(self) -> dict:
        return {
            "name": self.name,
            "class": self.class_label,
            "mobile": self.mobile,
            "quizPoints": int(self.opening_quiz_points),
        }

    @classmethod
    def from_document(cls, student_id: str, data: Mapping[str, Any]) -> "Student":
        return cls(
            student_id=str(student_id),
            name=str(data.get("name") or ""),
            class_label=str(data.get("class") or ""),
            mobile=str(data.get("mobile") or ""),
            opening_quiz_points=int(data.get("quizPoints") or 0),
        )

    def to_dict(self) -> dict:
        return {
            "student_id": self.student_id,
            "name": self.name,
            "class": self.class_label,
            "mobile": self.mobile,
            "opening_quiz_points": self.opening_quiz_points,
        }
