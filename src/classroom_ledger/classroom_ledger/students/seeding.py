"""Random roster generator for development databases."""

from __future__ import annotations

import random
from typing import List, Optional

from ..core.constants import DEFAULT_SEED_COUNT
from ..database.document_store import chunked
from .model import Student
from .repository import StudentRepository

FIRST_NAMES = [
    "Liam", "Olivia", "Noah", "Emma", "Oliver", "Ava", "Elijah", "Charlotte", "William", "Sophia",
    "James", "Amelia", "Benjamin", "Isabella", "Lucas", "Mia", "Henry", "Evelyn", "Alexander", "Harper",
]
LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis", "Rodriguez", "Martinez",
    "Hernandez", "Lopez", "Gonzalez", "Wilson", "Anderson", "Thomas", "Taylor", "Moore", "Jackson", "Martin",
]
CLASSES = [
    "1st Grade", "2nd Grade", "3rd Grade", "4th Grade", "5th Grade", "6th Grade",
    "7th Grade", "8th Grade", "9th Grade", "10th Grade", "11th Grade", "12th Grade",
]


def random_students(
    students: StudentRepository,
    count: int = DEFAULT_SEED_COUNT,
    *,
    rng: Optional[random.Random] = None,
) -> List[Student]:
    rng = rng or random.Random()
    out: List[Student] = []
    for _ in range(int(count)):
        mobile = f"9{rng.randint(100000000, 999999999)}" if rng.random() > 0.3 else ""
        out.append(
            Student(
                student_id=students.new_id(),
                name=f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
                class_label=rng.choice(CLASSES),
                mobile=mobile,
            )
        )
    return out


def seed_students(
    students: StudentRepository,
    count: int = DEFAULT_SEED_COUNT,
    *,
    batch_size: int,
    rng: Optional[random.Random] = None,
) -> int:
    generated = random_students(students, count, rng=rng)
    for batch in chunked(generated, batch_size):
        students.create_many(batch)
    return len(generated)
