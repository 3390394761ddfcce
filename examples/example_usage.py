"""Example: drive the service layer directly (no Flask).

Controllers are a thin layer; the rules live in the services. This runs on the
in-memory store so it needs no database.
"""

import random

from classroom_ledger.container import build_container, build_store
from classroom_ledger.students.seeding import seed_students


def main():
    container = build_container(store=build_store("memory"))
    seed_students(container.students_repo, 12, batch_size=500, rng=random.Random(7))

    day = "2024-05-01"
    students = container.student_service.list_students()
    for i, s in enumerate(students):
        container.attendance_service.set_status(day, s.student_id, "Late" if i % 4 == 0 else "Present")

    container.quiz_service.log_quiz_result(
        day, first=students[0].student_id, second=students[1].student_id, third=students[2].student_id
    )

    for row in container.leaderboard_service.daily_leaderboard(day)[:5]:
        print(row.rank, row.name, row.attendance_points, row.quiz_points, row.total)


if __name__ == "__main__":
    main()
