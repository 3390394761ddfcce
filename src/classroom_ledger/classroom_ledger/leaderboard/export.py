from __future__ import annotations

import csv
import io
from typing import Dict, List, Sequence

import pandas as pd

from .model import LeaderboardRow

EXPORT_COLUMNS = ["Rank", "Name", "Class", "Attendance Points", "Quiz Points", "Total"]


def _records(rows: Sequence[LeaderboardRow]) -> List[Dict[str, object]]:
    return [
        {
            "Rank": r.rank,
            "Name": r.name,
            "Class": r.class_label,
            "Attendance Points": r.attendance_points,
            "Quiz Points": r.quiz_points,
            "Total": r.total,
        }
        for r in rows
    ]


def export_leaderboard_csv(rows: Sequence[LeaderboardRow]) -> str:
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    writer.writerows(_records(rows))
    return out.getvalue()


def export_leaderboard_xlsx(rows: Sequence[LeaderboardRow], *, sheet_name: str = "Points") -> bytes:
    df = pd.DataFrame(_records(rows), columns=EXPORT_COLUMNS)

    # Excel file in memory (never written to disk)
    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    return output.getvalue()
