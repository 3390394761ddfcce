from __future__ import annotations

import csv
import io
from typing import Dict, List, Sequence

import pandas as pd

from ..students.model import Student
from .model import AttendanceDay

EXPORT_COLUMNS = ["ID", "Name", "Class", "Mobile No.", "Status"]


def _records(day: AttendanceDay, roster: Sequence[Student]) -> List[Dict[str, object]]:
    # Every roster student gets a row; unmarked students are listed as Absent.
    ordered = sorted(roster, key=lambda s: (s.class_label.lower(), s.name.lower(), s.student_id))
    return [
        {
            "ID": s.student_id,
            "Name": s.name,
            "Class": s.class_label,
            "Mobile No.": s.mobile,
            "Status": day.status_of(s.student_id).value,
        }
        for s in ordered
    ]


def export_attendance_csv(day: AttendanceDay, roster: Sequence[Student]) -> str:
    out = io.StringIO()
    writer = csv.DictWriter(out, fieldnames=EXPORT_COLUMNS)
    writer.writeheader()
    writer.writerows(_records(day, roster))
    return out.getvalue()


def export_attendance_xlsx(day: AttendanceDay, roster: Sequence[Student], *, sheet_name: str = "Attendance") -> bytes:
    df = pd.DataFrame(_records(day, roster), columns=EXPORT_COLUMNS)

    output = io.BytesIO()
    with pd.ExcelWriter(output, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name=sheet_name)
    return output.getvalue()
