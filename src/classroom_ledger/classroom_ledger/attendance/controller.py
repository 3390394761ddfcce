from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import XLSX_MIMETYPE, attachment, json_body, require_confirmation
from ..container import Container
from .export import export_attendance_csv, export_attendance_xlsx


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service

    @app.route("/api/attendance/<date>", methods=["GET"], endpoint="get_attendance")
    def get_attendance(date: str):
        day = service.get_day(date)
        summary = service.daily_summary(day.date_key)
        return jsonify({
            "success": True,
            "date": day.date_key,
            "statuses": {sid: status.value for sid, status in day.statuses.items()},
            "summary": {
                "present": summary.present,
                "late": summary.late,
                "absent": summary.absent,
                "total": summary.total,
            },
        })

    @app.route("/api/attendance/<date>/<student_id>", methods=["PUT"], endpoint="set_attendance")
    def set_attendance(date: str, student_id: str):
        status = service.set_status(date, student_id, json_body().get("status"))
        return jsonify({"success": True, "student_id": student_id, "status": status.value})

    @app.route("/api/attendance/<date>/reset", methods=["POST"], endpoint="reset_attendance")
    def reset_attendance(date: str):
        require_confirmation(json_body(), "Resetting attendance")
        service.reset_day(date)
        return jsonify({"success": True, "message": f"Attendance for {date} cleared"})

    @app.route("/api/attendance/<date>/export.csv", methods=["GET"], endpoint="attendance_csv")
    def attendance_csv(date: str):
        day = service.get_day(date)
        # utf-8-sig so Excel picks up the encoding
        return attachment(
            export_attendance_csv(day, service.roster()).encode("utf-8-sig"),
            mimetype="text/csv",
            filename=f"attendance-report-{day.date_key}.csv",
        )

    @app.route("/api/attendance/<date>/export.xlsx", methods=["GET"], endpoint="attendance_xlsx")
    def attendance_xlsx(date: str):
        day = service.get_day(date)
        return attachment(
            export_attendance_xlsx(day, service.roster()),
            mimetype=XLSX_MIMETYPE,
            filename=f"attendance-report-{day.date_key}.xlsx",
        )
