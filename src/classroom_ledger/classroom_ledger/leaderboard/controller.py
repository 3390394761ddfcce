from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.http import XLSX_MIMETYPE, attachment
from ..container import Container
from .export import export_leaderboard_csv, export_leaderboard_xlsx


def register(app: Flask, container: Container) -> None:
    service = container.leaderboard_service

    def _rows():
        mode = request.args.get("mode", "overall")
        return mode, service.leaderboard(mode, request.args.get("date") or None)

    @app.route("/api/leaderboard", methods=["GET"], endpoint="leaderboard")
    def leaderboard():
        mode, rows = _rows()
        return jsonify({"success": True, "mode": mode, "rows": [r.to_dict() for r in rows]})

    @app.route("/api/leaderboard/export.csv", methods=["GET"], endpoint="leaderboard_csv")
    def leaderboard_csv():
        mode, rows = _rows()
        # utf-8-sig so Excel picks up the encoding
        return attachment(
            export_leaderboard_csv(rows).encode("utf-8-sig"),
            mimetype="text/csv",
            filename=f"leaderboard_{mode}.csv",
        )

    @app.route("/api/leaderboard/export.xlsx", methods=["GET"], endpoint="leaderboard_xlsx")
    def leaderboard_xlsx():
        mode, rows = _rows()
        return attachment(export_leaderboard_xlsx(rows), mimetype=XLSX_MIMETYPE, filename=f"leaderboard_{mode}.xlsx")
