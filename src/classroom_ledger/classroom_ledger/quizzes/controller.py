from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_body, require_confirmation
from ..container import Container
from ..points.ledger import LedgerChange


def _change_json(change: LedgerChange) -> dict:
    return {
        "date": change.date_key,
        "previous": change.previous.to_document(),
        "current": change.current.to_document(),
        "deltas": dict(change.deltas),
    }


def register(app: Flask, container: Container) -> None:
    service = container.quiz_service

    @app.route("/api/quizzes/<date>", methods=["GET"], endpoint="get_quiz")
    def get_quiz(date: str):
        return jsonify({
            "success": True,
            "placements": service.get_day_result(date).to_document(),
            "eligible": [s.to_dict() for s in service.eligible_students(date)],
        })

    @app.route("/api/quizzes/<date>", methods=["PUT"], endpoint="log_quiz")
    def log_quiz(date: str):
        data = json_body()
        change = service.log_quiz_result(
            date,
            first=data.get("first"),
            second=data.get("second"),
            third=data.get("third"),
        )
        return jsonify({"success": True, "message": "Quiz result saved", **_change_json(change)})

    @app.route("/api/quizzes/<date>", methods=["DELETE"], endpoint="reset_quiz_day")
    def reset_quiz_day(date: str):
        change = service.reset_day(date)
        return jsonify({"success": True, "message": f"Quiz points for {change.date_key} reset", **_change_json(change)})

    @app.route("/api/quizzes/reset-all", methods=["POST"], endpoint="reset_all_quiz_points")
    def reset_all_quiz_points():
        require_confirmation(json_body(), "Resetting all quiz points")
        summary = service.reset_all()
        return jsonify({
            "success": True,
            "message": "All quiz points reset",
            "quiz_days_cleared": summary.quiz_days_cleared,
            "totals_cleared": summary.totals_cleared,
            "opening_balances_cleared": summary.opening_balances_cleared,
        })

    @app.route("/api/points/consistency", methods=["GET"], endpoint="points_consistency")
    def points_consistency():
        mismatches = container.ledger.find_inconsistencies()
        return jsonify({
            "success": True,
            "consistent": not mismatches,
            "mismatches": {sid: {"stored": s, "expected": e} for sid, (s, e) in mismatches.items()},
        })
