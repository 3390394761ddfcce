from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import json_body
from ..container import Container
from ..core.exceptions import ValidationError


def register(app: Flask, container: Container) -> None:
    @app.route("/api/teams/shuffle", methods=["POST"], endpoint="shuffle_teams")
    def shuffle_teams():
        data = json_body()
        if not data.get("date"):
            raise ValidationError("A date is required")
        try:
            team_count = int(data.get("teams", 0))
        except (TypeError, ValueError):
            raise ValidationError("Number of teams must be a whole number")

        teams = container.team_service.shuffle_teams(data["date"], team_count)
        return jsonify({"success": True, "teams": [t.to_dict() for t in teams]})
