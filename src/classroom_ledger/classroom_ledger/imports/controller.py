from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..container import Container
from ..core.exceptions import ValidationError
from .spreadsheet import parse_spreadsheet

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    @app.route("/api/imports", methods=["POST"], endpoint="import_spreadsheet")
    def import_spreadsheet():
        upload = request.files.get("file")
        if upload is None or not upload.filename:
            raise ValidationError("No file selected")

        rows = parse_spreadsheet(upload.read(), upload.filename)
        logger.info("Importing %s rows from %s", len(rows), upload.filename)
        result = container.import_service.import_rows(rows)

        message = "Import complete" if result.complete else "Import stopped before all batches were committed"
        return jsonify({"success": result.complete, "message": message, "result": result.to_dict()})
