from __future__ import annotations

from flask import current_app, request

from ..core.exceptions import ValidationError

XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def require_confirmation(data: dict, action: str) -> None:
    """Destructive endpoints only run when the body carries ``"confirm": true``."""
    if data.get("confirm") is not True:
        raise ValidationError(f'{action} needs confirmation: send {{"confirm": true}}')


def attachment(payload: bytes, *, mimetype: str, filename: str):
    return current_app.response_class(
        payload,
        mimetype=mimetype,
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
