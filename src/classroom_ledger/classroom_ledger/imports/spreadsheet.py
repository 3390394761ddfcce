"""Spreadsheet -> row dicts for ``ImportService``.

Only the first sheet is read. Every cell is read as text so mobile numbers and
codes keep their exact spelling; empty cells are dropped from the row.
"""

from __future__ import annotations

import io
from datetime import date, datetime
from pathlib import PurePath
from typing import Any, BinaryIO, Dict, List, Union

import pandas as pd

from ..core.exceptions import ValidationError

EXCEL_SUFFIXES = {".xlsx"}
CSV_SUFFIXES = {".csv"}


def _header(value: Any) -> str:
    if isinstance(value, (pd.Timestamp, datetime)):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return str(value).strip()


def _read_frame(source: Union[bytes, BinaryIO], suffix: str) -> pd.DataFrame:
    buffer = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else source
    try:
        if suffix in EXCEL_SUFFIXES:
            return pd.read_excel(buffer, sheet_name=0, dtype=str)
        return pd.read_csv(buffer, dtype=str, skipinitialspace=True)
    except pd.errors.EmptyDataError:
        return pd.DataFrame()
    except (ValueError, UnicodeDecodeError) as e:
        raise ValidationError(f"Could not read spreadsheet: {e}")


def parse_spreadsheet(source: Union[bytes, BinaryIO], filename: str) -> List[Dict[str, str]]:
    suffix = PurePath(filename or "").suffix.lower()
    if suffix not in EXCEL_SUFFIXES | CSV_SUFFIXES:
        raise ValidationError("Unsupported file type (expected .xlsx or .csv)")

    df = _read_frame(source, suffix)
    if df.empty:
        raise ValidationError("The selected sheet is empty")

    df.columns = [_header(c) for c in df.columns]
    rows: List[Dict[str, str]] = []
    for record in df.to_dict(orient="records"):
        row = {k: v.strip() for k, v in record.items() if isinstance(v, str) and v.strip()}
        rows.append(row)
    return rows
