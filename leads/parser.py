"""
File Parser - turns uploaded bytes into raw row mappings.

Supported uploads:
- Excel (.xlsx / .xls), first sheet only
- CSV, UTF-8 (BOM tolerated), header row required
- JSON, an array of objects or a single object

Every cell is read as text so customer IDs keep their leading zeros and dates
reach the DateNormalizer untouched.
"""

import io
import json
import logging
import mimetypes
from pathlib import Path
from typing import Any, Dict, List, Union

import pandas as pd

logger = logging.getLogger(__name__)

RawRow = Dict[str, Any]

EXCEL = "excel"
CSV = "csv"
JSON = "json"

EXTENSION_FORMATS = {
    ".xlsx": EXCEL,
    ".xls": EXCEL,
    ".csv": CSV,
    ".json": JSON,
}

MIMETYPE_FORMATS = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": EXCEL,
    "application/vnd.ms-excel": EXCEL,
    "text/csv": CSV,
    "application/csv": CSV,
    "application/json": JSON,
    "text/json": JSON,
}


class FileFormatError(Exception):
    """Raised when an upload cannot be read; fatal to the whole batch."""
    pass


def detect_format(declared_type: str) -> str:
    """
    Resolve a filename or mimetype to one of EXCEL, CSV, JSON.

    Raises:
        FileFormatError: If the type is not supported
    """
    declared = (declared_type or "").strip()
    lowered = declared.lower().split(";")[0].strip()

    if lowered in MIMETYPE_FORMATS:
        return MIMETYPE_FORMATS[lowered]

    suffix = Path(lowered).suffix
    if suffix in EXTENSION_FORMATS:
        return EXTENSION_FORMATS[suffix]

    guessed, _ = mimetypes.guess_type(lowered)
    if guessed in MIMETYPE_FORMATS:
        return MIMETYPE_FORMATS[guessed]

    raise FileFormatError(f"Unsupported file format: {declared or '<none>'}")


def _frame_to_rows(df: pd.DataFrame) -> List[RawRow]:
    df = df.fillna("")
    df.columns = [str(c) for c in df.columns]
    return df.to_dict(orient="records")


class FileParser:
    """
    Parses uploads into RawRow lists.

    Usage:
        rows = FileParser().parse(data, "leads.xlsx")
    """

    def __init__(self, csv_encoding: str = "utf-8-sig"):
        self.csv_encoding = csv_encoding

    def parse(self, data: bytes, declared_type: str) -> List[RawRow]:
        """
        Parse raw upload bytes.

        Args:
            data: File contents
            declared_type: Filename or mimetype of the upload

        Raises:
            FileFormatError: Unsupported type or unreadable content
        """
        file_format = detect_format(declared_type)

        if file_format == EXCEL:
            rows = self._parse_excel(data)
        elif file_format == CSV:
            rows = self._parse_csv(data)
        else:
            rows = self._parse_json(data)

        logger.info("Parsed %s (%s): %d rows", declared_type, file_format, len(rows))
        return rows

    def parse_path(self, filepath: Union[str, Path]) -> List[RawRow]:
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"File not found: {filepath}")
        return self.parse(filepath.read_bytes(), filepath.name)

    def _parse_excel(self, data: bytes) -> List[RawRow]:
        try:
            df = pd.read_excel(io.BytesIO(data), sheet_name=0, dtype=str)
        except Exception as e:
            raise FileFormatError(f"Could not read Excel workbook: {e}") from e
        return _frame_to_rows(df)

    def _parse_csv(self, data: bytes) -> List[RawRow]:
        try:
            header = pd.read_csv(io.BytesIO(data), nrows=0, encoding=self.csv_encoding)
            width = len(header.columns)

            def trim_ragged(fields: List[str]) -> List[str]:
                # Extra cells past the header are dropped; the row itself is kept
                logger.warning(
                    "CSV row with %d fields trimmed to %d header columns: %r",
                    len(fields),
                    width,
                    fields[:width],
                )
                return fields[:width]

            df = pd.read_csv(
                io.BytesIO(data),
                dtype=str,
                encoding=self.csv_encoding,
                keep_default_na=False,
                engine="python",
                on_bad_lines=trim_ragged,
            )
        except pd.errors.EmptyDataError as e:
            raise FileFormatError("CSV file has no headers") from e
        except (pd.errors.ParserError, UnicodeDecodeError) as e:
            raise FileFormatError(f"Could not read CSV file: {e}") from e
        return _frame_to_rows(df)

    def _parse_json(self, data: bytes) -> List[RawRow]:
        try:
            payload = json.loads(data.decode("utf-8-sig"))
        except (UnicodeDecodeError, ValueError) as e:
            raise FileFormatError(f"Could not read JSON file: {e}") from e

        if isinstance(payload, dict):
            payload = [payload]
        if not isinstance(payload, list):
            raise FileFormatError("JSON upload must be an object or an array of objects")

        rows: List[RawRow] = []
        for index, item in enumerate(payload):
            if not isinstance(item, dict):
                raise FileFormatError(f"JSON item {index + 1} is not an object")
            rows.append(item)
        return rows
