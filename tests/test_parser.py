from __future__ import annotations

import io
import json

import pandas as pd
import pytest

from conftest import csv_bytes

from leads import FileFormatError, FileParser
from leads.parser import CSV, EXCEL, JSON, detect_format


@pytest.mark.parametrize(
    ("declared", "expected"),
    [
        ("leads.xlsx", EXCEL),
        ("LEADS.XLS", EXCEL),
        ("export.csv", CSV),
        ("text/csv; charset=utf-8", CSV),
        ("dump.json", JSON),
        ("application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", EXCEL),
    ],
)
def test_detect_format(declared: str, expected: str) -> None:
    assert detect_format(declared) == expected


@pytest.mark.parametrize("declared", ["notes.txt", "image/png", "", "leads.pdf"])
def test_unsupported_format_is_fatal(declared: str) -> None:
    with pytest.raises(FileFormatError):
        FileParser().parse(b"anything", declared)


def test_parse_csv_keeps_values_as_text() -> None:
    data = csv_bytes(["Müşteri ID", "Müşteri Adı Soyadı", "Satış Adedi"], [["007", "Ali Veli", ""]])
    rows = FileParser().parse(data, "leads.csv")
    assert rows == [{"Müşteri ID": "007", "Müşteri Adı Soyadı": "Ali Veli", "Satış Adedi": ""}]


def test_parse_csv_tolerates_bom() -> None:
    data = "Müşteri Adı Soyadı\nAli Veli\n".encode("utf-8-sig")
    rows = FileParser().parse(data, "leads.csv")
    assert list(rows[0]) == ["Müşteri Adı Soyadı"]


def test_empty_csv_has_no_headers() -> None:
    with pytest.raises(FileFormatError, match="no headers"):
        FileParser().parse(b"", "leads.csv")


def test_parse_json_single_object_is_wrapped() -> None:
    data = json.dumps({"customerName": "Ali Veli"}).encode("utf-8")
    assert FileParser().parse(data, "lead.json") == [{"customerName": "Ali Veli"}]


def test_parse_json_array() -> None:
    data = json.dumps([{"customerName": "A"}, {"customerName": "B"}]).encode("utf-8")
    assert len(FileParser().parse(data, "application/json")) == 2


@pytest.mark.parametrize("payload", [b"{not json", b"42", b'[{"a": 1}, "x"]'])
def test_malformed_json_is_fatal(payload: bytes) -> None:
    with pytest.raises(FileFormatError):
        FileParser().parse(payload, "leads.json")


def test_parse_excel_first_sheet(tmp_path) -> None:
    buffer = io.BytesIO()
    with pd.ExcelWriter(buffer, engine="openpyxl") as writer:
        pd.DataFrame(
            {
                "Müşteri Adı\nSoyadı": ["Ali Veli", "Zeynep Demir"],
                "Müşteri ID": ["001", None],
            }
        ).to_excel(writer, sheet_name="Leads", index=False)
        pd.DataFrame({"other": ["ignored"]}).to_excel(writer, sheet_name="Notes", index=False)

    path = tmp_path / "leads.xlsx"
    path.write_bytes(buffer.getvalue())

    rows = FileParser().parse_path(path)
    assert rows == [
        {"Müşteri Adı\nSoyadı": "Ali Veli", "Müşteri ID": "001"},
        {"Müşteri Adı\nSoyadı": "Zeynep Demir", "Müşteri ID": ""},
    ]


def test_corrupt_excel_is_fatal() -> None:
    with pytest.raises(FileFormatError):
        FileParser().parse(b"definitely not a workbook", "leads.xlsx")


def test_parse_path_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        FileParser().parse_path(tmp_path / "missing.csv")


def test_ragged_csv_row_is_trimmed_to_header(caplog: pytest.LogCaptureFixture) -> None:
    data = b"a,b,c\n1,2,3\n4,5,6,7,8\n9,10,11\n"
    with caplog.at_level("WARNING", logger="leads.parser"):
        rows = FileParser().parse(data, "leads.csv")

    assert rows == [
        {"a": "1", "b": "2", "c": "3"},
        {"a": "4", "b": "5", "c": "6"},
        {"a": "9", "b": "10", "c": "11"},
    ]
    assert "trimmed" in caplog.text


def test_short_csv_row_is_padded_with_blanks() -> None:
    rows = FileParser().parse(b"a,b,c\n1,2\n", "leads.csv")
    assert rows == [{"a": "1", "b": "2", "c": ""}]
