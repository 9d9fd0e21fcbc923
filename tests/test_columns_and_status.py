from __future__ import annotations

from leads import ColumnMapper, StatusResolver
from leads.columns import (
    ASSIGNED_PERSONNEL_ALIASES,
    CUSTOMER_NAME_ALIASES,
    LAST_MEETING_RESULT_ALIASES,
    REQUEST_DATE_ALIASES,
)


def test_resolve_customer_name_by_canonical_header() -> None:
    mapper = ColumnMapper()
    assert mapper.resolve({"Müşteri Adı Soyadı": "Ali Veli"}, CUSTOMER_NAME_ALIASES) == "Ali Veli"


def test_resolve_multiline_merged_header() -> None:
    mapper = ColumnMapper()
    row = {"Talep Geliş\nTarihi": "15.03.2024"}
    assert mapper.resolve(row, REQUEST_DATE_ALIASES) == "15.03.2024"


def test_resolve_ignores_case_diacritics_and_spacing() -> None:
    mapper = ColumnMapper()
    assert mapper.resolve({"MÜŞTERİ ADI  SOYADI": "Ali Veli"}, CUSTOMER_NAME_ALIASES) == "Ali Veli"
    assert mapper.resolve({"Talep Gelis\r\nTarihi": "2024-01-01"}, REQUEST_DATE_ALIASES) == "2024-01-01"


def test_resolve_skips_blank_aliases_in_priority_order() -> None:
    mapper = ColumnMapper()
    row = {"Müşteri Adı Soyadı": "   ", "Müşteri Adı": "Zeynep", "name": "ignored"}
    assert mapper.resolve(row, CUSTOMER_NAME_ALIASES) == "Zeynep"


def test_resolve_missing_value_is_empty_string() -> None:
    mapper = ColumnMapper()
    assert mapper.resolve({"Başka": "x"}, ASSIGNED_PERSONNEL_ALIASES) == ""
    assert mapper.resolve({}, ASSIGNED_PERSONNEL_ALIASES) == ""


def test_numeric_cells_render_without_trailing_zero() -> None:
    values = ColumnMapper().map_fields({"Müşteri ID": 12345.0, "Satış Adedi": 2})
    assert values["customer_id"] == "12345"
    assert values["sale_count"] == "2"


def test_custom_aliases_extend_builtin_lists() -> None:
    mapper = ColumnMapper(custom_aliases={"customer_name": ["Client"]})
    assert mapper.map_fields({"Client": "Ayşe"})["customer_name"] == "Ayşe"


def test_status_comes_only_from_final_outcome_column() -> None:
    resolver = StatusResolver()
    row = {
        "Arama Notu": "Müşteri reddetti, olumsuz",
        "Dönüş Görüşme Sonucu": "Olumsuz",
        "SON GORUSME SONUCU": "",
    }
    assert resolver.resolve(row) == "Tanımsız"


def test_status_is_open_vocabulary_and_trimmed() -> None:
    resolver = StatusResolver()
    assert resolver.resolve({"SON GÖRÜŞME SONUCU": "  Tekrar Aranacak "}) == "Tekrar Aranacak"
    assert resolver.resolve({"lastMeetingResult": "Olumlu"}) == "Olumlu"


def test_status_aliases_include_multiline_header() -> None:
    assert ColumnMapper().has_value({"SON GORUSME\nSONUCU": "Olumlu"}, LAST_MEETING_RESULT_ALIASES)
