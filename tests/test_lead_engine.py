from __future__ import annotations

from datetime import datetime

import pytest

from lead_engine import FIELD_NAMES, CanonicalLead, RowMappingError


def test_defaults() -> None:
    lead = CanonicalLead()
    assert lead.lead_type == "kiralama"
    assert lead.status == "Tanımsız"
    assert lead.project_name is None
    assert lead.is_blank


def test_record_uses_camel_case_names() -> None:
    record = CanonicalLead(customer_name="Ali Veli", info_form_location_1="Web").to_record()
    assert record["customerName"] == "Ali Veli"
    assert record["infoFormLocation1"] == "Web"
    assert set(record) == set(FIELD_NAMES.values())


def test_from_record_accepts_stored_rows() -> None:
    lead = CanonicalLead.from_record(
        {
            "id": 4,
            "customerName": "Ali Veli",
            "customerId": "C-1",
            "leadType": None,
            "createdAt": "2024-03-15T10:00:00",
            "unknownColumn": "x",
        }
    )
    assert lead.id == 4
    assert lead.customer_id == "C-1"
    assert lead.lead_type == "kiralama"
    assert lead.status == "Tanımsız"
    assert lead.created_at == datetime(2024, 3, 15, 10, 0)


@pytest.mark.parametrize(("raw", "expected"), [("3", 3), ("3.0", 3), (2.0, 2), ("", None), (None, None), (" 12 ", 12)])
def test_coerce_integer_fields(raw, expected) -> None:
    assert CanonicalLead(sale_count=raw).coerce().sale_count == expected


def test_coerce_rejects_non_numeric() -> None:
    with pytest.raises(RowMappingError, match="saleCount"):
        CanonicalLead(sale_count="abc").coerce()
    with pytest.raises(RowMappingError, match="daysToResponse"):
        CanonicalLead(days_to_response=1.5).coerce()
