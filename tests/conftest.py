from __future__ import annotations

from pathlib import Path

import pytest

from database import MemoryLeadStore
from leads import LeadImporter

WEBFORM_NOTE = (
    "Ad Soyad : Ali Veli / Telefon : 0532 000 00 00 / "
    "Ilgilendigi Gayrimenkul Tipi :Kiralık / Model Sanayi Merkezi"
)


def csv_bytes(header: list[str], rows: list[list[str]]) -> bytes:
    lines = [",".join(header)] + [",".join(row) for row in rows]
    return ("\n".join(lines) + "\n").encode("utf-8")


@pytest.fixture()
def store() -> MemoryLeadStore:
    return MemoryLeadStore()


@pytest.fixture()
def importer() -> LeadImporter:
    return LeadImporter()


@pytest.fixture()
def lead_csv(tmp_path: Path) -> Path:
    path = tmp_path / "leads.csv"
    path.write_bytes(
        csv_bytes(
            ["Müşteri ID", "İletişim ID", "Müşteri Adı Soyadı", "Talep Geliş Tarihi", "Atanan Personel", "SON GORUSME SONUCU"],
            [
                ["C-001", "K-001", "Ali Veli", "15.03.2024", "Ayşe Kaya", "Olumlu"],
                ["C-002", "K-002", "Zeynep Demir", "2024-3-5", "Mehmet Yılmaz", ""],
                ["C-003", "K-003", "Hasan Çelik", "01/04/2024", "Ayşe Kaya", "Olumsuz"],
            ],
        )
    )
    return path
