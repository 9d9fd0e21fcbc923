"""
Lead Importer - spreadsheet import with normalization and deduplication.

Designed for the exports a real-estate sales office actually produces:
- CRM lead reports (Excel, multi-line merged headers)
- Hand-maintained follow-up sheets (CSV, headers with or without diacritics)
- JSON dumps from the dashboard API (camelCase keys)

Usage:
    from database import MemoryLeadStore
    from leads import LeadImporter

    store = MemoryLeadStore()
    importer = LeadImporter()
    result = importer.import_file("leads.xlsx", store, store)

    print(result.summary())
    print(f"Skipped duplicates: {result.duplicate_info.skipped}")
"""

import logging
import os
import threading
import weakref
from contextlib import nullcontext
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Tuple, Union

from lead_engine import CanonicalLead, LeadType, LEGACY_DEFAULT_PROJECT

from .columns import (
    ASSIGNED_PERSONNEL_ALIASES,
    CUSTOMER_NAME_ALIASES,
    ColumnMapper,
    LAST_MEETING_RESULT_ALIASES,
    REQUEST_DATE_ALIASES,
)
from .dates import DateNormalizer
from .dedup import DuplicateIndex, DuplicateKey
from .parser import FileFormatError, FileParser, RawRow
from .status import StatusResolver
from .text import fold
from .validation import ValidationReporter, ValidationWarnings
from .webform import KIRALAMA_WORDS, SATIS_WORDS, WebFormExtractor

logger = logging.getLogger(__name__)


# =========================================
# Collaborators
# =========================================


class LeadStore(Protocol):
    """Persistence for leads; owns id assignment."""

    def get_leads(self) -> List[Any]:
        ...

    def create_lead(self, lead: CanonicalLead) -> Any:
        ...


class PersonnelRegistry(Protocol):
    """Sales staff directory; registering a known name is a no-op."""

    def create_sales_rep_by_name(self, name: str) -> Any:
        ...


# =========================================
# Configuration
# =========================================


@dataclass
class ImportConfig:
    """
    Import behaviour switches.

    Can be initialized from environment variables:
        config = ImportConfig.from_env()
    """

    # None leaves projectName empty when nothing identifies the project
    default_project_name: Optional[str] = None
    # Rows inspected for column presence; None = whole batch, 1 = first row only
    presence_sample_size: Optional[int] = None
    serialize_imports: bool = True
    csv_encoding: str = "utf-8-sig"

    @classmethod
    def from_env(cls) -> "ImportConfig":
        """
        Load configuration from environment variables.

        Environment variables:
            LEAD_IMPORT_DEFAULT_PROJECT: Project stamped on leads without one
            LEAD_IMPORT_PRESENCE_SAMPLE: Rows checked for column presence
            LEAD_IMPORT_SERIALIZE: Serialize imports per store (default: true)
            LEAD_IMPORT_CSV_ENCODING: CSV encoding (default: utf-8-sig)
        """
        sample = os.environ.get("LEAD_IMPORT_PRESENCE_SAMPLE", "").strip()

        return cls(
            default_project_name=os.environ.get("LEAD_IMPORT_DEFAULT_PROJECT") or None,
            presence_sample_size=int(sample) if sample else None,
            serialize_imports=os.environ.get("LEAD_IMPORT_SERIALIZE", "true").lower() == "true",
            csv_encoding=os.environ.get("LEAD_IMPORT_CSV_ENCODING", "utf-8-sig"),
        )

    @classmethod
    def legacy(cls) -> "ImportConfig":
        """Settings reproducing the legacy dashboard importer."""
        return cls(default_project_name=LEGACY_DEFAULT_PROJECT, presence_sample_size=1)


# =========================================
# Results
# =========================================


@dataclass
class DuplicateInfo:
    """Per-bucket duplicate accounting for one import."""
    by_customer_id: int = 0
    by_contact_id: int = 0
    by_name: int = 0
    skipped: int = 0

    @property
    def total(self) -> int:
        return self.by_customer_id + self.by_contact_id + self.by_name

    def record(self, key: DuplicateKey) -> None:
        if key is DuplicateKey.CUSTOMER_ID:
            self.by_customer_id += 1
        elif key is DuplicateKey.CONTACT_ID:
            self.by_contact_id += 1
        else:
            self.by_name += 1
        self.skipped += 1

    @property
    def message(self) -> str:
        if not self.skipped:
            return "No duplicates found"
        return (
            f"Found {self.skipped} duplicate records: "
            f"{self.by_customer_id} by Customer ID, "
            f"{self.by_contact_id} by Contact ID, "
            f"{self.by_name} by Name"
        )


@dataclass
class ImportResult:
    """Results from a lead import operation."""
    imported: int = 0
    leads: List[CanonicalLead] = field(default_factory=list)
    error_details: List[Dict] = field(default_factory=list)
    duplicate_info: DuplicateInfo = field(default_factory=DuplicateInfo)
    validation_warnings: ValidationWarnings = field(default_factory=ValidationWarnings)
    cancelled: bool = False

    @property
    def errors(self) -> int:
        return len(self.error_details)

    @property
    def total_processed(self) -> int:
        return self.imported + self.duplicate_info.skipped + self.errors

    def summary(self) -> str:
        message = f"Successfully imported {self.imported} leads"
        if self.errors:
            message += f" with {self.errors} errors"
        if self.duplicate_info.skipped:
            message += f". Skipped {self.duplicate_info.skipped} duplicates"
        if self.cancelled:
            message += ". Import was cancelled before the end of the file"
        return message

    def to_dict(self) -> Dict[str, Any]:
        """Response body for the import endpoint."""
        payload: Dict[str, Any] = {
            "message": self.summary(),
            "imported": self.imported,
            "errors": self.errors,
            "errorDetails": list(self.error_details),
            "validationWarnings": self.validation_warnings.to_dict(),
            "duplicateInfo": {
                "byCustomerId": self.duplicate_info.by_customer_id,
                "byContactId": self.duplicate_info.by_contact_id,
                "byName": self.duplicate_info.by_name,
                "total": self.duplicate_info.total,
                "skipped": self.duplicate_info.skipped,
                "imported": self.imported,
                "message": self.duplicate_info.message,
            },
        }
        if self.cancelled:
            payload["cancelled"] = True
        return payload


# =========================================
# Per-store serialization
# =========================================

class _StoreLock:
    """Weak-referenceable wrapper around threading.Lock."""

    def __init__(self):
        self._lock = threading.Lock()

    def __enter__(self) -> "_StoreLock":
        self._lock.acquire()
        return self

    def __exit__(self, *exc_info) -> None:
        self._lock.release()


_locks_guard = threading.Lock()
_store_locks: "weakref.WeakKeyDictionary[Any, _StoreLock]" = weakref.WeakKeyDictionary()
# Entries live only while an import holds the lock, and a running import keeps
# its store alive, so a recycled id() never inherits a stale lock.
_store_locks_by_id: "weakref.WeakValueDictionary[int, _StoreLock]" = weakref.WeakValueDictionary()


def _lock_for(store: Any) -> _StoreLock:
    with _locks_guard:
        try:
            lock = _store_locks.get(store)
            if lock is None:
                lock = _store_locks[store] = _StoreLock()
        except TypeError:
            # Unhashable or not weak-referenceable stores
            lock = _store_locks_by_id.get(id(store))
            if lock is None:
                lock = _store_locks_by_id[id(store)] = _StoreLock()
        return lock


# =========================================
# Importer
# =========================================


def _explicit_lead_type(value: str) -> Optional[str]:
    """Interpret a "Lead Tipi" column value."""
    folded = fold(value)
    if "sale" in folded or any(word in folded for word in SATIS_WORDS):
        return LeadType.SATIS.value
    if "rent" in folded or any(word in folded for word in KIRALAMA_WORDS):
        return LeadType.KIRALAMA.value
    return None


class LeadImporter:
    """
    Imports spreadsheet rows as canonical leads.

    Features:
    - Resolves Turkish header variants to canonical fields
    - Mines WebForm notes for lead type and project
    - Normalizes request dates to ISO format
    - Takes status only from the final meeting outcome column
    - Skips duplicates by customer ID, contact ID or name
    - Registers every salesperson before leads are created
    - Records per-row errors without aborting the batch
    """

    def __init__(
        self,
        config: Optional[ImportConfig] = None,
        custom_aliases: Optional[Dict[str, List[str]]] = None,
    ):
        """
        Initialize the importer.

        Args:
            config: Import behaviour; defaults to ImportConfig()
            custom_aliases: Additional header spellings per field
        """
        self.config = config or ImportConfig()
        self.mapper = ColumnMapper(custom_aliases)
        self.extractor = WebFormExtractor()
        self.dates = DateNormalizer()
        self.status_resolver = StatusResolver(self.mapper)
        self.parser = FileParser(csv_encoding=self.config.csv_encoding)

    # =========================================
    # Row mapping
    # =========================================

    def build_lead(self, row: Mapping[str, Any]) -> CanonicalLead:
        """Map one raw row to a CanonicalLead (integer fields not yet coerced)."""
        values = self.mapper.map_fields(row)

        lead_type = _explicit_lead_type(values["lead_type"]) or LeadType.KIRALAMA.value
        signals = self.extractor.extract(values["web_form_note"])
        if signals.lead_type:
            lead_type = signals.lead_type

        project_name = (
            signals.project_name
            or values["project_name"]
            or self.config.default_project_name
        )

        optional = {
            name: (value or None)
            for name, value in values.items()
            if name not in ("customer_name", "request_date", "assigned_personnel", "lead_type", "project_name")
        }

        return CanonicalLead(
            customer_name=values["customer_name"],
            request_date=self.dates.normalize(values["request_date"]),
            assigned_personnel=values["assigned_personnel"],
            lead_type=lead_type,
            status=self.status_resolver.resolve(row),
            project_name=project_name or None,
            **optional,
        )

    # =========================================
    # Batch import
    # =========================================

    def import_batch(
        self,
        data: bytes,
        declared_type: str,
        lead_store: LeadStore,
        personnel_registry: Optional[PersonnelRegistry],
        existing_leads: Optional[Iterable[Any]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ImportResult:
        """
        Parse an upload and import its rows.

        Args:
            data: Uploaded file contents
            declared_type: Filename or mimetype of the upload
            lead_store: Receives accepted leads
            personnel_registry: Receives every salesperson name in the file
            existing_leads: Duplicate base set; defaults to lead_store.get_leads()
            cancel_event: Checked before each row; stops the import when set

        Raises:
            FileFormatError: Unsupported or unreadable upload (nothing imported)
        """
        rows = self.parser.parse(data, declared_type)
        return self.import_rows(
            rows,
            lead_store,
            personnel_registry,
            existing_leads=existing_leads,
            cancel_event=cancel_event,
        )

    def import_file(
        self,
        filepath: Union[str, Path],
        lead_store: LeadStore,
        personnel_registry: Optional[PersonnelRegistry],
        cancel_event: Optional[threading.Event] = None,
    ) -> ImportResult:
        """Import leads from a file on disk."""
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"Lead file not found: {filepath}")

        return self.import_batch(
            filepath.read_bytes(),
            filepath.name,
            lead_store,
            personnel_registry,
            cancel_event=cancel_event,
        )

    def import_rows(
        self,
        rows: List[RawRow],
        lead_store: LeadStore,
        personnel_registry: Optional[PersonnelRegistry],
        existing_leads: Optional[Iterable[Any]] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> ImportResult:
        """Import already-parsed rows in file order."""
        with self._serialized(lead_store):
            if existing_leads is None:
                existing_leads = lead_store.get_leads()
            index = DuplicateIndex(self._as_lead(lead) for lead in existing_leads)

            reporter = ValidationReporter(total_records=len(rows), mapper=self.mapper)
            reporter.column_presence(rows, self.config.presence_sample_size)

            if personnel_registry is not None:
                self._register_personnel(rows, personnel_registry)

            result = ImportResult()
            for i, row in enumerate(rows):
                if cancel_event is not None and cancel_event.is_set():
                    logger.warning("Import cancelled at row %d of %d", i + 1, len(rows))
                    result.cancelled = True
                    break

                try:
                    lead = self.build_lead(row)

                    if lead.is_blank:
                        logger.debug("Row %d: no customer or salesperson, skipped", i + 1)
                        continue

                    duplicate = index.classify(lead)
                    if duplicate is not None:
                        result.duplicate_info.record(duplicate)
                        logger.debug(
                            "Row %d: duplicate by %s skipped: %s (ID: %s)",
                            i + 1,
                            duplicate.value,
                            lead.customer_name,
                            lead.customer_id,
                        )
                        continue

                    reporter.observe(row, lead)

                    lead = lead.coerce()
                    lead_store.create_lead(lead)

                except Exception as e:
                    logger.warning("Row %d failed: %s", i + 1, e)
                    result.error_details.append({"row": i + 1, "error": str(e)})
                    continue

                index.add(lead)
                result.leads.append(lead)
                result.imported += 1

            result.validation_warnings = reporter.warnings

        logger.info(result.summary())
        return result

    def _register_personnel(self, rows: List[RawRow], registry: PersonnelRegistry) -> None:
        """Register each distinct salesperson once, before any lead exists."""
        names: Dict[str, None] = {}
        for row in rows:
            name = self.mapper.resolve(row, ASSIGNED_PERSONNEL_ALIASES).strip()
            if name:
                names.setdefault(name, None)

        for name in names:
            try:
                registry.create_sales_rep_by_name(name)
            except Exception as e:
                logger.warning("Could not register sales rep %s: %s", name, e)

        logger.debug("Registered %d sales reps", len(names))

    def _serialized(self, lead_store: Any):
        if not self.config.serialize_imports:
            return nullcontext()
        return _lock_for(lead_store)

    @staticmethod
    def _as_lead(lead: Any) -> CanonicalLead:
        if isinstance(lead, CanonicalLead):
            return lead
        return CanonicalLead.from_record(lead)

    # =========================================
    # Pre-flight validation
    # =========================================

    def validate_file(self, filepath: Union[str, Path]) -> Tuple[bool, List[str]]:
        """
        Validate a lead file without importing.

        Returns:
            Tuple of (is_valid, list of issues)
        """
        issues = []
        filepath = Path(filepath)

        if not filepath.exists():
            return False, ["File not found"]

        try:
            rows = self.parser.parse_path(filepath)
        except FileFormatError as e:
            return False, [str(e)]

        if not rows:
            return False, ["No rows found"]

        if not any(
            self.mapper.has_value(row, CUSTOMER_NAME_ALIASES)
            or self.mapper.has_value(row, ASSIGNED_PERSONNEL_ALIASES)
            for row in rows
        ):
            issues.append("No customer name or assigned personnel column found")

        if not any(self.mapper.has_value(row, REQUEST_DATE_ALIASES) for row in rows):
            issues.append("Missing request date column")

        if not any(self.mapper.has_value(row, LAST_MEETING_RESULT_ALIASES) for row in rows):
            issues.append("Missing final meeting outcome column; every lead would be 'Tanımsız'")

        # Check first few rows
        for i, row in enumerate(rows[:5]):
            raw_date = self.mapper.resolve(row, REQUEST_DATE_ALIASES)
            if raw_date and not self.dates.normalize(raw_date):
                issues.append(f"Row {i + 1}: Unrecognized date format '{raw_date}'")

        return len(issues) == 0, issues


# CLI interface
def _cli() -> int:
    import argparse
    import json

    parser = argparse.ArgumentParser(description="Import real-estate leads from Excel, CSV or JSON")
    parser.add_argument("filepath", help="Path to lead file")
    parser.add_argument("--validate-only", action="store_true", help="Only validate, don't import")
    parser.add_argument("--store", choices=["memory", "supabase"], default="memory")
    parser.add_argument(
        "--legacy-project-default",
        action="store_true",
        help=f"Stamp '{LEGACY_DEFAULT_PROJECT}' on leads without a project",
    )
    parser.add_argument(
        "--first-row-presence",
        action="store_true",
        help="Check column presence on the first row only",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    config = ImportConfig.from_env()
    if args.legacy_project_default:
        config.default_project_name = LEGACY_DEFAULT_PROJECT
    if args.first_row_presence:
        config.presence_sample_size = 1

    importer = LeadImporter(config=config)

    if args.validate_only:
        is_valid, issues = importer.validate_file(args.filepath)

        if is_valid:
            print("File is valid")
            return 0
        print("Validation issues:")
        for issue in issues:
            print(f"  - {issue}")
        return 1

    if args.store == "supabase":
        from database import SupabaseLeadStore

        try:
            store = SupabaseLeadStore()
        except ValueError as e:
            print(f"Error: {e}")
            return 1
    else:
        from database import MemoryLeadStore

        store = MemoryLeadStore()

    try:
        result = importer.import_file(args.filepath, store, store)
    except (FileFormatError, FileNotFoundError) as e:
        print(f"Import failed: {e}")
        return 1

    print(result.summary())
    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))

    if result.error_details:
        print("\nFirst 5 errors:")
        for error in result.error_details[:5]:
            print(f"  Row {error['row']}: {error['error']}")

    return 0


if __name__ == "__main__":
    raise SystemExit(_cli())
