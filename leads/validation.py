"""
Validation Reporter - batch-level data quality warnings.

Warnings never block persistence; they are surfaced next to the import
result so the uploader can fix the sheet.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from lead_engine import CanonicalLead, UNDEFINED_STATUS

from .columns import ColumnMapper, LAST_MEETING_RESULT_ALIASES, REQUEST_DATE_ALIASES
from .dates import SUPPORTED_DATE_FORMATS


@dataclass
class ValidationWarnings:
    """Counters and column-presence flags for one import batch."""
    date_format_issues: int = 0
    missing_status_count: int = 0
    total_records: int = 0
    date_column_present: bool = False
    status_column_present: bool = False
    supported_date_formats: List[str] = field(default_factory=lambda: list(SUPPORTED_DATE_FORMATS))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dateFormatIssues": self.date_format_issues,
            "missingStatusCount": self.missing_status_count,
            "totalRecords": self.total_records,
            "supportedDateFormats": list(self.supported_date_formats),
            "statusColumnPresent": self.status_column_present,
            "dateColumnPresent": self.date_column_present,
        }


class ValidationReporter:
    """
    Accumulates warnings over a batch.

    Usage:
        reporter = ValidationReporter(total_records=len(rows))
        reporter.column_presence(rows)
        for row, lead in accepted:
            reporter.observe(row, lead)
        reporter.warnings.to_dict()
    """

    def __init__(self, total_records: int = 0, mapper: Optional[ColumnMapper] = None):
        self.mapper = mapper or ColumnMapper()
        self.warnings = ValidationWarnings(total_records=total_records)

    def observe(self, row: Mapping[str, Any], lead: CanonicalLead) -> None:
        if not lead.request_date:
            self.warnings.date_format_issues += 1
        if not lead.status or lead.status == UNDEFINED_STATUS:
            self.warnings.missing_status_count += 1

    def column_presence(
        self,
        rows: Sequence[Mapping[str, Any]],
        sample_size: Optional[int] = None,
    ) -> None:
        """
        Flag whether the date and status columns carry any value.

        Args:
            rows: Batch rows in file order
            sample_size: Rows to inspect from the top; None scans the whole
                batch, 1 matches the legacy first-row-only check
        """
        sample = rows if sample_size is None else rows[:sample_size]

        self.warnings.date_column_present = any(
            self.mapper.has_value(row, REQUEST_DATE_ALIASES) for row in sample
        )
        self.warnings.status_column_present = any(
            self.mapper.has_value(row, LAST_MEETING_RESULT_ALIASES) for row in sample
        )
