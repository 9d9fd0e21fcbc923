"""
Status Resolver - derives a lead's status from the final meeting outcome.

Only the "SON GORUSME SONUCU" column family may set a status. Call notes,
meeting notes and sale flags are deliberately ignored even when populated.
"""

from typing import Any, Mapping, Optional

from lead_engine import UNDEFINED_STATUS

from .columns import ColumnMapper, LAST_MEETING_RESULT_ALIASES


class StatusResolver:
    """Reads the outcome column verbatim; the vocabulary is open per dataset."""

    def __init__(self, mapper: Optional[ColumnMapper] = None):
        self.mapper = mapper or ColumnMapper()

    def resolve(self, row: Mapping[str, Any]) -> str:
        outcome = self.mapper.resolve(row, LAST_MEETING_RESULT_ALIASES)
        return outcome or UNDEFINED_STATUS
