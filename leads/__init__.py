"""
Lead import module for the real-estate sales dashboard.

Handles parsing, normalizing, validating, and deduplicating leads from
spreadsheet exports.
"""

from lead_engine import CanonicalLead, RowMappingError

from .columns import ColumnMapper
from .dates import DateNormalizer, normalize_date
from .dedup import DeduplicationEngine, DuplicateIndex, DuplicateKey
from .importer import (
    DuplicateInfo,
    ImportConfig,
    ImportResult,
    LeadImporter,
)
from .parser import FileFormatError, FileParser
from .status import StatusResolver
from .validation import ValidationReporter, ValidationWarnings
from .webform import WebFormExtractor, WebFormSignals

__all__ = [
    "CanonicalLead",
    "ColumnMapper",
    "DateNormalizer",
    "DeduplicationEngine",
    "DuplicateIndex",
    "DuplicateInfo",
    "DuplicateKey",
    "FileFormatError",
    "FileParser",
    "ImportConfig",
    "ImportResult",
    "LeadImporter",
    "RowMappingError",
    "StatusResolver",
    "ValidationReporter",
    "ValidationWarnings",
    "WebFormExtractor",
    "WebFormSignals",
    "normalize_date",
]
