"""
WebForm Extractor - mines the free-text WebForm note for lead signals.

Notes captured by the online inquiry form look like:

    "Ad Soyad : ... / Ilgilendigi Gayrimenkul Tipi :Kiralık / Model Sanayi Merkezi"

Two independent rule cascades run over the same note, one for the lead type
and one for the project name. Within each cascade the first matching rule wins.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from lead_engine import LeadType

from .text import fold

logger = logging.getLogger(__name__)


@dataclass
class WebFormSignals:
    """Signals derived from a WebForm note. Never persisted as-is."""
    project_name: Optional[str] = None
    lead_type: Optional[str] = None


_TR_UPPER = "A-ZÇĞIŞÖÜİ"
_TR_LETTERS = "A-Za-zÇĞIŞÖÜİçğışöüi"

PROPERTY_TYPE_RE = re.compile(
    r"Ilgilendigi\s+Gayrimenkul\s+Tipi\s*:\s*([^/\n]*)", re.IGNORECASE
)

EXACT_LEAD_TYPES = {
    "kiralik": LeadType.KIRALAMA.value,
    "satilik": LeadType.SATIS.value,
}

# Folded spelling variants seen in hand-typed notes. The kiralama list is
# checked first, so a note mentioning both words classifies as kiralama.
KIRALAMA_WORDS = ["kiralik", "kiralk", "kirelik", "kiralama", "kirala"]
SATIS_WORDS = ["satilik", "satlik", "satilk", "satis", "satilir"]

PROJECT_PATTERNS: List[re.Pattern] = [
    # Known flagship project
    re.compile(r"/\s*(Model\s+Sanayi\s+Merkezi)\s*$", re.IGNORECASE),
    # Any "X Sanayi Merkezi"
    re.compile(rf"/\s*([{_TR_LETTERS}]+\s+Sanayi\s+Merkezi)\s*$", re.IGNORECASE),
    # Names ending in a real-estate suffix
    re.compile(
        rf"/\s*([{_TR_LETTERS}][{_TR_LETTERS}\s]*"
        r"(?:Merkezi|Center|Residence|Plaza|Tower|City|Park|Proje|Konut|Sitesi|Complex|Mall|AVM))\s*$",
        re.IGNORECASE,
    ),
    # Whatever follows the last slash
    re.compile(rf"/\s*([{_TR_LETTERS}][{_TR_LETTERS}\s]{{2,40}})\s*$", re.IGNORECASE),
    # Older note formats
    re.compile(r"\b(Vadi\s+İstanbul\s+Residence)\b", re.IGNORECASE),
    re.compile(r"\b(İstanbul\s+Park\s+Residence)\b", re.IGNORECASE),
    re.compile(r"\b(Beşiktaş\s+Tower)\b", re.IGNORECASE),
]

STOP_WORDS_RE = re.compile(r"\b(?:için|hakkında|ile|ilgili|ve|or|and)\b", re.IGNORECASE)

FALLBACK_KEYWORDS = [
    "proje",
    "konut",
    "residence",
    "plaza",
    "tower",
    "city",
    "park",
    "sitesi",
    "daire",
    "ev",
    "villa",
]

MIN_PROJECT_NAME_LENGTH = 3


def _clean_candidate(candidate: str) -> str:
    candidate = candidate.strip().strip("/").strip()
    candidate = STOP_WORDS_RE.sub("", candidate)
    return " ".join(candidate.split())


class WebFormExtractor:
    """
    Extracts lead type and project name from WebForm notes.

    Usage:
        signals = WebFormExtractor().extract(note)
        if signals.lead_type:
            lead.lead_type = signals.lead_type
    """

    def __init__(
        self,
        project_patterns: Optional[List[re.Pattern]] = None,
        fallback_keywords: Optional[List[str]] = None,
    ):
        self.project_patterns = project_patterns or PROJECT_PATTERNS
        self.fallback_keywords = fallback_keywords or FALLBACK_KEYWORDS
        self._keyword_patterns = [
            (
                re.compile(rf"\b[{_TR_UPPER}][{_TR_LETTERS}]+\s+(?i:{re.escape(kw)})\b"),
                re.compile(rf"\b(?i:{re.escape(kw)})\s+[{_TR_UPPER}][{_TR_LETTERS}]+\b"),
            )
            for kw in self.fallback_keywords
        ]

    def extract(self, note: Optional[str]) -> WebFormSignals:
        if not note or not isinstance(note, str) or not note.strip():
            return WebFormSignals()

        note = note.strip()
        signals = WebFormSignals(
            project_name=self.extract_project_name(note),
            lead_type=self.extract_lead_type(note),
        )
        logger.debug(
            "WebForm note %r -> project=%r lead_type=%r",
            note[:60],
            signals.project_name,
            signals.lead_type,
        )
        return signals

    def extract_lead_type(self, note: str) -> Optional[str]:
        match = PROPERTY_TYPE_RE.search(note)
        if match:
            declared = fold(match.group(1)).strip()
            if declared in EXACT_LEAD_TYPES:
                return EXACT_LEAD_TYPES[declared]

        folded = fold(note)
        if any(word in folded for word in KIRALAMA_WORDS):
            return LeadType.KIRALAMA.value
        if any(word in folded for word in SATIS_WORDS):
            return LeadType.SATIS.value
        return None

    def extract_project_name(self, note: str) -> Optional[str]:
        for pattern in self.project_patterns:
            match = pattern.search(note)
            if not match:
                continue
            candidate = _clean_candidate(match.group(1) if match.groups() else match.group(0))
            if len(candidate) >= MIN_PROJECT_NAME_LENGTH:
                return candidate

        for before, after in self._keyword_patterns:
            match = before.search(note) or after.search(note)
            if match:
                return match.group(0).strip()

        return None
