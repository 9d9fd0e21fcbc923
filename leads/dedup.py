"""
Deduplication Engine - decides whether a lead was already imported.

Keys are checked in a fixed cascade and the first hit wins:

1. customer ID (exact)
2. contact ID (exact)
3. customer name (trimmed, case-insensitive, longer than 3 characters)

A lead matching on both customer ID and name is counted once, under
customer ID.
"""

from enum import Enum
from typing import Iterable, Optional, Set

from lead_engine import CanonicalLead

MIN_NAME_LENGTH = 4


class DuplicateKey(Enum):
    """Bucket a duplicate is tallied under."""
    CUSTOMER_ID = "customerId"
    CONTACT_ID = "contactId"
    NAME = "name"


def _id_key(value: Optional[str]) -> str:
    return str(value) if value not in (None, "") else ""


def _name_key(value: Optional[str]) -> str:
    name = (value or "").strip().lower()
    return name if len(name) >= MIN_NAME_LENGTH else ""


class DuplicateIndex:
    """
    Hash index over known leads, one set per key.

    The orchestrator adds every accepted lead so later rows of the same file
    are checked against earlier ones.
    """

    def __init__(self, leads: Iterable[CanonicalLead] = ()):
        self.customer_ids: Set[str] = set()
        self.contact_ids: Set[str] = set()
        self.names: Set[str] = set()
        for lead in leads:
            self.add(lead)

    def add(self, lead: CanonicalLead) -> None:
        customer_id = _id_key(lead.customer_id)
        if customer_id:
            self.customer_ids.add(customer_id)

        contact_id = _id_key(lead.contact_id)
        if contact_id:
            self.contact_ids.add(contact_id)

        name = _name_key(lead.customer_name)
        if name:
            self.names.add(name)

    def classify(self, candidate: CanonicalLead) -> Optional[DuplicateKey]:
        customer_id = _id_key(candidate.customer_id)
        if customer_id and customer_id in self.customer_ids:
            return DuplicateKey.CUSTOMER_ID

        contact_id = _id_key(candidate.contact_id)
        if contact_id and contact_id in self.contact_ids:
            return DuplicateKey.CONTACT_ID

        name = _name_key(candidate.customer_name)
        if name and name in self.names:
            return DuplicateKey.NAME

        return None


class DeduplicationEngine:
    """Stateless entry point; see DuplicateIndex for batch use."""

    def classify(
        self,
        candidate: CanonicalLead,
        existing: Iterable[CanonicalLead],
    ) -> Optional[DuplicateKey]:
        return DuplicateIndex(existing).classify(candidate)

    def index(self, existing: Iterable[CanonicalLead]) -> DuplicateIndex:
        return DuplicateIndex(existing)
