"""
In-memory lead store and personnel registry.

Used by the CLI and the test-suite; the hosted equivalent is
SupabaseLeadStore. Satisfies both the LeadStore and PersonnelRegistry
protocols of the importer, so one object can be passed for both.
"""

import logging
from dataclasses import dataclass, replace
from datetime import date, datetime
from typing import Dict, Iterable, List, Optional

from lead_engine import CanonicalLead
from leads.text import fold

logger = logging.getLogger(__name__)

DEFAULT_MONTHLY_TARGET = 50


@dataclass
class SalesRep:
    """A salesperson leads can be assigned to."""
    id: int
    name: str
    monthly_target: int = DEFAULT_MONTHLY_TARGET
    is_active: bool = True


def _project_key(name: Optional[str]) -> str:
    return " ".join(fold(name or "").split())


def _lead_date(lead: CanonicalLead) -> Optional[date]:
    if not lead.request_date:
        return None
    try:
        return date.fromisoformat(lead.request_date)
    except ValueError:
        return None


def filter_leads(
    leads: Iterable[CanonicalLead],
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    month: Optional[str] = None,
    year: Optional[str] = None,
    sales_rep: Optional[str] = None,
    lead_type: Optional[str] = None,
    status: Optional[str] = None,
    project: Optional[str] = None,
) -> List[CanonicalLead]:
    """
    Filter leads for reporting.

    Leads without a usable request date are kept by the date filters,
    so undated leads never silently disappear from reports.

    Args:
        leads: Leads to filter
        start_date / end_date: Inclusive ISO date bounds
        month: Two-digit month ("03")
        year: Four-digit year
        sales_rep: Exact assigned personnel name
        lead_type: "satis" or "kiralama"
        status: Exact status label
        project: Project name, matched ignoring case and diacritics;
            "all" disables the filter
    """
    start = date.fromisoformat(start_date) if start_date else None
    end = date.fromisoformat(end_date) if end_date else None
    project_key = _project_key(project) if project and project != "all" else ""

    filtered = []
    for lead in leads:
        lead_date = _lead_date(lead)
        if lead_date is not None:
            if year and str(lead_date.year) != year:
                continue
            if month and f"{lead_date.month:02d}" != month.zfill(2):
                continue
            if start and lead_date < start:
                continue
            if end and lead_date > end:
                continue

        if sales_rep and lead.assigned_personnel != sales_rep:
            continue
        if lead_type and lead.lead_type != lead_type:
            continue
        if status and lead.status != status:
            continue
        if project_key and _project_key(lead.project_name) != project_key:
            continue

        filtered.append(lead)

    return filtered


class MemoryLeadStore:
    """
    Dict-backed storage with sequential ids.

    Usage:
        store = MemoryLeadStore()
        result = LeadImporter().import_file("leads.xlsx", store, store)
        store.get_leads_by_filter(sales_rep="Ayşe Kaya", month="03", year="2024")
    """

    def __init__(self):
        self._leads: Dict[int, CanonicalLead] = {}
        self._sales_reps: Dict[int, SalesRep] = {}
        self._next_lead_id = 1
        self._next_rep_id = 1

    # ==========================================
    # LEAD OPERATIONS
    # ==========================================

    def get_leads(self) -> List[CanonicalLead]:
        return list(self._leads.values())

    def get_lead_by_id(self, lead_id: int) -> Optional[CanonicalLead]:
        return self._leads.get(lead_id)

    def create_lead(self, lead: CanonicalLead) -> CanonicalLead:
        """Store a lead and return it with id and created_at assigned."""
        persisted = replace(lead, id=self._next_lead_id, created_at=datetime.now())
        self._leads[persisted.id] = persisted
        self._next_lead_id += 1
        return persisted

    def clear_all_leads(self) -> None:
        self._leads.clear()
        self._next_lead_id = 1
        logger.info("Cleared all leads")

    def get_leads_by_filter(self, **filters: Optional[str]) -> List[CanonicalLead]:
        """Filter stored leads; keyword arguments as for filter_leads()."""
        return filter_leads(self._leads.values(), **filters)

    # ==========================================
    # SALES REP OPERATIONS
    # ==========================================

    def get_sales_reps(self) -> List[SalesRep]:
        return [rep for rep in self._sales_reps.values() if rep.is_active]

    def create_sales_rep(
        self,
        name: str,
        monthly_target: int = DEFAULT_MONTHLY_TARGET,
        is_active: bool = True,
    ) -> SalesRep:
        rep = SalesRep(
            id=self._next_rep_id,
            name=name,
            monthly_target=monthly_target,
            is_active=is_active,
        )
        self._sales_reps[rep.id] = rep
        self._next_rep_id += 1
        logger.info("Created sales rep: %s", name)
        return rep

    def create_sales_rep_by_name(self, name: str) -> SalesRep:
        """Return the existing rep with this name, or create one."""
        for rep in self._sales_reps.values():
            if rep.name == name:
                return rep
        return self.create_sales_rep(name)
