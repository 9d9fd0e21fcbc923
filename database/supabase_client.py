"""
Supabase Lead Store

Hosted storage for imported leads and the sales team:
- leads: one row per CanonicalLead, camelCase columns as produced by
  CanonicalLead.to_record()
- sales_reps: name, monthlyTarget, isActive

Implements the same interface as MemoryLeadStore, so the importer can write
to either without knowing which one it has.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from supabase import create_client, Client

from lead_engine import CanonicalLead

from .memory import DEFAULT_MONTHLY_TARGET, filter_leads

logger = logging.getLogger(__name__)

LEADS_TABLE = "leads"
SALES_REPS_TABLE = "sales_reps"

# Supabase caps a single select; get_leads pages through the table
PAGE_SIZE = 1000


@dataclass
class DatabaseConfig:
    """Supabase connection configuration."""
    url: str
    key: str  # service key; imports write to both tables

    @classmethod
    def from_env(cls) -> "DatabaseConfig":
        """Load config from environment variables."""
        url = os.getenv("SUPABASE_URL")
        key = os.getenv("SUPABASE_KEY")

        if not url or not key:
            raise ValueError(
                "Missing Supabase credentials. Set SUPABASE_URL and SUPABASE_KEY environment variables."
            )

        return cls(url=url, key=key)


class SupabaseLeadStore:
    """
    Lead store and personnel registry backed by Supabase.

    Usage:
        store = SupabaseLeadStore()
        LeadImporter().import_file("leads.xlsx", store, store)
    """

    def __init__(self, config: Optional[DatabaseConfig] = None, client: Optional[Client] = None):
        """
        Initialize the store.

        Args:
            config: Database configuration. If None, loads from environment.
            client: Pre-built Supabase client; skips config entirely
        """
        if client is None:
            if config is None:
                config = DatabaseConfig.from_env()
            client = create_client(config.url, config.key)

        self.client: Client = client

    # ==========================================
    # LEAD OPERATIONS
    # ==========================================

    def get_leads(self) -> List[CanonicalLead]:
        """Fetch every stored lead, one page at a time."""
        leads: List[CanonicalLead] = []
        offset = 0

        while True:
            result = (
                self.client.table(LEADS_TABLE)
                .select("*")
                .order("id")
                .range(offset, offset + PAGE_SIZE - 1)
                .execute()
            )
            page = result.data or []
            leads.extend(CanonicalLead.from_record(record) for record in page)

            if len(page) < PAGE_SIZE:
                break
            offset += PAGE_SIZE

        logger.debug("Loaded %d leads from Supabase", len(leads))
        return leads

    def get_lead_by_id(self, lead_id: int) -> Optional[CanonicalLead]:
        result = self.client.table(LEADS_TABLE).select("*").eq("id", lead_id).execute()
        return CanonicalLead.from_record(result.data[0]) if result.data else None

    def create_lead(self, lead: CanonicalLead) -> CanonicalLead:
        """
        Insert a lead.

        Returns:
            The stored lead, with id and created_at set by the database
        """
        record = lead.to_record()
        record.pop("id", None)
        record.pop("createdAt", None)

        result = self.client.table(LEADS_TABLE).insert(record).execute()
        return CanonicalLead.from_record(result.data[0]) if result.data else lead

    def clear_all_leads(self) -> None:
        # PostgREST refuses an unfiltered delete
        self.client.table(LEADS_TABLE).delete().gte("id", 0).execute()
        logger.info("Cleared all leads")

    def get_leads_by_filter(
        self,
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

        Exact-match filters run in the database; date and project matching
        reuse the in-memory rules so both stores answer identically.
        """
        query = self.client.table(LEADS_TABLE).select("*")
        if sales_rep:
            query = query.eq("assignedPersonnel", sales_rep)
        if lead_type:
            query = query.eq("leadType", lead_type)
        if status:
            query = query.eq("status", status)

        result = query.execute()

        return filter_leads(
            (CanonicalLead.from_record(record) for record in result.data or []),
            start_date=start_date,
            end_date=end_date,
            month=month,
            year=year,
            project=project,
        )

    # ==========================================
    # SALES REP OPERATIONS
    # ==========================================

    def get_sales_reps(self) -> List[Dict[str, Any]]:
        result = self.client.table(SALES_REPS_TABLE).select("*").eq("isActive", True).execute()
        return result.data or []

    def create_sales_rep(
        self,
        name: str,
        monthly_target: int = DEFAULT_MONTHLY_TARGET,
        is_active: bool = True,
    ) -> Dict[str, Any]:
        data = {
            "name": name,
            "monthlyTarget": monthly_target,
            "isActive": is_active,
        }

        result = self.client.table(SALES_REPS_TABLE).insert(data).execute()
        logger.info("Created sales rep: %s", name)
        return result.data[0] if result.data else data

    def create_sales_rep_by_name(self, name: str) -> Dict[str, Any]:
        """Return the existing rep with this name, or create one."""
        existing = self.client.table(SALES_REPS_TABLE).select("*").eq("name", name).execute()
        if existing.data:
            return existing.data[0]
        return self.create_sales_rep(name)


# Singleton instance for convenience
_store: Optional[SupabaseLeadStore] = None


def get_client() -> SupabaseLeadStore:
    """Get or create singleton Supabase lead store."""
    global _store
    if _store is None:
        _store = SupabaseLeadStore()
    return _store
