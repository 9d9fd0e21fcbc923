"""
Database module for the lead import engine.

Provides an in-memory store and Supabase integration for hosted storage.
"""

from .memory import (
    MemoryLeadStore,
    SalesRep,
)
from .supabase_client import (
    SupabaseLeadStore,
    DatabaseConfig,
    get_client
)

__all__ = [
    "MemoryLeadStore",
    "SalesRep",
    "SupabaseLeadStore",
    "DatabaseConfig",
    "get_client"
]
