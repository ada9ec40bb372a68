"""Database clients for the CRM."""

from humans_api.db.supabase import SupabaseClient, WebsiteSupabaseClient, fetch_all_rows

__all__ = ["SupabaseClient", "WebsiteSupabaseClient", "fetch_all_rows"]
