"""Supabase client shared by the dashboard store and the health check."""

import logging
from functools import lru_cache
from supabase import create_client, Client
from ..config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Client | None:
    """Return the process-wide Supabase client.

    Returns:
        Client built from ``SALON_SUPABASE_URL`` / ``SALON_SUPABASE_KEY``, or
        None when either is missing or the client cannot be created.
        No query is issued here; connectivity problems surface on first use.
    """
    if not settings.supabase_url or not settings.supabase_key:
        logger.warning("Supabase credentials not configured; dashboard endpoints will answer 503")
        return None

    try:
        return create_client(settings.supabase_url, settings.supabase_key)
    except Exception as e:
        logger.error(f"Failed to create Supabase client for {settings.supabase_url}: {e}")
        return None
