"""Health endpoints."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, status

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/database", status_code=status.HTTP_200_OK)
async def check_database() -> dict:
    """Check whether Supabase is configured and answers a trivial query."""
    from ...db.supabase import get_supabase_client

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "connected": False,
            "message": "Supabase not configured. Set SALON_SUPABASE_URL and SALON_SUPABASE_KEY environment variables.",
        }

    try:
        query = supabase.table("branches").select("id", count="exact").limit(1)
        response = await asyncio.to_thread(query.execute)
        return {
            "configured": True,
            "connected": True,
            "branches_count": response.count or 0,
            "message": "Database connected.",
        }
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
