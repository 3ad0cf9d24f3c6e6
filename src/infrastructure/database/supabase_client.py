from __future__ import annotations

import os

from loguru import logger
from supabase import Client, create_client

# Simple reusable singleton client getter for repositories/storage
_CLIENT_SINGLETON: Client | None = None


def get_supabase_client() -> Client | None:
    """Server-side client (service role key, falls back to the anon key).

    Returns None when SUPABASE_DISABLED=1 or the project is not configured, in
    which case callers use their local fallbacks.
    """
    global _CLIENT_SINGLETON
    disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_ROLE_KEY") or os.getenv("SUPABASE_ANON_KEY")
    if disabled or not url or not key:
        return None
    if _CLIENT_SINGLETON is None:
        logger.info("Initializing Supabase client for {}", url)
        _CLIENT_SINGLETON = create_client(url, key)
    return _CLIENT_SINGLETON
