"""
Supabase client initialization.

Exposes a single `supabase` client for the sale state repository. Only the
supabase state backend imports this module; the in-memory backend never needs
credentials.

Environment variables required:
- SUPABASE_URL: Supabase project URL
- SUPABASE_KEY: Supabase API key (server-side key, backend only)
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from supabase import Client, create_client  # type: ignore[import-not-found]

# .env sits at the project root
env_path = Path(__file__).parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

SUPABASE_URL: str | None = os.getenv("SUPABASE_URL")
SUPABASE_KEY: str | None = os.getenv("SUPABASE_KEY")

if not SUPABASE_URL:
    raise RuntimeError(
        "Missing environment variable: SUPABASE_URL. "
        "Set SUPABASE_URL to the Supabase project holding the sale tables."
    )

if not SUPABASE_KEY:
    raise RuntimeError(
        "Missing environment variable: SUPABASE_KEY. "
        "Set SUPABASE_KEY to a server-side Supabase API key."
    )

supabase: Client = create_client(SUPABASE_URL, SUPABASE_KEY)

__all__ = ["supabase"]
