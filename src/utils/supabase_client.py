"""
src/utils/supabase_client.py
Thin Supabase wrapper: draw history reads and a key/value blob table used
for the accuracy history.
"""
from __future__ import annotations

from typing import Any

from supabase import Client, create_client

from src.utils.config import SUPABASE_KEY, SUPABASE_KV_TABLE, SUPABASE_URL
from src.utils.logger import get_logger

log = get_logger("supabase")

_client: Client | None = None


def get_client() -> Client:
    global _client
    if _client is None:
        if not SUPABASE_URL or not SUPABASE_KEY:
            raise RuntimeError("SUPABASE_URL / SUPABASE_KEY are not configured.")
        _client = create_client(SUPABASE_URL, SUPABASE_KEY)
    return _client


# ── lottery_results ───────────────────────────────────────────────

def get_recent_results(lottery_type: str, limit: int = 200) -> list[dict]:
    """Newest-first draw rows for a lottery type."""
    db = get_client()
    resp = (
        db.table("lottery_results")
        .select("*")
        .eq("lottery_type", lottery_type)
        .order("draw_date", desc=True)
        .limit(limit)
        .execute()
    )
    return resp.data or []


# ── kv_store ──────────────────────────────────────────────────────

def get_value(key: str) -> Any | None:
    db = get_client()
    resp = (
        db.table(SUPABASE_KV_TABLE)
        .select("value")
        .eq("key", key)
        .maybe_single()
        .execute()
    )
    row = getattr(resp, "data", None) if resp else None
    return row["value"] if row else None


def set_value(key: str, value: Any) -> None:
    db = get_client()
    db.table(SUPABASE_KV_TABLE).upsert({"key": key, "value": value}, on_conflict="key").execute()
    log.debug(f"kv_store[{key}] written")


def delete_value(key: str) -> None:
    db = get_client()
    db.table(SUPABASE_KV_TABLE).delete().eq("key", key).execute()
    log.debug(f"kv_store[{key}] deleted")
