"""
src/utils/config.py
Load env vars and per-lottery analysis parameter JSON files.
"""
import json
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()

ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = ROOT / "config"

# ── Supabase (optional persistence backend) ───────────────────────
SUPABASE_URL: str = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY: str = os.getenv("SUPABASE_KEY", "")
SUPABASE_KV_TABLE: str = os.getenv("SUPABASE_KV_TABLE", "kv_store")

# ── Accuracy history ──────────────────────────────────────────────
ACCURACY_HISTORY_KEY: str = "predictionAccuracyHistory"
ACCURACY_HISTORY_PATH: str = os.getenv("ACCURACY_HISTORY_PATH", "data/accuracy_history.json")

# ── Lottery types ─────────────────────────────────────────────────
LOTTERY_CONFIG_FILES: dict[str, str] = {
    "power_655": "model_params_655.json",
    "mega_645":  "model_params_645.json",
}

LOTTERY_LABELS: dict[str, str] = {
    "power_655": "Power 6/55",
    "mega_645":  "Mega 6/45",
}

_model_config_cache: dict[str, Any] = {}


def get_model_config(lottery_type: str) -> dict[str, Any]:
    """Load and cache the analysis config JSON for a given lottery type."""
    if lottery_type in _model_config_cache:
        return _model_config_cache[lottery_type]
    filename = LOTTERY_CONFIG_FILES.get(lottery_type)
    if not filename:
        raise ValueError(f"Unknown lottery type: {lottery_type}")
    path = CONFIG_DIR / filename
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        config = json.load(f)
    _model_config_cache[lottery_type] = config
    return config


def get_number_range(lottery_type: str) -> tuple[int, int]:
    cfg = get_model_config(lottery_type)
    lo, hi = cfg["number_range"]
    return lo, hi


def has_special(lottery_type: str) -> bool:
    """Return True if this lottery type draws a special/bonus number (power_655)."""
    cfg = get_model_config(lottery_type)
    return bool(cfg.get("has_special", False))


def get_special_range(lottery_type: str) -> tuple[int, int] | None:
    """Return (lo, hi) of the special number range, or None if no special."""
    cfg = get_model_config(lottery_type)
    sr = cfg.get("special_range")
    if sr:
        return tuple(sr)
    return None
