"""
src/crawlers/draw_source.py
Draw history providers: validate raw rows at the boundary and hand the
analyzers a newest-first list of DrawRecord.
"""
from __future__ import annotations

import json
import random
import time
from abc import ABC, abstractmethod
from datetime import date
from pathlib import Path
from typing import Any

import requests

from src.models.records import PICK_COUNT, DrawRecord
from src.utils import supabase_client as db
from src.utils.config import get_number_range, get_special_range, has_special
from src.utils.logger import get_logger

log = get_logger("crawler")


class DrawSource(ABC):
    """Abstract base class for all draw history providers."""

    def __init__(self, lottery_type: str):
        self.lottery_type = lottery_type
        self.number_range = get_number_range(lottery_type)
        self.special_range = get_special_range(lottery_type) if has_special(lottery_type) else None

    # ── Validation ────────────────────────────────────────────────

    def validate_draw(self, record: dict[str, Any]) -> bool:
        """Validate a raw draw row before it reaches the analyzers."""
        required = {"draw_id", "lottery_type", "draw_date", "numbers"}
        if not required.issubset(record.keys()):
            log.error(f"Missing fields: {required - record.keys()}")
            return False

        nums = record["numbers"]
        lo, hi = self.number_range

        if not isinstance(nums, (list, tuple)) or len(nums) != PICK_COUNT:
            log.error(f"Expected {PICK_COUNT} numbers, got: {nums}")
            return False
        if not all(isinstance(n, int) and not isinstance(n, bool) for n in nums):
            log.error(f"Non-integer numbers: {nums}")
            return False
        if len(set(nums)) != PICK_COUNT:
            log.error(f"Duplicate numbers: {nums}")
            return False
        if not all(lo <= n <= hi for n in nums):
            log.error(f"Numbers out of range [{lo},{hi}]: {nums}")
            return False

        special = record.get("special_number")
        if special is not None:
            if self.special_range is None:
                log.error(f"{self.lottery_type} has no special number, got {special}")
                return False
            if not isinstance(special, int) or isinstance(special, bool):
                log.error(f"Special number is not an integer: {special!r}")
                return False
            sp_lo, sp_hi = self.special_range
            if not sp_lo <= special <= sp_hi or special in nums:
                log.error(f"Invalid special number {special} for {nums}")
                return False

        try:
            date.fromisoformat(str(record["draw_date"])[:10])
        except ValueError:
            log.error(f"Bad draw_date: {record['draw_date']}")
            return False

        return True

    def to_draw_record(self, record: dict[str, Any]) -> DrawRecord:
        return DrawRecord(
            draw_id=str(record["draw_id"]),
            draw_date=date.fromisoformat(str(record["draw_date"])[:10]),
            numbers=tuple(sorted(record["numbers"])),
            lottery_type=self.lottery_type,
            special_number=record.get("special_number"),
        )

    def fetch_draws(self, limit: int | None = None) -> list[DrawRecord]:
        """Validated draws, newest first."""
        rows = self.fetch_raw()
        valid = [self.to_draw_record(r) for r in rows if self.validate_draw(r)]
        skipped = len(rows) - len(valid)
        if skipped:
            log.warning(f"Skipped {skipped} invalid {self.lottery_type} row(s)")
        valid.sort(key=lambda d: (d.draw_date, d.draw_id.zfill(10)), reverse=True)
        return valid[:limit] if limit is not None else valid

    # ── Abstract interface ────────────────────────────────────────

    @abstractmethod
    def fetch_raw(self) -> list[dict[str, Any]]:
        """Return raw draw rows in the common dict shape."""
        ...


class JsonlDrawSource(DrawSource):
    """
    Upstream JSON-lines data (one draw per line: id, date, result[]).
    For Power 6/55 the 7th result element is the special number.
    `location` is a local path or an http(s) URL.
    """

    def __init__(self, lottery_type: str, location: str | Path, max_retries: int = 3, timeout: int = 15):
        super().__init__(lottery_type)
        self.location = str(location)
        self.max_retries = max_retries
        self.timeout = timeout
        self.session = requests.Session()

    def _get(self, url: str) -> requests.Response:
        """GET with retry + exponential backoff."""
        for attempt in range(1, self.max_retries + 1):
            try:
                log.debug(f"GET {url} (attempt {attempt})")
                resp = self.session.get(url, timeout=self.timeout)
                resp.raise_for_status()
                return resp
            except requests.RequestException as exc:
                log.warning(f"Request failed (attempt {attempt}/{self.max_retries}): {exc}")
                if attempt == self.max_retries:
                    raise
                time.sleep(2 ** attempt + random.uniform(0, 1))
        raise RuntimeError("unreachable")

    def read_text(self) -> str:
        if self.location.startswith(("http://", "https://")):
            return self._get(self.location).text
        return Path(self.location).read_text(encoding="utf-8")

    def parse_line(self, line: str) -> dict[str, Any] | None:
        try:
            data = json.loads(line)
        except json.JSONDecodeError as exc:
            log.error(f"Bad JSONL line ({exc}): {line[:80]}")
            return None
        if not isinstance(data, dict):
            log.error(f"JSONL line is not an object: {line[:80]}")
            return None
        result = data.get("result")
        if not isinstance(result, list):
            result = []
        record: dict[str, Any] = {
            "draw_id": str(data.get("id", "")),
            "lottery_type": self.lottery_type,
            "draw_date": data.get("date"),
            "numbers": list(result[:PICK_COUNT]),
        }
        if self.special_range is not None and len(result) > PICK_COUNT:
            record["special_number"] = result[PICK_COUNT]
        return record

    def fetch_raw(self) -> list[dict[str, Any]]:
        rows = []
        for line in self.read_text().splitlines():
            line = line.strip()
            if not line:
                continue
            record = self.parse_line(line)
            if record is not None:
                rows.append(record)
        log.info(f"Read {len(rows)} {self.lottery_type} rows from {self.location}")
        return rows


class SupabaseDrawSource(DrawSource):
    """Draw rows from the lottery_results table (special number in jackpot2)."""

    def __init__(self, lottery_type: str, limit: int = 200):
        super().__init__(lottery_type)
        self.limit = limit

    def fetch_raw(self) -> list[dict[str, Any]]:
        rows = db.get_recent_results(self.lottery_type, limit=self.limit)
        return [
            {
                "draw_id": row.get("draw_id"),
                "lottery_type": self.lottery_type,
                "draw_date": row.get("draw_date"),
                "numbers": row.get("numbers") or [],
                "special_number": row.get("jackpot2"),
            }
            for row in rows
        ]
