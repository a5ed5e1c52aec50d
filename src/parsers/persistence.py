"""Append-only launch log: one tab-delimited line per resolved launch.

Line format (fields in this order, empty mint when unresolved):
    <iso timestamp>\t<slot>\t<signature>\t<mint>\t<url>

Older logs written in the bracketed key=value format are still readable:
    [2024-05-01T12:00:00.000Z] slot=123 sig=abc mint=xyz url=https://...
"""

import asyncio
import re
from datetime import datetime, timezone
from pathlib import Path

from loguru import logger

from src.parsers.launch_types import ResolvedLaunch

FIELD_DELIMITER = "\t"
_FIELD_COUNT = 5

_LEGACY_LINE_RE = re.compile(
    r"^\[(.+?)\]\s+slot=(\d+)\s+sig=(\S+)(?:\s+mint=(\S+))?\s+url=(\S+)"
)


def format_launch_line(launch: ResolvedLaunch) -> str:
    """Serialize a launch into one log line (without trailing newline)."""
    return FIELD_DELIMITER.join([
        launch.timestamp.isoformat(),
        str(launch.slot),
        launch.signature,
        launch.mint or "",
        launch.url,
    ])


def _parse_timestamp(raw: str) -> datetime | None:
    try:
        ts = datetime.fromisoformat(raw)
    except ValueError:
        return None
    # Old logs may carry naive timestamps; they were always written in UTC.
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def parse_launch_line(line: str) -> ResolvedLaunch | None:
    """Parse one log line. Returns None for blank or malformed lines."""
    line = line.strip("\r\n")
    if not line.strip():
        return None

    if FIELD_DELIMITER in line:
        parts = line.split(FIELD_DELIMITER)
        if len(parts) != _FIELD_COUNT:
            return None
        ts_raw, slot_raw, signature, mint, url = parts
    else:
        m = _LEGACY_LINE_RE.match(line.strip())
        if not m:
            return None
        ts_raw, slot_raw, signature, mint, url = m.groups()

    timestamp = _parse_timestamp(ts_raw)
    if timestamp is None or not (slot_raw.isascii() and slot_raw.isdigit()):
        return None
    if not signature or not url:
        return None

    return ResolvedLaunch(
        timestamp=timestamp,
        slot=int(slot_raw),
        signature=signature,
        mint=mint or None,
        url=url,
    )


class LaunchLog:
    """File-backed launch sink. Only the single mint worker appends to it."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def append_sync(self, launch: ResolvedLaunch) -> None:
        with self._path.open("a", encoding="utf-8") as f:
            f.write(format_launch_line(launch) + "\n")

    async def append(self, launch: ResolvedLaunch) -> None:
        await asyncio.to_thread(self.append_sync, launch)

    def read_launches(self) -> list[ResolvedLaunch]:
        """Read every parseable launch. Malformed lines are skipped, not fatal."""
        if not self._path.exists():
            return []

        launches: list[ResolvedLaunch] = []
        skipped = 0
        # Decoded per line so one corrupted record cannot abort the read.
        with self._path.open("rb") as f:
            for raw in f:
                try:
                    line = raw.decode("utf-8")
                except UnicodeDecodeError:
                    skipped += 1
                    continue
                if not line.strip():
                    continue
                launch = parse_launch_line(line)
                if launch is None:
                    skipped += 1
                    continue
                launches.append(launch)

        if skipped:
            logger.warning(f"[LOG] Skipped {skipped} malformed lines in {self._path}")
        return launches
