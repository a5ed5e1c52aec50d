"""Read-back reporting over the launch log: stats, CSV/TSV export, risk report."""

import csv
from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger

from src.parsers.launch_types import ResolvedLaunch
from src.parsers.risk_scorer import RiskAssessment, RiskLevel, assess_mint_risk, unscored
from src.parsers.solana_rpc.client import SolanaRpcClient

LAUNCH_HEADER = ("timestamp", "slot", "signature", "mint", "url")
RISK_HEADER = (
    "time", "slot", "sig", "mint", "risk_score", "risk_level", "risk_tags", "url",
)
RECENT_LIMIT = 10


@dataclass
class LaunchSummary:
    """Aggregate view of the launch log for report mode."""

    total: int = 0
    with_mint: int = 0
    first: ResolvedLaunch | None = None
    last: ResolvedLaunch | None = None
    span_sec: float | None = None  # None when < 2 launches or zero span
    avg_interval_sec: float | None = None
    recent: list[ResolvedLaunch] = field(default_factory=list)


def summarize_launches(
    launches: Sequence[ResolvedLaunch], *, recent: int = RECENT_LIMIT
) -> LaunchSummary:
    if not launches:
        return LaunchSummary()

    ordered = sorted(launches, key=lambda launch: launch.timestamp)
    first, last = ordered[0], ordered[-1]
    summary = LaunchSummary(
        total=len(launches),
        with_mint=sum(1 for launch in launches if launch.mint),
        first=first,
        last=last,
        recent=list(launches[-recent:]),
    )

    span = (last.timestamp - first.timestamp).total_seconds()
    if len(launches) >= 2 and span > 0:
        summary.span_sec = span
        summary.avg_interval_sec = span / (len(launches) - 1)
    return summary


def tsv_escape(value: str) -> str:
    """TSV has no quoting. Tabs and newlines inside a value become spaces."""
    return value.replace("\t", " ").replace("\r\n", " ").replace("\n", " ").replace("\r", " ")


def _launch_row(launch: ResolvedLaunch) -> list[str]:
    return [
        launch.timestamp.isoformat(),
        str(launch.slot),
        launch.signature,
        launch.mint or "",
        launch.url,
    ]


def write_csv(header: Sequence[str], rows: Iterable[Sequence[str]], path: Path) -> int:
    """Write header + rows with minimal RFC 4180 quoting. Returns row count."""
    count = 0
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
        writer.writerow(header)
        for row in rows:
            writer.writerow(row)
            count += 1
    return count


def write_tsv(header: Sequence[str], rows: Iterable[Sequence[str]], path: Path) -> int:
    """Write header + rows tab-separated, escaping each value. Returns row count."""
    count = 0
    with path.open("w", encoding="utf-8") as f:
        f.write("\t".join(tsv_escape(h) for h in header) + "\n")
        for row in rows:
            f.write("\t".join(tsv_escape(str(v)) for v in row) + "\n")
            count += 1
    return count


def export_launches_csv(launches: Iterable[ResolvedLaunch], path: Path) -> int:
    return write_csv(LAUNCH_HEADER, (_launch_row(launch) for launch in launches), path)


def export_launches_tsv(launches: Iterable[ResolvedLaunch], path: Path) -> int:
    return write_tsv(LAUNCH_HEADER, (_launch_row(launch) for launch in launches), path)


async def assess_launches(
    launches: Sequence[ResolvedLaunch], rpc: SolanaRpcClient | None
) -> list[tuple[ResolvedLaunch, RiskAssessment]]:
    """Pair each launch with its risk. Each unique mint is scored once."""
    unique_mints = list(dict.fromkeys(launch.mint for launch in launches if launch.mint))
    logger.info(
        f"[REPORT] {len(launches)} launches, {len(unique_mints)} unique mints to score"
    )

    risk_by_mint: dict[str, RiskAssessment] = {}
    for i, mint in enumerate(unique_mints, start=1):
        risk_by_mint[mint] = await assess_mint_risk(mint, rpc)
        if i % 10 == 0:
            logger.info(f"[REPORT] Scored {i}/{len(unique_mints)} mints")

    return [
        (launch, risk_by_mint[launch.mint] if launch.mint else unscored(None))
        for launch in launches
    ]


def _risk_row(launch: ResolvedLaunch, risk: RiskAssessment) -> list[str]:
    return [
        launch.timestamp.isoformat(),
        str(launch.slot),
        launch.signature,
        launch.mint or "",
        str(risk.score),
        risk.level.value,
        risk.tags_csv,
        launch.url,
    ]


def export_risk_tsv(
    pairs: Iterable[tuple[ResolvedLaunch, RiskAssessment]], path: Path
) -> int:
    return write_tsv(RISK_HEADER, (_risk_row(launch, risk) for launch, risk in pairs), path)


def count_levels(
    pairs: Iterable[tuple[ResolvedLaunch, RiskAssessment]],
) -> dict[RiskLevel, int]:
    counts = Counter(risk.level for _, risk in pairs)
    return {level: counts.get(level, 0) for level in RiskLevel}
