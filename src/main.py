"""Entry point for the PumpGuard CLI.

Commands:
    watch        live monitor of Pump.fun launches (aliases: sniffer, scanner)
    report       launch stats from the log file
    export       all launches to CSV
    export-tsv   all launches to TSV
    risk-report  score every logged mint and write a risk TSV
"""

import argparse
import asyncio
import signal
import sys
from pathlib import Path

from loguru import logger

from config.settings import Settings, settings
from src.parsers.launch_types import PipelineConfig, PipelineConfigError
from src.parsers.persistence import LaunchLog
from src.parsers.pipeline import LaunchPipeline
from src.parsers.report import (
    assess_launches,
    count_levels,
    export_launches_csv,
    export_launches_tsv,
    export_risk_tsv,
    summarize_launches,
)
from src.parsers.risk_scorer import RiskLevel
from src.parsers.solana_rpc.client import SolanaRpcClient
from src.parsers.solana_rpc.exceptions import SolanaRpcError
from src.parsers.solana_rpc.ws_client import LogsFeed
from src.utils.logger import setup_logger


async def run_watch(cfg: Settings) -> int:
    try:
        config = PipelineConfig.from_settings(cfg)
    except PipelineConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    logger.info("PumpGuard WATCH mode")
    logger.info(f"RPC endpoint: {config.rpc_endpoint}")
    logger.info(f"Log file: {cfg.launch_log_path}")

    rpc = SolanaRpcClient(
        config.rpc_endpoint,
        max_rps=max(config.mint_fetch_rps, 1.0),
        timeout=cfg.rpc_timeout_sec,
    )
    feed = LogsFeed(config.ws_endpoint, config.program_id)
    pipeline = LaunchPipeline(config, rpc, feed, LaunchLog(cfg.launch_log_path))

    # Graceful shutdown on SIGINT/SIGTERM
    loop = asyncio.get_running_loop()
    shutdown_event = asyncio.Event()

    def _signal_handler() -> None:
        logger.info("Shutdown signal received")
        shutdown_event.set()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _signal_handler)

    pipeline_task = asyncio.create_task(pipeline.run())
    waiter = asyncio.create_task(shutdown_event.wait())
    done, _pending = await asyncio.wait(
        [pipeline_task, waiter],
        return_when=asyncio.FIRST_COMPLETED,
    )
    if not waiter.done():
        waiter.cancel()

    await pipeline.shutdown()
    if pipeline_task in done and pipeline_task.exception() is not None:
        exc = pipeline_task.exception()
        if isinstance(exc, SolanaRpcError):
            logger.error(f"Failed to talk to Solana RPC: {exc}")
        else:
            logger.opt(exception=exc).error(f"Pipeline crashed: {exc}")
        return 1
    await pipeline_task
    logger.info("Shutdown complete")
    return 0


def run_report(cfg: Settings) -> int:
    log = LaunchLog(cfg.launch_log_path)
    logger.info(f"PumpGuard REPORT mode, reading {log.path}")
    if not log.exists():
        logger.warning("No log file found yet. Run `watch` first.")
        return 0

    launches = log.read_launches()
    if not launches:
        logger.warning("Log file is empty. No launches recorded yet.")
        return 0

    summary = summarize_launches(launches)
    print(f"Total launches logged: {summary.total}")
    print(f"First launch: {summary.first.timestamp.isoformat()} (slot {summary.first.slot})")
    print(f"Last  launch: {summary.last.timestamp.isoformat()} (slot {summary.last.slot})")
    if summary.span_sec is not None:
        print(f"Time span between first and last: ~{summary.span_sec:.1f} seconds")
        print(f"Average time between launches: ~{summary.avg_interval_sec:.1f} seconds")
    print(f"Entries with mint detected: {summary.with_mint}/{summary.total}")
    print()
    print(f"Showing last {len(summary.recent)} launches:")
    for idx, launch in enumerate(summary.recent, start=1):
        print(f"#{idx}  [{launch.timestamp.isoformat()}] slot={launch.slot}")
        print(f"    sig:  {launch.signature}")
        print(f"    mint: {launch.mint or '(unknown)'}")
        print(f"    url:  {launch.url}")
    return 0


def run_export(cfg: Settings, *, tsv: bool) -> int:
    log = LaunchLog(cfg.launch_log_path)
    launches = log.read_launches()
    if not launches:
        logger.warning(f"No launches in {log.path}. Run `watch` first.")
        return 0

    out = Path(cfg.report_tsv_path if tsv else cfg.report_csv_path)
    exporter = export_launches_tsv if tsv else export_launches_csv
    count = exporter(launches, out)
    logger.info(f"Exported {count} launches to {out}")
    return 0


async def run_risk_report(cfg: Settings, *, offline: bool) -> int:
    log = LaunchLog(cfg.launch_log_path)
    if not log.exists():
        logger.error(f"Log file not found: {log.path}. Run `watch` first.")
        return 1

    launches = log.read_launches()
    if not launches:
        logger.warning("No launch entries found in log.")
        return 0

    rpc: SolanaRpcClient | None = None
    if offline or not cfg.rpc_endpoint:
        logger.warning("No RPC endpoint, risk is based on mint address heuristics only")
    else:
        rpc = SolanaRpcClient(
            cfg.rpc_endpoint,
            max_rps=cfg.mint_fetch_rps,
            timeout=cfg.rpc_timeout_sec,
        )

    try:
        pairs = await assess_launches(launches, rpc)
    finally:
        if rpc is not None:
            await rpc.close()

    out = Path(cfg.risk_report_path)
    export_risk_tsv(pairs, out)
    logger.info(f"Wrote risk report: {out}")

    counts = count_levels(pairs)
    print("Summary by risk level:")
    for level in (RiskLevel.HIGH, RiskLevel.MEDIUM, RiskLevel.LOW, RiskLevel.UNKNOWN):
        print(f"  {level.value:<7}: {counts[level]}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pumpguard", description="Pump.fun launch monitor and mint risk scorer"
    )
    sub = parser.add_subparsers(dest="command")
    sub.add_parser(
        "watch",
        aliases=["sniffer", "scanner"],
        help="Watch new launches (rate-limited mint lookups, bounded queue)",
    )
    sub.add_parser("report", help="Show launches + stats from the log file")
    sub.add_parser("export", help="Export all launches to CSV")
    sub.add_parser("export-tsv", help="Export all launches to TSV")
    risk = sub.add_parser("risk-report", help="Score logged mints and write a risk TSV")
    risk.add_argument(
        "--offline", action="store_true", help="Skip on-chain lookups (NO_CHAIN_DATA)"
    )
    parser.add_argument("--json-logs", action="store_true", help="Log as JSON lines")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command in ("watch", "sniffer", "scanner"):
        setup_logger(json_logs=args.json_logs, level="INFO")
        return asyncio.run(run_watch(settings))

    setup_logger(json_logs=args.json_logs, level="INFO", log_dir=None)
    if args.command == "report":
        return run_report(settings)
    if args.command == "export":
        return run_export(settings, tsv=False)
    if args.command == "export-tsv":
        return run_export(settings, tsv=True)
    return asyncio.run(run_risk_report(settings, offline=args.offline))


if __name__ == "__main__":
    sys.exit(main())
