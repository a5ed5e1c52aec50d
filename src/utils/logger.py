import os
import sys

from loguru import logger

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <7}</level> | "
    "<level>{message}</level>"
)

# Transport libraries log every frame at DEBUG; keep them out of our sinks.
_QUIET_MODULES = ("httpx", "httpcore", "websockets")


def _not_transport(record: dict) -> bool:
    return not record["name"].startswith(_QUIET_MODULES)


def setup_logger(
    *, json_logs: bool = False, level: str = "INFO", log_dir: str | None = "logs"
) -> None:
    """Route loguru output for one CLI invocation.

    LOG_LEVEL overrides the console level and PUMPGUARD_LOG_DIR the file
    directory. Only long-running commands pass a log_dir; the file sink keeps
    DEBUG so queue drops and lookup failures can be traced after the fact.
    """
    logger.remove()
    logger.add(
        sys.stdout,
        level=os.getenv("LOG_LEVEL", level).upper(),
        format=CONSOLE_FORMAT,
        serialize=json_logs,
        colorize=not json_logs,
        filter=_not_transport,
    )

    log_dir = os.getenv("PUMPGUARD_LOG_DIR", log_dir) if log_dir else None
    if log_dir:
        logger.add(
            os.path.join(log_dir, "pumpguard_{time:YYYY-MM-DD}.log"),
            level="DEBUG",
            rotation="20 MB",
            retention=5,
            compression="gz",
            serialize=json_logs,
            enqueue=True,
            filter=_not_transport,
        )
