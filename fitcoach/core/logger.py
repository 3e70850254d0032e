"""Logger configuration for FitCoach.

Call sites log with structured kwargs (``logger.info("...", plan_kind="meal")``).
Both sinks render that context as trailing ``key=value`` pairs so a plan run
can be followed by subject, plan kind and attempt without a log backend.
"""

import sys
from pathlib import Path

from loguru import logger

_CONTEXT_FIELD = "_kv_context"

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}"


def format_context(extra: dict) -> str:
    """Render bound/kwarg context as ``key=value`` pairs, sorted by key."""
    pairs = []
    for key in sorted(extra):
        if key == _CONTEXT_FIELD:
            continue
        value = extra[key]
        text = str(value)
        if isinstance(value, str) and (" " in text or not text):
            text = repr(text)
        pairs.append(f"{key}={text}")
    return " ".join(pairs)


def _with_context(template: str, dim: bool):
    def _format(record) -> str:
        record["extra"][_CONTEXT_FIELD] = format_context(record["extra"])
        line = template
        if record["extra"][_CONTEXT_FIELD]:
            field = "{extra[" + _CONTEXT_FIELD + "]}"
            line += f" | <dim>{field}</dim>" if dim else f" | {field}"
        return line + "\n{exception}"

    return _format


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """Configure loguru with a console sink and an optional rotating file.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file. If None, only console logging.
        rotation: Log rotation size (e.g., "10 MB", "1 day")
        retention: Log retention period (e.g., "7 days", "1 month")
    """
    logger.remove()
    logger.add(sys.stderr, format=_with_context(_CONSOLE_FORMAT, dim=True), level=level, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        # Plans are bilingual; keep Arabic text readable in the file
        logger.add(
            log_path,
            format=_with_context(_FILE_FORMAT, dim=False),
            level=level,
            rotation=rotation,
            retention=retention,
            compression="zip",
            encoding="utf-8",
            backtrace=True,
            # Prompts carry subject health data; keep variable values out of tracebacks
            diagnose=False,
        )

    logger.info("Logger initialized", level=level, log_file=log_file or None)
