"""Logging configuration using loguru."""

import logging
import sys
import time
from contextlib import contextmanager
from typing import Literal

from loguru import logger


# Remove default handler
logger.remove()

GREEN = "\033[32m"
CYAN = "\033[36m"
YELLOW = "\033[33m"
RED = "\033[31m"
BOLD = "\033[1m"
RESET = "\033[0m"
DIM = "\033[2m"

_LEVEL_DISPLAY = {
    "DEBUG": "DEBUG",
    "INFO": "INFO ",
    "WARNING": "WARN ",
    "ERROR": "ERROR",
    "CRITICAL": "CRIT ",
}

_LEVEL_COLOR = {
    "DEBUG": CYAN,
    "INFO": RESET,
    "WARNING": YELLOW,
    "ERROR": RED,
    "CRITICAL": f"{RED}{BOLD}",
}


def _abbreviate_module_name(name: str) -> str:
    """Abbreviate module name for cleaner console output.

    Example: flowgen.deploy.pipeline -> f.d.pipeline
    """
    parts = name.split(".")
    if len(parts) <= 1:
        return name
    abbreviated = [p[0] for p in parts[:-1]]
    abbreviated.append(parts[-1])
    return ".".join(abbreviated)


def format_console_record(record) -> str:
    """Render a loguru record as a single coloured console line.

    Stage events (``*_completed`` / ``*_failed``) get a DONE / FAIL badge so a
    deployment run can be followed at a glance.
    """
    message = record["message"]
    extra = record["extra"]
    timestamp = record["time"].strftime("%H:%M:%S.%f")[:-3]
    module_name = _abbreviate_module_name(extra.get("name") or record["name"])

    extra_str = ""
    relevant_extra = {k: v for k, v in extra.items() if k != "name"}
    if relevant_extra:
        extra_str = " | " + ", ".join(f"{k}={v!r}" for k, v in relevant_extra.items())

    if message.endswith("_completed"):
        badge, color = f"{GREEN}{BOLD}✓ DONE{RESET}", GREEN
    elif message.endswith("_failed"):
        badge, color = f"{RED}{BOLD}✗ FAIL{RESET}", RED
    else:
        level_name = record["level"].name
        color = _LEVEL_COLOR.get(level_name, RESET)
        badge = f"{color}{_LEVEL_DISPLAY.get(level_name, level_name[:5].ljust(5))}{RESET}"

    return (
        f"{GREEN}{timestamp}{RESET} | {badge} {DIM}|{RESET} "
        f"{CYAN}{module_name}{RESET} | {color}{message}{RESET}"
        f"{YELLOW}{extra_str}{RESET}\n"
    )


class InterceptHandler(logging.Handler):
    """Route standard library log records into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame, depth = sys._getframe(6), 6
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(
    log_level: str = "INFO",
    log_format: Literal["json", "console"] = "console",
) -> None:
    """Configure logging for the application using loguru.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format - "json" for production, "console" for development
    """
    logger.remove()

    if log_format == "json":
        logger.add(
            sys.stdout,
            format="{message}",
            level=log_level.upper(),
            serialize=True,
            backtrace=True,
            diagnose=False,
        )
    else:
        logger.add(
            lambda msg: sys.stdout.write(format_console_record(msg.record)),
            level=log_level.upper(),
            backtrace=True,
            diagnose=False,
        )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    # Reduce noise from third-party libraries
    for noisy in (
        "httpx",
        "httpcore",
        "uvicorn.access",
        "openai",
        "anthropic",
        "langchain",
        "langchain_core",
        "sqlalchemy.engine",
        "aiosqlite",
        "asyncpg",
    ):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    logging.getLogger("uvicorn.error").propagate = True


def get_logger(name: str | None = None):
    """Get a logger instance.

    Args:
        name: Logger name, typically __name__ of the module

    Returns:
        A loguru logger instance bound with the module name
    """
    if name:
        return logger.bind(name=name)
    return logger


@contextmanager
def log_timing(logger_instance, event_name: str, **context):
    """Context manager that logs start/complete/fail with duration_ms.

    Usage:
        with log_timing(logger, "github_create_repository", repo=name):
            await github.create_repository(name)
    """
    start = time.perf_counter()
    logger_instance.debug(f"{event_name}_started", **context)
    try:
        yield
        duration_ms = int((time.perf_counter() - start) * 1000)
        logger_instance.info(f"{event_name}_completed", duration_ms=duration_ms, **context)
    except Exception as e:
        duration_ms = int((time.perf_counter() - start) * 1000)
        logger_instance.error(f"{event_name}_failed", duration_ms=duration_ms, error=str(e), **context)
        raise
