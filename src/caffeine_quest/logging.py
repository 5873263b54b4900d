"""Logging configuration for Caffeine Quest."""

import hashlib
import logging
import sys
from pathlib import Path
from typing import Any

import structlog


def hash_fingerprint_processor(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Replace certificate fingerprints in log events with a short hash."""
    fp = event_dict.pop("fingerprint", None)
    if fp is None:
        return event_dict
    if fp and fp != "unknown":
        event_dict["fingerprint_hash"] = hashlib.sha256(fp.encode()).hexdigest()[:12]
    else:
        event_dict["fingerprint"] = fp
    return event_dict


def _level_to_int(level: str) -> int:
    return logging.getLevelNamesMapping().get(level.upper(), logging.INFO)


def configure_logging(
    log_level: str = "INFO",
    log_file: Path | None = None,
    json_logs: bool = False,
    hash_fingerprints: bool = True,
) -> None:
    """Configure structlog once, at process start."""
    output_stream = open(log_file, "a") if log_file else sys.stdout

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(
            fmt="iso" if json_logs else "%Y-%m-%d %H:%M:%S"
        ),
    ]
    if hash_fingerprints:
        processors.append(hash_fingerprint_processor)

    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=output_stream.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(_level_to_int(log_level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=output_stream),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a logger instance for a module."""
    return structlog.get_logger(name)
