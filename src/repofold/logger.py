"""
Logger configuration for repofold.

structlog is bridged into the standard logging module so the CLI can keep
stderr quiet, raise verbosity, or send the detailed run log to a file.
Every event passes through ``redact_secrets`` so credentialed clone URLs
never reach a handler, whatever field they were logged under.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, MutableMapping, Optional

import structlog
from structlog.stdlib import BoundLogger, ProcessorFormatter
from structlog.typing import EventDict, Processor

from .credentials import redact_text


def redact_secrets(_logger: Any, _method: str, event_dict: MutableMapping[str, Any]) -> EventDict:
    """structlog processor masking URL credentials in every string value."""
    for key, value in event_dict.items():
        if isinstance(value, str):
            event_dict[key] = redact_text(value)
    return event_dict


_PRE_CHAIN: tuple[Processor, ...] = (
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.stdlib.PositionalArgumentsFormatter(),
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
    redact_secrets,
    structlog.processors.TimeStamper(fmt="iso"),
)


def _configure_structlog(min_level: int) -> None:
    structlog.configure(
        # capture_logs() copies this sequence, so it has to be a list
        processors=[*_PRE_CHAIN, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.make_filtering_bound_logger(min_level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


def _build_formatter(renderer: Processor) -> ProcessorFormatter:
    return ProcessorFormatter(processor=renderer, foreign_pre_chain=_PRE_CHAIN)


def configure_logging(
    level: int = logging.INFO,
    console_level: int | None = None,
) -> None:
    """
    Configure global logging.

    Parameters
    ----------
    level:
        Base logging level for the root logger.
    console_level:
        Severity threshold for messages written to stderr. Defaults to ``level``.
    """
    _configure_structlog(level)
    logging.captureWarnings(True)

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(console_level if console_level is not None else level)
    handler.setFormatter(_build_formatter(structlog.dev.ConsoleRenderer(colors=False)))

    logging.basicConfig(level=level, handlers=[handler], force=True)


def get_logger(name: Optional[str] = None) -> BoundLogger:
    """Retrieve a structlog logger with the provided name."""
    return structlog.get_logger(name)


def redirect_logging_to_file(path: Path, level: int = logging.INFO) -> None:
    """Send every log record to ``path`` instead of stderr."""
    _configure_structlog(level)
    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    handler.setFormatter(_build_formatter(structlog.dev.ConsoleRenderer(colors=False)))
    root.addHandler(handler)
    root.setLevel(level)
