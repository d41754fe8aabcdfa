"""
Logging for the Electra wallet core.

The package logs through three named loggers:

  - ``electra_wallet``        lifecycle, imports, lock / unlock
  - ``electra_rpc``           remote node calls
  - ``electra_web_services``  explorer lookups

``setup_logging`` attaches handlers to those loggers only, so an
application keeps control of its root logger.  Every handler carries a
``SecretRedactingFilter``: extended private keys, WIF strings and cipher
blobs are masked before a record is formatted.

Two output formats:
  - **human** – coloured, single-line, readable
  - **json**  – newline-delimited JSON for log aggregators

Usage:
    from electra_core.logging_config import setup_logging
    setup_logging(level="DEBUG", fmt="json", rpc_level="WARNING")
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from electra_core.config import LoggingConfig

WALLET_LOGGER = "electra_wallet"
RPC_LOGGER = "electra_rpc"
EXPLORER_LOGGER = "electra_web_services"
PACKAGE_LOGGERS = (WALLET_LOGGER, RPC_LOGGER, EXPLORER_LOGGER)

REDACTED = "<redacted>"

_B58 = "1-9A-HJ-NP-Za-km-z"
_SECRET_PATTERNS = (
    re.compile(rf"\bxprv[{_B58}]{{100,}}"),      # extended private key
    re.compile(rf"\b[{_B58}]{{50,52}}\b"),       # WIF, compressed or not
    re.compile(r"\b[0-9a-fA-F]{96,}\b"),         # cipher blob
)


def redact(text: str) -> str:
    for pattern in _SECRET_PATTERNS:
        text = pattern.sub(REDACTED, text)
    return text


class SecretRedactingFilter(logging.Filter):
    """Masks key material in the rendered message of each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


def _component(logger_name: str) -> str:
    return logger_name.removeprefix("electra_")


class _JSONFormatter(logging.Formatter):
    """Emit each log record as a single JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        log_obj = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "component": _component(record.name),
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_obj["exception"] = redact(self.formatException(record.exc_info))
        return json.dumps(log_obj, default=str)


class _HumanFormatter(logging.Formatter):
    """Coloured, concise single-line format."""

    COLOURS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[1;31m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        colour = self.COLOURS.get(record.levelname, "")
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        line = (
            f"{colour}{ts} [{record.levelname:<7}]{self.RESET} "
            f"{_component(record.name)}: {record.getMessage()}"
        )
        if record.exc_info and record.exc_info[1]:
            line += "\n" + redact(self.formatException(record.exc_info))
        return line


def _level(name: Optional[str], default: int = logging.INFO) -> int:
    if not name:
        return default
    return getattr(logging, name.upper(), default)


def setup_logging(
    level: str = "INFO",
    fmt: str = "human",
    log_file: Optional[str] = None,
    rpc_level: Optional[str] = None,
) -> None:
    """
    Configure the package loggers.

    Parameters
    ----------
    level : str
        One of DEBUG, INFO, WARNING, ERROR, CRITICAL.
    fmt : str
        ``"human"`` for coloured single-line output, ``"json"`` for
        newline-delimited JSON.
    log_file : str, optional
        If provided, logs are *also* written to this file (always JSON).
    rpc_level : str, optional
        Separate level for ``electra_rpc``; node calls are chatty at DEBUG.
    """
    handlers: list[logging.Handler] = []

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_JSONFormatter() if fmt == "json" else _HumanFormatter())
    handlers.append(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path))
        fh.setFormatter(_JSONFormatter())
        handlers.append(fh)

    for handler in handlers:
        handler.addFilter(SecretRedactingFilter())

    base_level = _level(level)
    for name in PACKAGE_LOGGERS:
        logger = logging.getLogger(name)
        for old in list(logger.handlers):
            logger.removeHandler(old)
            old.close()
        logger.setLevel(_level(rpc_level, base_level) if name == RPC_LOGGER else base_level)
        logger.propagate = False
        for handler in handlers:
            logger.addHandler(handler)


def setup_logging_from_config(cfg: LoggingConfig) -> None:
    """Apply the ``[logging]`` section of an :class:`ElectraConfig`."""
    setup_logging(level=cfg.level, fmt=cfg.format, log_file=cfg.file, rpc_level=cfg.rpc_level)
