"""
Logging setup for dtnroute.

Library modules log through ``get_logger(__name__)``. Routers log through a
per-node logger named ``dtnroute.node.<id>``, which ``configure_node_logging``
builds from the ``logging_settings`` section of a configuration file.
"""

import logging
import logging.handlers
from typing import Any

from dtnroute.utils.os import prepare_output_file

CONSOLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
FILE_FORMAT = (
    "%(asctime)s - %(name)s - [%(filename)s:%(lineno)d] - %(levelname)s - %(message)s"
)

NODE_LOGGER_PREFIX = "dtnroute.node"
DEFAULT_LOG_DIR = "logs"
MAX_LOG_BYTES = 5 * 1024 * 1024
LOG_BACKUP_COUNT = 3

_configured: dict[str, logging.Logger] = {}


def resolve_level(level: str | int) -> int:
    """
    Turn a level name such as ``"debug"`` into its numeric value.

    Unknown names resolve to INFO.

    :param level: Level name or number
    :type level: str | int
    :return: Numeric logging level
    :rtype: int
    """
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def _attach_handlers(
    logger: logging.Logger,
    level: int,
    console: bool,
    log_file: str | None,
    log_dir: str | None,
) -> None:
    handlers: list[tuple[logging.Handler, str]] = []
    if console:
        handlers.append((logging.StreamHandler(), CONSOLE_FORMAT))
    if log_file:
        path = prepare_output_file(f"{log_dir or DEFAULT_LOG_DIR}/{log_file}")
        file_handler = logging.handlers.RotatingFileHandler(
            path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUP_COUNT, encoding="utf-8"
        )
        handlers.append((file_handler, FILE_FORMAT))

    for handler, fmt in handlers:
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter(fmt))
        logger.addHandler(handler)


def _release_handlers(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


def setup_logger(
    name: str,
    level: str | int = "INFO",
    log_file: str | None = None,
    log_dir: str | None = None,
    console: bool = True,
) -> logging.Logger:
    """
    Configure a named logger once.

    Later calls with the same name return the already configured logger
    unchanged.

    :param name: Logger name, usually the calling module's ``__name__``
    :param level: Level name or number
    :param log_file: Optional file name written under ``log_dir``
    :param log_dir: Directory for ``log_file``, ``logs/`` when omitted
    :param console: Whether to also log to stderr
    :return: Configured logger
    """
    if name in _configured:
        return _configured[name]

    logger = logging.getLogger(name)
    if not logger.handlers:
        numeric_level = resolve_level(level)
        logger.setLevel(numeric_level)
        _attach_handlers(logger, numeric_level, console, log_file, log_dir)

    _configured[name] = logger
    return logger


def get_logger(name: str) -> logging.Logger:
    """Return the logger configured for ``name``, setting it up with defaults if needed."""
    return _configured.get(name) or setup_logger(name)


def configure_node_logging(
    node_id: Any,
    log_level: str | int = "INFO",
    log_file: str | None = None,
    log_dir: str | None = None,
) -> "LoggerAdapter":
    """
    Build the logger of one node and wrap it in a node-tagging adapter.

    Unlike ``setup_logger`` this always applies the given settings: handlers
    from an earlier call for the same node are closed and replaced, so a
    node can be reconfigured when a new configuration file is loaded.

    :param node_id: Identity of the node owning the router
    :param log_level: Level name or number
    :param log_file: Optional file name; records there include source location
    :param log_dir: Directory for ``log_file``
    :return: Adapter prefixing every message with ``[node=<id>]``
    """
    name = f"{NODE_LOGGER_PREFIX}.{node_id}"
    logger = logging.getLogger(name)
    _release_handlers(logger)

    numeric_level = resolve_level(log_level)
    logger.setLevel(numeric_level)
    _attach_handlers(logger, numeric_level, True, log_file, log_dir)
    _configured[name] = logger

    return LoggerAdapter(logger, {"node": node_id})


class LoggerAdapter(logging.LoggerAdapter):
    """Adapter writing its context as ``[key=value - ...]`` before each message."""

    def process(self, msg: Any, kwargs: Any) -> tuple[str, Any]:
        if not self.extra:
            return str(msg), kwargs
        context = " - ".join(f"{key}={value}" for key, value in self.extra.items())
        return f"[{context}] {msg}", kwargs
