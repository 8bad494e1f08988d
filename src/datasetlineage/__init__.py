"""
datasetlineage - Dataset lineage resolution over a registered dataset catalog.

Normalizes heterogeneous dataset URIs (``hive:///db/table``,
``dalids://cluster/db/table``, ``cluster:db.table``) into a canonical identity,
resolves that identity against a catalog, expands its transitive dependency
tree and computes common ancestors between datasets.

This module also owns the package-wide loguru configuration. Every submodule
logs through ``from datasetlineage import logger``; applications embedding the
package may call :func:`initialize_logging` to pick levels and a log directory,
or leave the shared logger alone and add their own sinks.
"""

__version__ = "0.1.0"

import os
import sys
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, TextIO, Union

from loguru import logger

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss.SSS}</green> "
    "<level>{level: <8}</level> "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>"
)

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} {level: <8} {name}:{function}:{line} | {message}"

LOG_FILE_PATTERN = "datasetlineage_{time:YYYYMMDD}.log"


class LoggingConfigError(Exception):
    """Logging could not be configured as requested."""


@dataclass
class LoggerState:
    """
    Sinks the package itself added to the shared loguru logger.

    :func:`reset_logging` only removes these, so sinks installed by an
    embedding application or a test harness survive a reset.
    """

    initialized: bool = False
    test_mode: bool = False
    sink_ids: List[int] = field(default_factory=list)

    def track(self, sink_id: int) -> int:
        self.sink_ids.append(sink_id)
        return sink_id

    def clear(self) -> None:
        self.initialized = False
        self.test_mode = False
        self.sink_ids = []


_state = LoggerState()


def validate_log_level(level: str) -> str:
    """Return the upper-cased loguru level name, or raise :class:`LoggingConfigError`."""
    name = str(level).upper()
    if name not in LOG_LEVELS:
        raise LoggingConfigError(f"Invalid log level '{level}'. Must be one of: {', '.join(LOG_LEVELS)}")
    return name


def validate_output_destination(destination: Union[str, Path, TextIO, None]) -> Union[str, TextIO, None]:
    """
    Check a sink destination.

    Streams pass through unchanged. For file paths the parent directory is
    created and the path returned as a string.
    """
    if destination is None or hasattr(destination, "write"):
        return destination

    try:
        path = Path(destination)
    except TypeError as e:
        raise LoggingConfigError(f"Invalid output destination '{destination}': {e}") from e

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise LoggingConfigError(f"Cannot create log directory for '{destination}': {e}") from e
    return str(path)


def configure_console_logging(
    level: str = "INFO",
    format_template: Optional[str] = None,
    colorize: bool = True,
    destination: Optional[TextIO] = None,
) -> int:
    """
    Add a console sink and return its id.

    Args:
        level: Minimum level written to the console
        format_template: loguru format string, :data:`CONSOLE_FORMAT` when None
        colorize: Emit ANSI colors
        destination: Stream to write to, ``sys.stderr`` when None
    """
    level = validate_log_level(level)
    try:
        sink_id = logger.add(
            destination if destination is not None else sys.stderr,
            level=level,
            format=format_template or CONSOLE_FORMAT,
            colorize=colorize,
        )
    except (TypeError, ValueError) as e:
        raise LoggingConfigError(f"Failed to add console sink: {e}") from e
    return _state.track(sink_id)


def configure_file_logging(
    log_file_path: Union[str, Path],
    level: str = "DEBUG",
    rotation: str = "10 MB",
    retention: str = "7 days",
    compression: str = "zip",
    format_template: Optional[str] = None,
    encoding: str = "utf-8",
) -> int:
    """
    Add a rotating file sink and return its id.

    ``rotation``, ``retention`` and ``compression`` are handed to loguru
    unchanged; rotated files are compressed and pruned after a week by
    default.
    """
    level = validate_log_level(level)
    path = validate_output_destination(log_file_path)
    try:
        sink_id = logger.add(
            path,
            level=level,
            format=format_template or FILE_FORMAT,
            rotation=rotation,
            retention=retention,
            compression=compression,
            encoding=encoding,
        )
    except (TypeError, ValueError, OSError) as e:
        raise LoggingConfigError(f"Failed to add log file sink {path}: {e}") from e
    return _state.track(sink_id)


def reset_logging() -> None:
    """Remove every sink the package added and forget the initialized state."""
    for sink_id in _state.sink_ids:
        try:
            logger.remove(sink_id)
        except ValueError:
            # already removed elsewhere
            continue
    _state.clear()


def initialize_logging(
    console_level: str = "INFO",
    file_level: str = "DEBUG",
    log_dir: Optional[Union[str, Path]] = None,
    test_mode: bool = False,
) -> Dict[str, int]:
    """
    Replace the package sinks with a console sink and, optionally, a daily log file.

    Args:
        console_level: Console level
        file_level: Level of the file sink
        log_dir: Directory receiving ``datasetlineage_<date>.log``; no file sink when None
        test_mode: Disable colors and mark the state as set up by a test harness

    Returns:
        ``{"console": id}`` plus ``"file"`` when a log directory was given
    """
    reset_logging()

    sinks = {"console": configure_console_logging(level=console_level, colorize=not test_mode)}
    if log_dir is not None:
        sinks["file"] = configure_file_logging(Path(log_dir) / LOG_FILE_PATTERN, level=file_level)

    _state.initialized = True
    _state.test_mode = test_mode
    logger.debug("datasetlineage logging initialized with sinks {}", sinks)
    return sinks


def get_logger_state() -> LoggerState:
    return _state


def is_logging_initialized() -> bool:
    return _state.initialized


def _is_pytest_running() -> bool:
    return "pytest" in sys.modules or "PYTEST_CURRENT_TEST" in os.environ


def _auto_initialize_logging() -> None:
    """Install the package console sink on import, except under pytest."""
    if _state.initialized or _is_pytest_running():
        return
    # drop loguru's built-in DEBUG stderr handler
    logger.remove()
    level = os.environ.get("DATASETLINEAGE_LOG_LEVEL", "INFO")
    try:
        initialize_logging(console_level=level)
    except LoggingConfigError as e:
        warnings.warn(f"Ignoring DATASETLINEAGE_LOG_LEVEL: {e}")
        initialize_logging()


_auto_initialize_logging()

from .exceptions import (  # noqa: E402
    DatasetLineageError,
    UriError,
    CatalogLookupError,
    RepositoryError,
    TraversalError,
    AncestorError,
    ConfigError,
)
from .config import LineageSettings, load_settings, load_catalog  # noqa: E402
from .uri import Platform, DatasetIdentity, normalize, reconstruct_uri  # noqa: E402
from .repository import (  # noqa: E402
    CatalogRecord,
    DependencyEdge,
    DatasetRepository,
    InMemoryDatasetRepository,
)
from .tree import DependencyRecord, DependencyTreeBuilder, count_leaf_dependencies  # noqa: E402
from .resolver import DependencyReport, LineageResolver  # noqa: E402
from .ancestors import AncestorResolver  # noqa: E402
from .api import (  # noqa: E402
    LineageResponse,
    AncestorResponse,
    get_lineage,
    get_common_ancestors,
)

__all__ = [
    "__version__",
    "logger",
    "LoggingConfigError",
    "configure_console_logging",
    "configure_file_logging",
    "initialize_logging",
    "reset_logging",
    "get_logger_state",
    "is_logging_initialized",
    "DatasetLineageError",
    "UriError",
    "CatalogLookupError",
    "RepositoryError",
    "TraversalError",
    "AncestorError",
    "ConfigError",
    "LineageSettings",
    "load_settings",
    "load_catalog",
    "Platform",
    "DatasetIdentity",
    "normalize",
    "reconstruct_uri",
    "CatalogRecord",
    "DependencyEdge",
    "DatasetRepository",
    "InMemoryDatasetRepository",
    "DependencyRecord",
    "DependencyTreeBuilder",
    "count_leaf_dependencies",
    "DependencyReport",
    "LineageResolver",
    "AncestorResolver",
    "LineageResponse",
    "AncestorResponse",
    "get_lineage",
    "get_common_ancestors",
]
