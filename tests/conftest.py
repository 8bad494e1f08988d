"""
Pytest configuration for the datasetlineage test suite.

Provides:
- Loguru to standard logging bridge so ``caplog`` sees package log records
- Isolation of the package logger state between tests
"""

import contextlib
import logging
import sys
from pathlib import Path

# Add the src directory to the Python path
src_path = str(Path(__file__).parent.parent / "src")
if src_path not in sys.path:
    sys.path.insert(0, src_path)

import pytest
from loguru import logger

import datasetlineage


@pytest.fixture(autouse=True, scope="function")
def capture_loguru_logs_globally(caplog):
    """
    Capture Loguru logs into pytest's caplog.

    Loguru hands standard ``logging.LogRecord`` objects to handler sinks;
    the handler re-dispatches them through the standard logging hierarchy
    where caplog is listening.
    """
    class PropagateHandler(logging.Handler):
        def emit(self, record):
            logging.getLogger(record.name or "datasetlineage").handle(record)

    caplog.set_level(logging.DEBUG)

    handler_id = logger.add(
        PropagateHandler(),
        format="{message}",
        level="DEBUG",
        catch=True,
        enqueue=False,
    )

    yield

    with contextlib.suppress(ValueError, KeyError):
        logger.remove(handler_id)


@pytest.fixture(autouse=True)
def reset_package_logging():
    """Drop any sinks a test installed through the package helpers."""
    yield
    datasetlineage.reset_logging()
