"""Tests for the package-level loguru configuration helpers."""

import io

import pytest

import datasetlineage
from datasetlineage import (
    LoggingConfigError,
    configure_console_logging,
    configure_file_logging,
    get_logger_state,
    initialize_logging,
    is_logging_initialized,
    logger,
    reset_logging,
)


class TestValidation:

    @pytest.mark.parametrize("level", ["debug", "INFO", "Warning"])
    def test_valid_levels_are_upper_cased(self, level):
        assert datasetlineage.validate_log_level(level) == level.upper()

    def test_invalid_level(self):
        with pytest.raises(LoggingConfigError, match="Invalid log level 'LOUD'"):
            datasetlineage.validate_log_level("LOUD")

    def test_file_destination_parent_is_created(self, tmp_path):
        target = tmp_path / "nested" / "dir" / "lineage.log"
        assert datasetlineage.validate_output_destination(target) == str(target)
        assert target.parent.is_dir()

    def test_stream_destination_is_returned_as_is(self):
        stream = io.StringIO()
        assert datasetlineage.validate_output_destination(stream) is stream


class TestSinks:

    def test_console_sink_receives_package_logs(self):
        stream = io.StringIO()
        configure_console_logging(level="DEBUG", format_template="{level}:{message}",
                                  colorize=False, destination=stream)

        datasetlineage.normalize("hive:///db/tbl", "c1")

        assert "DEBUG:" in stream.getvalue()
        assert len(get_logger_state().sink_ids) == 1

    def test_console_level_filters(self):
        stream = io.StringIO()
        configure_console_logging(level="ERROR", format_template="{message}",
                                  colorize=False, destination=stream)
        logger.warning("not shown")
        logger.error("shown")
        assert stream.getvalue() == "shown\n"

    def test_file_sink(self, tmp_path):
        log_file = tmp_path / "logs" / "lineage.log"
        sink_id = configure_file_logging(log_file, level="INFO")
        logger.info("written to file")
        logger.remove(sink_id)
        assert "written to file" in log_file.read_text(encoding="utf-8")

    def test_invalid_console_level(self):
        with pytest.raises(LoggingConfigError):
            configure_console_logging(level="nope")


class TestInitialization:

    def test_initialize_and_reset(self, tmp_path):
        sink_ids = initialize_logging(console_level="WARNING", log_dir=tmp_path, test_mode=True)

        assert set(sink_ids) == {"console", "file"}
        assert is_logging_initialized()
        assert get_logger_state().test_mode

        reset_logging()
        assert not is_logging_initialized()
        assert get_logger_state().sink_ids == []

    def test_console_only_without_log_dir(self):
        assert set(initialize_logging(test_mode=True)) == {"console"}

    def test_reinitialize_replaces_own_sinks(self):
        initialize_logging(test_mode=True)
        initialize_logging(test_mode=True)
        assert len(get_logger_state().sink_ids) == 1

    def test_reset_leaves_foreign_sinks(self):
        stream = io.StringIO()
        foreign = logger.add(stream, format="{message}")
        try:
            initialize_logging(test_mode=True)
            reset_logging()
            logger.info("still here")
        finally:
            logger.remove(foreign)
        assert "still here" in stream.getvalue()

    def test_reset_tolerates_sinks_removed_elsewhere(self):
        sink_id = configure_console_logging(destination=io.StringIO(), colorize=False)
        logger.remove(sink_id)
        reset_logging()
        assert get_logger_state().sink_ids == []

    def test_no_auto_initialization_under_pytest(self):
        assert datasetlineage._is_pytest_running()
