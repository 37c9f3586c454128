"""
Tests for settings, logging setup and performance helpers.
"""

import logging

import pytest
from pydantic import ValidationError

from listmaker import FluentSequence, FluentSettings, configure, get_settings
from listmaker.models import DEFAULT_LOG_FORMAT, PerformanceInfo, PerformanceSummary
from listmaker.utils import (
    InvalidArgumentError,
    clear_performance_metrics,
    get_performance_summary,
    get_recorded_operations,
    measure_performance,
    setup_logging,
    validate_lazy_evaluation,
)


class TestSettings:
    """FluentSettings model and the active-settings helpers"""

    def test_defaults(self):
        settings = FluentSettings()
        assert settings.log_level == "INFO"
        assert settings.log_format == DEFAULT_LOG_FORMAT
        assert settings.strict_single_pass is False

    def test_log_level_is_normalized(self):
        assert FluentSettings(log_level=" debug ").log_level == "DEBUG"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            FluentSettings(log_level="LOUD")

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("LISTMAKER_LOG_LEVEL", "warning")
        monkeypatch.setenv("LISTMAKER_STRICT_SINGLE_PASS", "yes")
        settings = FluentSettings.from_env()
        assert settings.log_level == "WARNING"
        assert settings.strict_single_pass is True

    def test_from_env_explicit_mapping(self):
        settings = FluentSettings.from_env({"LISTMAKER_STRICT_SINGLE_PASS": "0", "LISTMAKER_LOG_FORMAT": "%(message)s"})
        assert settings.strict_single_pass is False
        assert settings.log_format == "%(message)s"

    def test_configure_overrides(self):
        configured = configure(strict_single_pass=True)
        assert get_settings() is configured
        assert configured.strict_single_pass is True
        assert configured.log_level == "INFO"

    def test_configure_reloads_environment(self, monkeypatch):
        monkeypatch.setenv("LISTMAKER_LOG_LEVEL", "ERROR")
        assert configure().log_level == "ERROR"

    def test_configure_with_model(self):
        settings = FluentSettings(log_level="DEBUG")
        assert configure(settings) is settings


class TestLogging:
    def test_setup_logging_sets_package_level(self):
        package_logger = setup_logging(FluentSettings(log_level="WARNING"))
        assert package_logger.name == "listmaker"
        assert package_logger.level == logging.WARNING

    def test_single_pass_wrapping_logged_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="listmaker.fluent"):
            FluentSequence.from_iterator(iter([1]))
        assert any("single-pass" in record.message for record in caplog.records)


class TestPerformanceHelpers:
    """measure_performance and the metrics registry"""

    def test_measure_successful_operation(self):
        seq = FluentSequence.from_array(range(1000)).map(lambda x: x * 2)
        info = measure_performance("double", seq.to_list)

        assert isinstance(info, PerformanceInfo)
        assert info.success is True
        assert info.operation == "double"
        assert info.result_size == 1000
        assert info.execution_time_ms >= 0
        assert info.memory_usage_mb >= 0

    def test_result_without_len(self):
        info = measure_performance("size", FluentSequence.of(1, 2).size)
        assert info.result_size is None

    def test_failed_operation_is_recorded_and_reraised(self):
        with pytest.raises(InvalidArgumentError):
            measure_performance("bad_get", FluentSequence.of(1).get, -1)

        recorded = get_recorded_operations()
        assert len(recorded) == 1
        assert recorded[0].success is False
        assert "negative" in recorded[0].error

    def test_summary(self):
        assert get_performance_summary() == PerformanceSummary()

        measure_performance("a", FluentSequence.of(1).to_list)
        measure_performance("b", FluentSequence.of(2).to_list)
        summary = get_performance_summary()

        assert summary.total_operations == 2
        assert summary.avg_time_ms == pytest.approx(summary.total_time_ms / 2)

    def test_clear(self):
        measure_performance("a", FluentSequence.of(1).to_list)
        clear_performance_metrics()
        assert get_performance_summary().total_operations == 0
        assert get_recorded_operations() == []

    def test_measure_requires_callable(self):
        with pytest.raises(InvalidArgumentError):
            measure_performance("nothing", None)

    def test_validate_lazy_evaluation(self):
        assert validate_lazy_evaluation(FluentSequence.of(1).map(str))
        assert not validate_lazy_evaluation([1, 2])
