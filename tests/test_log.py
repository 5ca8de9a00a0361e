"""Unit tests for logging configuration and utilities."""

import json
import logging
import sys
import time
from unittest.mock import patch

import structlog

from cardsnipe.utils.log import LoggerMixin, configure_logging, get_logger


class TestConfigureLogging:
    """Test logging configuration function."""

    def test_configure_logging_sets_up_structlog(self):
        """Test that configure_logging sets up structlog correctly."""
        structlog.reset_defaults()

        configure_logging()

        assert structlog.is_configured()
        config = structlog.get_config()
        processor_names = [
            p.__name__ if hasattr(p, '__name__') else str(p) for p in config['processors']
        ]
        assert any('filter_by_level' in name for name in processor_names)
        assert any('add_log_level' in name for name in processor_names)
        assert any('JSONRenderer' in name for name in processor_names)

    def test_configure_logging_writes_to_stdout(self):
        """Test that the root handler streams to stdout."""
        logging.getLogger().handlers.clear()

        with patch('cardsnipe.utils.log.settings') as mock_settings:
            mock_settings.LOG_LEVEL = "DEBUG"
            configure_logging()

        handler = logging.getLogger().handlers[0]
        assert handler.stream == sys.stdout

    def test_configure_logging_idempotent(self):
        """Test that configure_logging can be called multiple times safely."""
        structlog.reset_defaults()

        configure_logging()
        first_config = structlog.get_config()
        configure_logging()
        second_config = structlog.get_config()

        assert len(first_config['processors']) == len(second_config['processors'])


class TestGetLogger:
    """Test get_logger function."""

    def test_get_logger_auto_configures_if_needed(self):
        structlog.reset_defaults()
        assert not structlog.is_configured()

        logger = get_logger("resolver")

        assert structlog.is_configured()
        assert logger.name == "resolver"


class TestLoggerMixin:
    """Test LoggerMixin class."""

    class Worker(LoggerMixin):
        pass

    def test_logger_named_after_class(self):
        instance = self.Worker()

        assert instance.logger.name == "Worker"
        assert instance.logger is instance.logger

    def test_log_start_creates_context(self):
        """Test that log_start returns a timing context and logs at debug."""
        instance = self.Worker()

        with patch.object(instance.logger, 'debug') as mock_debug:
            context = instance.log_start("price_lookup", source="local-catalog")

        assert context['event'] == "price_lookup"
        assert context['source'] == "local-catalog"
        assert 'start_time' in context
        mock_debug.assert_called_once()
        assert "price_lookup started" in mock_debug.call_args[0][0]

    def test_log_success_includes_duration(self):
        instance = self.Worker()
        context = {'event': 'price_lookup', 'start_time': time.time() - 1.5, 'source': 'x'}

        with patch.object(instance.logger, 'info') as mock_info:
            instance.log_success(context, matched=True)

        kwargs = mock_info.call_args[1]
        assert kwargs['duration_ms'] >= 1400
        assert kwargs['matched'] is True
        assert kwargs['source'] == 'x'
        assert 'start_time' not in kwargs

    def test_log_success_without_start_time(self):
        instance = self.Worker()

        with patch.object(instance.logger, 'info') as mock_info:
            instance.log_success({'event': 'price_lookup'})

        assert 'duration_ms' not in mock_info.call_args[1]

    def test_log_error_reports_error_type(self):
        """Test that log_error logs failure with error details."""
        instance = self.Worker()
        context = {'event': 'price_lookup', 'start_time': time.time()}

        with patch.object(instance.logger, 'error') as mock_error:
            instance.log_error(context, ValueError("bad payload"), attempt=2)

        kwargs = mock_error.call_args[1]
        assert kwargs['error'] == "bad payload"
        assert kwargs['error_type'] == "ValueError"
        assert kwargs['attempt'] == 2
        assert 'duration_ms' in kwargs


class TestLoggingIntegration:
    """Test logging integration scenarios."""

    def test_logging_output_format(self, capsys):
        """Test that logging output is in JSON format."""
        structlog.reset_defaults()
        configure_logging()

        get_logger("integration").info("deal scored", score=67)

        output = capsys.readouterr().out.strip()
        if output:
            log_data = json.loads(output.splitlines()[-1])
            assert log_data['event'] == "deal scored"
            assert log_data['score'] == 67
            assert 'timestamp' in log_data
