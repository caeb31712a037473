"""Tests for timing utilities and logging."""

import logging
import time
import pytest
from featurebench.utils.logger import create_session_log_file, setup_logger
from featurebench.utils.metrics import ScopedTimer, summarize_values


class TestTiming:
    """Test timing helpers."""

    def test_scoped_timer(self):
        """Test elapsed time is measured in milliseconds."""
        with ScopedTimer() as timer:
            time.sleep(0.05)
        assert 40 < timer.elapsed_ms < 500

    def test_scoped_timer_on_error(self):
        """Test the timer still records when the body raises."""
        timer = ScopedTimer()
        with pytest.raises(RuntimeError):
            with timer:
                raise RuntimeError("boom")
        assert timer.elapsed_ms >= 0.0

    def test_summarize_values(self):
        """Test summary statistics."""
        stats = summarize_values([1.0, 2.0, 3.0])
        assert stats['mean'] == pytest.approx(2.0)
        assert stats['min'] == 1.0
        assert stats['max'] == 3.0
        assert summarize_values([])['mean'] == 0.0


class TestLogger:
    """Test logger setup."""

    def test_no_duplicate_handlers(self):
        """Test repeated setup keeps one console handler."""
        setup_logger('featurebench.test')
        logger = setup_logger('featurebench.test', logging.DEBUG)
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG

    def test_file_handler(self, tmp_path):
        """Test the optional log file."""
        log_file = tmp_path / "logs" / "run.log"
        logger = setup_logger('featurebench.file_test', log_file=str(log_file))
        logger.info("sweep started")
        for handler in logger.handlers:
            handler.flush()
        assert "sweep started" in log_file.read_text()
        setup_logger('featurebench.file_test')

    def test_session_log_file(self, tmp_path):
        """Test timestamped log names."""
        path = create_session_log_file(str(tmp_path))
        assert path.startswith(str(tmp_path))
        assert path.endswith(".log")
