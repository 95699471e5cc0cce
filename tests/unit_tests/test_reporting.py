import logging
import os

from alphasynopsis import reporting
from alphasynopsis.reporting import ErrorLog, PeriodicWarning


def test_logging(tmp_path):
    reporting.__is_initiated__ = False

    reporting.init_logging(str(tmp_path))

    python_logger = logging.getLogger()
    python_logger.progress("test")
    python_logger.info("test")
    python_logger.warning("test")
    python_logger.error("test")
    python_logger.critical("test")

    log_path = os.path.join(str(tmp_path), "log.txt")
    assert os.path.exists(log_path)
    with open(log_path) as f:
        lines = f.readlines()
    assert len(lines) == 5
    assert "PROGRESS: test" in lines[0]
    assert reporting.__is_initiated__

    for handler in python_logger.handlers:
        handler.close()
    python_logger.handlers = []


def test_error_log_entries_reference_lines():
    error_log = ErrorLog()

    error_log.add("peptide is missing", 12)
    error_log.add("general problem")

    assert len(error_log) == 2
    assert error_log.entries[0] == "Line 12: peptide is missing"
    assert error_log.entries[1] == "general problem"
    assert not error_log.truncated


def test_error_log_is_bounded():
    error_log = ErrorLog(max_length=50)

    for i in range(20):
        error_log.add("x" * 10, i)

    assert error_log.n_errors == 20
    assert len(error_log) < 20
    assert sum(len(entry) for entry in error_log.entries) <= 50
    assert error_log.truncated
    assert "more errors not shown" in str(error_log)


def test_periodic_warning(caplog):
    warning = PeriodicWarning("Something odd", first_n=2, interval=5)

    with caplog.at_level(logging.WARNING):
        logged = [warning(str(i)) for i in range(10)]

    assert logged == [True, True, False, False, True, False, False, False, False, True]
    assert warning.count == 10
    assert "Something odd: 0" in caplog.text


def test_periodic_warning_defaults():
    reporting.set_periodic_warning_defaults(first_n=1, interval=3)
    try:
        warning = PeriodicWarning("Something odd")

        logged = [warning() for _ in range(6)]
    finally:
        reporting.set_periodic_warning_defaults(first_n=10, interval=10)

    assert logged == [True, False, True, False, False, True]
