# tests/conftest.py
from rollcall.logging_config import cleanup_test_logs


def pytest_sessionfinish(session, exitstatus):
    # loggers write to a temp dir while under pytest; drop it when done
    cleanup_test_logs()
