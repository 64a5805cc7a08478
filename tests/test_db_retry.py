import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from swimtrack.helpers.db_retry import execute_query


def _operational():
    return OperationalError("SELECT 1", {}, Exception("server closed the connection unexpectedly"))


def test_returns_result_without_retry(app):
    sleeps = []
    assert execute_query(lambda: 42, retries=3, sleep=sleeps.append) == 42
    assert sleeps == []


def test_retries_transient_errors_with_backoff(app):
    attempts = []
    sleeps = []

    def flaky():
        attempts.append(1)
        if len(attempts) < 3:
            raise _operational()
        return "ok"

    assert execute_query(flaky, retries=3, base_delay=0.5, sleep=sleeps.append) == "ok"
    assert len(attempts) == 3
    assert sleeps == [1.0, 2.0]


def test_raises_after_last_attempt(app):
    sleeps = []

    def always_fails():
        raise _operational()

    with pytest.raises(OperationalError):
        execute_query(always_fails, retries=3, base_delay=1, sleep=sleeps.append)
    assert sleeps == [2, 4]


def test_non_transient_errors_are_not_retried(app):
    attempts = []

    def integrity():
        attempts.append(1)
        raise IntegrityError("INSERT", {}, Exception("duplicate key"))

    with pytest.raises(IntegrityError):
        execute_query(integrity, retries=3, sleep=lambda s: None)
    assert len(attempts) == 1


def test_defaults_come_from_config(app):
    app.config["DB_RETRIES"] = 2
    attempts = []

    def always_fails():
        attempts.append(1)
        raise _operational()

    with pytest.raises(OperationalError):
        execute_query(always_fails, sleep=lambda s: None)
    assert len(attempts) == 2
