import logging
import time

from flask import current_app
from sqlalchemy.exc import OperationalError, TimeoutError as PoolTimeoutError

from swimtrack.extensions import db

logger = logging.getLogger(__name__)

# Connection drops, statement timeouts and pool exhaustion are worth retrying;
# integrity/programming errors are not.
RETRYABLE_ERRORS = (OperationalError, PoolTimeoutError)


def execute_query(fn, retries=None, operation="unknown", base_delay=None, sleep=time.sleep):
    """
    Run fn() and return its result, retrying transient DB failures.

    - retries / base_delay default to DB_RETRIES / DB_RETRY_BASE_DELAY
    - waits base_delay * 2**attempt between attempts
    - rolls the session back before each retry so the next attempt starts clean
    - re-raises the last error once attempts are exhausted
    """
    if retries is None:
        retries = current_app.config.get("DB_RETRIES", 3)
    if base_delay is None:
        base_delay = current_app.config.get("DB_RETRY_BASE_DELAY", 1.0)
    retries = max(1, int(retries))

    for attempt in range(1, retries + 1):
        try:
            return fn()
        except RETRYABLE_ERRORS as e:
            will_retry = attempt < retries
            logger.warning(
                "[DB] query failed operation=%s attempt=%d/%d will_retry=%s error=%s",
                operation, attempt, retries, will_retry, e,
            )
            db.session.rollback()
            if not will_retry:
                raise
            sleep(base_delay * (2 ** attempt))
