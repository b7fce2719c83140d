# storefront/utils/retry.py
from sqlalchemy.exc import DBAPIError
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from storefront.domain.errors import ConflictError
from storefront.utils.settings import ORDER_RETRY_ATTEMPTS

# postgres: serialization_failure, deadlock_detected
PG_RETRY_ERRCODES = {"40001", "40P01"}


def _pgcode_from(exc: Exception):
    orig = getattr(exc, "orig", None)
    return getattr(orig, "pgcode", None) or getattr(exc, "pgcode", None)


def is_retryable_db_error(exc: Exception) -> bool:
    """True for database errors that mean "another transaction got there first"."""
    if not isinstance(exc, DBAPIError):
        return False
    code = _pgcode_from(exc)
    if code and code in PG_RETRY_ERRCODES:
        return True
    msg = str(exc).lower()
    return any(
        k in msg
        for k in ("deadlock detected", "could not serialize access", "database is locked")
    )


def conflict_retry(attempts: int | None = None):
    return retry(
        reraise=True,
        stop=stop_after_attempt(attempts or ORDER_RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=0.05, min=0.05, max=1),
        retry=retry_if_exception_type(ConflictError),
    )
