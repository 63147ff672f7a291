import functools
import logging

from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import Session
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from app.config import READ_RETRY_ATTEMPTS, READ_RETRY_MAX_WAIT

logger = logging.getLogger(__name__)


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, OperationalError):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


def _session_of(args) -> Session | None:
    if not args:
        return None
    if isinstance(args[0], Session):
        return args[0]
    return getattr(args[0], "db", None)


def retry_read(func):
    """
    Retry a read-only repository call on transient connection failures.

    The wrapped callable takes the Session (or an object exposing ``.db``)
    as its first argument; the session is rolled back between tries.
    Never use this on writes.
    """

    @functools.wraps(func)
    def attempt(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except DBAPIError as e:
            session = _session_of(args)
            if session is not None and _is_transient(e):
                session.rollback()
            raise

    return retry(
        retry=retry_if_exception(_is_transient),
        stop=stop_after_attempt(READ_RETRY_ATTEMPTS),
        wait=wait_exponential(multiplier=0.2, max=READ_RETRY_MAX_WAIT),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )(attempt)
