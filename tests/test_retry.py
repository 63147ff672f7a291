import pytest
from sqlalchemy.exc import OperationalError

from app.infrastructure.db.retry import retry_read


class FlakyReader:
    def __init__(self, db, failures):
        self.db = db
        self.failures = failures
        self.calls = 0

    @retry_read
    def read(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise OperationalError("SELECT 1", {}, Exception("server closed the connection"))
        return "ok"


def test_transient_read_failure_is_retried(db):
    reader = FlakyReader(db, failures=1)

    assert reader.read() == "ok"
    assert reader.calls == 2


def test_retries_are_bounded(db):
    reader = FlakyReader(db, failures=100)

    with pytest.raises(OperationalError):
        reader.read()
    assert reader.calls == 3


def test_other_errors_are_not_retried(db):
    calls = []

    @retry_read
    def broken(session):
        calls.append(1)
        raise KeyError("nope")

    with pytest.raises(KeyError):
        broken(db)
    assert len(calls) == 1
