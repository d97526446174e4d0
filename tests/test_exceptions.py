from sqlalchemy.exc import OperationalError, IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from core.constants import ErrorClass
from core.exceptions import (
    classify_store_error, ConflictException, StoreException, StoreTimeoutException
)


def _operational_error(message):
    return OperationalError("UPDATE ticket SET state=?", {}, Exception(message))


def test_statement_timeout_is_classified_as_timeout():
    error = classify_store_error(_operational_error("canceling statement due to statement timeout"))
    assert isinstance(error, StoreTimeoutException)
    assert error.error_class == ErrorClass.TIMEOUT
    assert error.code == "STORE_TIMEOUT"


def test_sqlite_busy_timeout_is_classified_as_timeout():
    assert isinstance(classify_store_error(_operational_error("database is locked")), StoreTimeoutException)


def test_other_operational_errors_are_infrastructure():
    for message in ("disk I/O error", "connection timeout expired"):
        error = classify_store_error(_operational_error(message))
        assert type(error) is StoreException
        assert error.error_class == ErrorClass.INFRASTRUCTURE
        assert error.code == "STORE_ERROR"


def test_integrity_error_is_infrastructure():
    error = classify_store_error(IntegrityError("INSERT INTO parking_slot", {}, Exception("UNIQUE constraint failed")))
    assert type(error) is StoreException


def test_stale_write_is_conflict():
    error = classify_store_error(StaleDataError("UPDATE statement on table 'ticket' expected to update 1 row(s); 0 were matched."))
    assert isinstance(error, ConflictException)
    assert error.code == "CONCURRENT_UPDATE"
