# app/core/exceptions.py
import logging
from typing import Optional, Any

from sqlalchemy.exc import SQLAlchemyError, OperationalError
from sqlalchemy.orm.exc import StaleDataError

from .constants import ResponseCode, ErrorClass

class ApiException(Exception):
    error_class = ErrorClass.INFRASTRUCTURE

    def __init__(self, response_code: ResponseCode, data: Optional[Any] = None):
        super().__init__(response_code.message)
        self.response_code = response_code
        self.code = response_code.code
        self.message = response_code.message
        self.data = data

class NotFoundException(ApiException):
    error_class = ErrorClass.NOT_FOUND

class DomainRuleException(ApiException):
    error_class = ErrorClass.DOMAIN_RULE

class ConflictException(ApiException):
    error_class = ErrorClass.CONFLICT

class ValidationException(ApiException):
    error_class = ErrorClass.VALIDATION

class AuthenticationException(ApiException):
    error_class = ErrorClass.UNAUTHENTICATED

class StoreException(ApiException):
    error_class = ErrorClass.INFRASTRUCTURE

class StoreTimeoutException(StoreException):
    error_class = ErrorClass.TIMEOUT


# PostgreSQL statement_timeout / SQLite busy timeout / 요청 취소 시 드라이버 메시지
_TIMEOUT_MARKERS = (
    "statement timeout",
    "canceling statement",
    "query_canceled",
    "database is locked",
)

def classify_store_error(exc: SQLAlchemyError) -> ApiException:
    """SQLAlchemy 오류를 오류 분류 체계(ApiException)로 변환합니다."""
    if isinstance(exc, StaleDataError):
        logging.warning(f"[STORE] stale write detected: {exc}")
        return ConflictException(ResponseCode.CONCURRENT_UPDATE)

    if isinstance(exc, OperationalError):
        text = str(exc).lower()
        if any(marker in text for marker in _TIMEOUT_MARKERS):
            logging.error(f"[STORE] store interaction timed out: {exc}")
            return StoreTimeoutException(ResponseCode.STORE_TIMEOUT)

    logging.error(f"[STORE] store failure: {exc}")
    return StoreException(ResponseCode.STORE_ERROR)
