# app/core/constants.py
from enum import Enum

class ErrorClass(str, Enum):
    # 경계 계층이 상태 코드를 고를 때 쓰는 오류 분류
    NOT_FOUND = "NOT_FOUND"
    DOMAIN_RULE = "DOMAIN_RULE"
    CONFLICT = "CONFLICT"
    VALIDATION = "VALIDATION"
    UNAUTHENTICATED = "UNAUTHENTICATED"
    INFRASTRUCTURE = "INFRASTRUCTURE"
    TIMEOUT = "TIMEOUT"

class ResponseCode(Enum):
    SUCCESS = ("OK", "성공")
    FAIL = ("FAIL", "오류가 발생했습니다.")
    BAD_REQUEST = ("BAD_REQUEST", "요청이 올바르지 않습니다.")
    INVALID_REQUEST_PARAMETER = ("INVALID_REQUEST_PARAMETER", "올바르지 않은 파라미터입니다.")
    UNAUTHENTICATED = ("UNAUTHENTICATED", "사용자 정보가 유효하지 않습니다.")

    INVALID_PARKING_LOT = ("INVALID_PARKING_LOT", "주차장이 유효하지 않습니다.")
    MISSING_BLOCK_OR_TIME_FRAME = ("MISSING_BLOCK_OR_TIME_FRAME", "블록과 이용 시간 옵션이 최소 1개씩 필요합니다.")
    INVALID_BLOCK = ("INVALID_BLOCK", "블록이 유효하지 않습니다.")
    INVALID_TIME_FRAME = ("INVALID_TIME_FRAME", "이용 시간 옵션이 유효하지 않습니다.")

    INVALID_TICKET = ("INVALID_TICKET", "티켓이 유효하지 않습니다.")
    TICKET_NOT_COMPLETED = ("TICKET_NOT_COMPLETED", "아직 완료되지 않은 티켓입니다.")
    INVALID_TICKET_TRANSITION = ("INVALID_TICKET_TRANSITION", "현재 티켓 상태에서 허용되지 않는 요청입니다.")
    LONG_TERM_TYPE_REQUIRED = ("LONG_TERM_TYPE_REQUIRED", "장기 예약 유형이 필요합니다.")

    CONCURRENT_UPDATE = ("CONCURRENT_UPDATE", "다른 요청이 먼저 데이터를 변경했습니다. 다시 시도해 주세요.")

    STORE_ERROR = ("STORE_ERROR", "데이터 처리 중 오류가 발생했습니다.")
    STORE_TIMEOUT = ("STORE_TIMEOUT", "데이터 처리 시간이 초과되었습니다.")

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
