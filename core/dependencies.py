# app/core/dependencies.py
from typing import Optional
from uuid import UUID

from fastapi import Header

from core.constants import ResponseCode
from core.exceptions import AuthenticationException

def get_current_user_id(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> UUID:
    """
    X-User-Id 헤더에서 요청자(사용자) ID를 추출하는 의존성.
    인증은 앞단(게이트웨이)에서 끝난 것으로 보고, 여기서는 형식만 검사합니다.
    """
    if not x_user_id:
        raise AuthenticationException(ResponseCode.UNAUTHENTICATED)
    try:
        return UUID(x_user_id)
    except ValueError:
        raise AuthenticationException(ResponseCode.UNAUTHENTICATED, data={"userId": x_user_id})
