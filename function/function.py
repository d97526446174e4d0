# app/function/function.py
import math
from typing import Optional, Type

from sqlalchemy.orm import Query

from core import schemas
from core.config import settings
from core.constants import ResponseCode
from core.exceptions import ConflictException

# 페이지 번호 보정 (1부터 시작)
def get_page(page: Optional[int]) -> int:
    return page if page and page > 0 else 1

# 페이지 크기 보정 (기본값/최대값 적용)
def get_page_size(page_size: Optional[int]) -> int:
    if not page_size or page_size < 1:
        return settings.DEFAULT_PAGE_SIZE
    return min(page_size, settings.MAX_PAGE_SIZE)

def paginate(query: Query, page: Optional[int], page_size: Optional[int], item_schema: Type[schemas.OrmConfig]) -> schemas.PageInfo:
    """정렬이 적용된 쿼리를 페이지 단위로 잘라 PageInfo로 반환합니다."""
    page = get_page(page)
    page_size = get_page_size(page_size)

    total = query.order_by(None).count()
    rows = query.limit(page_size).offset((page - 1) * page_size).all()

    return schemas.PageInfo(
        page_number=page,
        page_size=page_size,
        total_pages=math.ceil(total / page_size) if total else 0,
        total_content_count=total,
        content=[item_schema.model_validate(row) for row in rows],
    )

# 낙관적 잠금: 요청이 알고 있는 버전과 현재 버전 비교
def check_version(entity, expected_version: Optional[int]):
    if expected_version is not None and entity.version != expected_version:
        raise ConflictException(ResponseCode.CONCURRENT_UPDATE)

# 낙관적 잠금: 변경 시 버전 증가 (UPDATE ... WHERE version = 이전값)
def bump_version(entity):
    entity.version = (entity.version or 0) + 1
