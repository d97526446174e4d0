# app/function/block_function.py
import logging
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from core import models, schemas
from core.constants import ResponseCode
from core.database import transaction, read_scope
from core.exceptions import NotFoundException
from . import slot_function
from .function import paginate

# =================================================================
# 내부 유틸리티 함수
# =================================================================

def _get_block_by_id(db: Session, block_id: UUID) -> models.Block:
    """ID로 블록을 조회하고 없으면 예외를 발생시킵니다."""
    block = db.query(models.Block).filter(
        models.Block.id == block_id,
        models.Block.del_yn == models.YnType.N
    ).first()
    if not block:
        raise NotFoundException(ResponseCode.INVALID_BLOCK)
    return block

# =================================================================
# 블록 (Block) 관련 함수
# =================================================================

def create_block(db: Session, user_id: UUID, request: schemas.BlockRequest) -> schemas.BlockResponse:
    """블록을 생성하고 선언된 주차면 수만큼 주차면을 만듭니다."""
    from . import parking_lot_function # 순환 참조 방지를 위한 지연 Import

    with transaction(db):
        parking_lot_function.touch_parking_lot(db, user_id, request.parking_lot_id)

        new_block = models.Block(
            code=request.code,
            description=request.description,
            slot=request.slot,
            parking_lot_id=request.parking_lot_id,
            create_by=user_id,
            update_by=user_id
        )
        db.add(new_block)
        db.flush()  # ID를 가져오기 위해 flush

        slot_function.provision_slots(db, new_block, user_id)

    logging.info(f"[BLOCK] created block {new_block.id} in parking lot {request.parking_lot_id}")
    return get_block(db, new_block.id)

def get_block(db: Session, block_id: UUID) -> schemas.BlockResponse:
    with read_scope(db):
        block = db.query(models.Block).options(selectinload(models.Block.parking_slots)).filter(
            models.Block.id == block_id,
            models.Block.del_yn == models.YnType.N
        ).first()
        if not block:
            raise NotFoundException(ResponseCode.INVALID_BLOCK)
        return schemas.BlockResponse.model_validate(block)

def list_blocks(db: Session, params: schemas.ListBlockParam) -> schemas.PageInfo:
    """주차장의 블록 목록을 조회합니다. (코드 앞부분 검색)"""
    with read_scope(db):
        query = db.query(models.Block).filter(
            models.Block.parking_lot_id == params.parking_lot_id,
            models.Block.del_yn == models.YnType.N
        )
        if params.code:
            query = query.filter(models.Block.code.ilike(f"{params.code}%"))
        query = query.order_by(models.Block.create_at.desc())
        return paginate(query, params.page, params.page_size, schemas.BlockSummaryResponse)

def update_block(db: Session, user_id: UUID, block_id: UUID, request: schemas.EditBlockRequest) -> schemas.BlockResponse:
    """
    블록 정보를 수정합니다.
    slot 값이 바뀌어도 주차면은 다시 만들지 않습니다.
    """
    from . import parking_lot_function # 순환 참조 방지를 위한 지연 Import

    with transaction(db):
        block = _get_block_by_id(db, block_id)
        if request.code is not None:
            block.code = request.code
        if request.description is not None:
            block.description = request.description
        if request.slot is not None:
            block.slot = request.slot
        block.update_by = user_id
        parking_lot_function.touch_parking_lot(db, user_id, block.parking_lot_id)

    return get_block(db, block_id)

def delete_block(db: Session, user_id: UUID, block_id: UUID):
    """블록과 소속 주차면을 소프트 삭제합니다."""
    from . import parking_lot_function # 순환 참조 방지를 위한 지연 Import

    with transaction(db):
        block = _get_block_by_id(db, block_id)
        block.del_yn = models.YnType.Y
        block.update_by = user_id
        slot_function.retire_slots(db, user_id, [block.id])
        parking_lot_function.touch_parking_lot(db, user_id, block.parking_lot_id)

    logging.info(f"[BLOCK] deleted block {block_id}")
