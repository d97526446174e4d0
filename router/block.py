# app/router/block.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from core.database import get_db
from core import schemas
from function import block_function
from core.dependencies import get_current_user_id

router = APIRouter(prefix="/api/v1/block", tags=["Block"])

@router.put("/update/{block_id}", summary="블록 정보 수정")
def update_block(
    block_id: UUID,
    request: schemas.EditBlockRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    data = block_function.update_block(db, user_id, block_id, request)
    return schemas.RootResponse.ok(data)

@router.post("/create", summary="블록 생성 (주차면 자동 생성)")
def create_block(
    request: schemas.BlockRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    data = block_function.create_block(db, user_id, request)
    return schemas.RootResponse.ok(data)

@router.get("/get-one/{block_id}", summary="블록 상세 조회")
def get_block(
    block_id: UUID,
    db: Session = Depends(get_db)
):
    data = block_function.get_block(db, block_id)
    return schemas.RootResponse.ok(data)

@router.get("/get-list", summary="블록 목록 조회")
def get_block_list(
    parking_lot_id: UUID = Query(..., alias="parkingLotId", description="주차장ID"),
    code: Optional[str] = Query(None, description="블록 코드 (앞부분 검색)"),
    page: int = Query(1, description="페이지"),
    page_size: Optional[int] = Query(None, alias="pageSize", description="개수"),
    db: Session = Depends(get_db)
):
    params = schemas.ListBlockParam(parking_lot_id=parking_lot_id, code=code, page=page, page_size=page_size)
    data = block_function.list_blocks(db, params)
    return schemas.RootResponse.ok(data)

@router.delete("/delete/{block_id}", summary="블록 삭제")
def delete_block(
    block_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    block_function.delete_block(db, user_id, block_id)
    return schemas.RootResponse.ok(None)
