# app/router/parking_lot.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
from uuid import UUID

from core.database import get_db
from core import schemas, models
from core.constants import ResponseCode
from core.exceptions import ValidationException
from function import parking_lot_function
from core.dependencies import get_current_user_id

router = APIRouter(prefix="/api/v1/parking-lot", tags=["Parking-Lot"])
router_v2 = APIRouter(prefix="/api/v2/parking-lot", tags=["Parking-Lot"])

# =================================================================
# API Endpoints (PUT, POST, GET, DELETE 순서)
# =================================================================

# -----------------------------------------------------------------
# PUT Endpoints
# -----------------------------------------------------------------

@router.put("/update/{parking_lot_id}", summary="주차장 기본 정보 수정")
def update_parking_lot(
    parking_lot_id: UUID,
    request: schemas.EditParkingLotRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    data = parking_lot_function.update_parking_lot(db, user_id, parking_lot_id, request)
    return schemas.RootResponse.ok(data)

@router_v2.put("/update", summary="주차장 구조(블록/이용 시간 옵션) 일괄 수정")
def update_parking_lot_v2(
    request: schemas.UpdateParkingLotV2Request,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    # 블록과 이용 시간 옵션은 각각 1개 이상 선언되어야 함
    if not request.blocks or not request.time_frames:
        raise ValidationException(ResponseCode.MISSING_BLOCK_OR_TIME_FRAME)

    data = parking_lot_function.update_parking_lot_v2(db, user_id, request)
    return schemas.RootResponse.ok(data)

# -----------------------------------------------------------------
# POST Endpoints
# -----------------------------------------------------------------

@router.post("/create", summary="주차장 생성")
def create_parking_lot(
    request: schemas.ParkingLotRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    data = parking_lot_function.create_parking_lot(db, user_id, request)
    return schemas.RootResponse.ok(data)

# -----------------------------------------------------------------
# GET Endpoints
# -----------------------------------------------------------------

@router.get("/info", summary="주차장별 주차면/예약/리뷰 현황 조회")
def get_parking_lots_info(
    ids: List[UUID] = Query(..., description="주차장ID 목록"),
    db: Session = Depends(get_db)
):
    data = parking_lot_function.get_parking_lots_info_by_ids(db, ids)
    return schemas.RootResponse.ok(data)

@router.get("/get-one/{parking_lot_id}", summary="주차장 상세 조회")
def get_parking_lot(
    parking_lot_id: UUID,
    db: Session = Depends(get_db)
):
    data = parking_lot_function.get_parking_lot(db, parking_lot_id)
    return schemas.RootResponse.ok(data)

@router.get("/get-list", summary="주차장 목록 조회")
def get_parking_lot_list(
    company_id: Optional[UUID] = Query(None, alias="companyId", description="회사ID"),
    name: Optional[str] = Query(None, description="주차장 이름 (앞부분 검색)"),
    status: Optional[models.ParkingLotStatus] = Query(None, description="주차장 상태"),
    page: int = Query(1, description="페이지"),
    page_size: Optional[int] = Query(None, alias="pageSize", description="개수"),
    db: Session = Depends(get_db)
):
    params = schemas.ListParkingLotParam(
        company_id=company_id, name=name, status=status, page=page, page_size=page_size
    )
    data = parking_lot_function.list_parking_lots(db, params)
    return schemas.RootResponse.ok(data)

# -----------------------------------------------------------------
# DELETE Endpoints
# -----------------------------------------------------------------

@router.delete("/delete/{parking_lot_id}", summary="주차장 삭제 (비활성화)")
def delete_parking_lot(
    parking_lot_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    parking_lot_function.delete_parking_lot(db, user_id, parking_lot_id)
    return schemas.RootResponse.ok(None)
