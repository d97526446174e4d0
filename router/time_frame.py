# app/router/time_frame.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from uuid import UUID

from core.database import get_db
from core import schemas
from function import time_frame_function
from core.dependencies import get_current_user_id

router = APIRouter(prefix="/api/v1/time-frame", tags=["Time-Frame"])

@router.post("/create", summary="이용 시간 옵션 추가")
def create_time_frame(
    request: schemas.TimeFrameRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    data = time_frame_function.create_time_frame(db, user_id, request)
    return schemas.RootResponse.ok(data)

@router.get("/get-list", summary="이용 시간 옵션 목록 조회")
def get_time_frame_list(
    parking_lot_id: UUID = Query(..., alias="parkingLotId", description="주차장ID"),
    db: Session = Depends(get_db)
):
    data = time_frame_function.list_time_frames(db, parking_lot_id)
    return schemas.RootResponse.ok(data)
