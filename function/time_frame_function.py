# app/function/time_frame_function.py
import logging
from typing import List
from uuid import UUID

from sqlalchemy.orm import Session

from core import models, schemas
from core.database import transaction, read_scope


def create_time_frame(db: Session, user_id: UUID, request: schemas.TimeFrameRequest) -> schemas.TimeFrameResponse:
    """주차장의 이용 시간 옵션(시간/요금)을 추가합니다."""
    from . import parking_lot_function # 순환 참조 방지를 위한 지연 Import

    with transaction(db):
        parking_lot_function.touch_parking_lot(db, user_id, request.parking_lot_id)
        time_frame = models.TimeFrame(
            duration=request.duration,
            cost=request.cost,
            parking_lot_id=request.parking_lot_id,
            create_by=user_id,
            update_by=user_id
        )
        db.add(time_frame)

    logging.info(f"[TIME_FRAME] created time frame {time_frame.id} in parking lot {request.parking_lot_id}")
    return schemas.TimeFrameResponse.model_validate(time_frame)

def list_time_frames(db: Session, parking_lot_id: UUID) -> List[schemas.TimeFrameResponse]:
    with read_scope(db):
        time_frames = db.query(models.TimeFrame).filter(
            models.TimeFrame.parking_lot_id == parking_lot_id,
            models.TimeFrame.del_yn == models.YnType.N
        ).order_by(models.TimeFrame.duration).all()
        return [schemas.TimeFrameResponse.model_validate(tf) for tf in time_frames]
