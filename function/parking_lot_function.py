# app/function/parking_lot_function.py
import logging
from typing import List, Set
from uuid import UUID

from sqlalchemy.orm import Session, selectinload
from sqlalchemy import func, case

from core import models, schemas
from core.constants import ResponseCode
from core.database import transaction, read_scope
from core.exceptions import NotFoundException
from . import slot_function
from .function import paginate, check_version, bump_version

_REQUIRED_FIELDS = {"name", "status"}

# =================================================================
# 내부 유틸리티 함수
# =================================================================

def _get_parking_lot_by_id(db: Session, parking_lot_id: UUID) -> models.ParkingLot:
    """ID로 주차장 정보를 조회하고 없으면 예외를 발생시킵니다."""
    parking_lot = db.query(models.ParkingLot).filter(
        models.ParkingLot.id == parking_lot_id
    ).first()
    if not parking_lot:
        raise NotFoundException(ResponseCode.INVALID_PARKING_LOT)
    return parking_lot

def touch_parking_lot(db: Session, user_id: UUID, parking_lot_id: UUID) -> models.ParkingLot:
    """
    하위 구성(블록/이용 시간 옵션)이 바뀔 때 주차장 버전을 올립니다.
    이전 버전으로 들어오는 구조 일괄 수정(v2)은 충돌로 거부됩니다.
    호출하는 쪽의 트랜잭션 안에서 사용합니다.
    """
    parking_lot = _get_parking_lot_by_id(db, parking_lot_id)
    parking_lot.update_by = user_id
    bump_version(parking_lot)
    return parking_lot

def _apply_scalar_fields(parking_lot: models.ParkingLot, request):
    parking_lot.name = request.name
    parking_lot.description = request.description
    parking_lot.address = request.address
    parking_lot.start_time = request.start_time
    parking_lot.end_time = request.end_time
    parking_lot.lat = request.lat
    parking_lot.long = request.long

# =================================================================
# 주차장 (ParkingLot) 관련 함수
# =================================================================

def create_parking_lot(db: Session, user_id: UUID, request: schemas.ParkingLotRequest) -> schemas.ParkingLotResponse:
    """새로운 주차장을 등록합니다. (블록/이용 시간 옵션은 별도 등록)"""
    with transaction(db):
        new_parking_lot = models.ParkingLot(
            company_id=request.company_id,
            status=models.ParkingLotStatus.PENDING,
            version=1,
            create_by=user_id,
            update_by=user_id
        )
        _apply_scalar_fields(new_parking_lot, request)
        db.add(new_parking_lot)

    logging.info(f"[PARKING_LOT] created parking lot {new_parking_lot.id}")
    return get_parking_lot(db, new_parking_lot.id)

def get_parking_lot(db: Session, parking_lot_id: UUID) -> schemas.ParkingLotResponse:
    """주차장 상세 정보(블록, 주차면, 이용 시간 옵션 포함)를 조회합니다."""
    with read_scope(db):
        parking_lot = db.query(models.ParkingLot).options(
            selectinload(models.ParkingLot.blocks).selectinload(models.Block.parking_slots),
            selectinload(models.ParkingLot.time_frames)
        ).filter(
            models.ParkingLot.id == parking_lot_id
        ).populate_existing().first()
        if not parking_lot:
            raise NotFoundException(ResponseCode.INVALID_PARKING_LOT)
        return schemas.ParkingLotResponse.model_validate(parking_lot)

def list_parking_lots(db: Session, params: schemas.ListParkingLotParam) -> schemas.PageInfo:
    """조건(회사, 이름 앞부분, 상태)으로 주차장 목록을 조회합니다."""
    with read_scope(db):
        query = db.query(models.ParkingLot)
        if params.company_id:
            query = query.filter(models.ParkingLot.company_id == params.company_id)
        if params.name:
            query = query.filter(models.ParkingLot.name.ilike(f"{params.name}%"))
        if params.status:
            query = query.filter(models.ParkingLot.status == params.status)
        query = query.order_by(models.ParkingLot.create_at.desc())
        return paginate(query, params.page, params.page_size, schemas.ParkingLotSummaryResponse)

def update_parking_lot(db: Session, user_id: UUID, parking_lot_id: UUID, request: schemas.EditParkingLotRequest) -> schemas.ParkingLotResponse:
    """주차장 기본 정보만 수정합니다. (하위 블록/이용 시간 옵션은 그대로)"""
    with transaction(db):
        parking_lot = _get_parking_lot_by_id(db, parking_lot_id)
        check_version(parking_lot, request.version)

        changes = request.model_dump(exclude_unset=True, exclude={"version"})
        for field, value in changes.items():
            # 이름/상태는 비울 수 없음 (null 이면 무시)
            if value is None and field in _REQUIRED_FIELDS:
                continue
            setattr(parking_lot, field, value)
        parking_lot.update_by = user_id
        bump_version(parking_lot)

    return get_parking_lot(db, parking_lot_id)

def delete_parking_lot(db: Session, user_id: UUID, parking_lot_id: UUID):
    """주차장을 비활성화합니다. 과거 티켓 조회를 위해 하위 데이터는 남겨 둡니다."""
    with transaction(db):
        parking_lot = _get_parking_lot_by_id(db, parking_lot_id)
        parking_lot.status = models.ParkingLotStatus.INACTIVE
        parking_lot.update_by = user_id
        bump_version(parking_lot)

    logging.info(f"[PARKING_LOT] deactivated parking lot {parking_lot_id}")

# =================================================================
# 주차장 구조 동기화 (v2)
# =================================================================

def update_parking_lot_v2(db: Session, user_id: UUID, request: schemas.UpdateParkingLotV2Request) -> schemas.ParkingLotResponse:
    """
    주차장 기본 정보와 블록/이용 시간 옵션 구성을 요청된 상태로 한 번에 맞춥니다.
    하나의 트랜잭션으로 처리하며, 실패 시 주차장은 변경되지 않습니다.
    """
    with transaction(db):
        parking_lot = _get_parking_lot_by_id(db, request.parking_lot_id)
        check_version(parking_lot, request.version)
        reconcile_parking_lot(db, user_id, parking_lot, request)

    logging.info(f"[PARKING_LOT] reconciled layout of parking lot {request.parking_lot_id}")
    # 커밋 후 새로 생성된 주차면까지 포함하여 다시 조회
    return get_parking_lot(db, request.parking_lot_id)

def reconcile_parking_lot(db: Session, user_id: UUID, parking_lot: models.ParkingLot, request: schemas.UpdateParkingLotV2Request):
    """
    요청에 선언된 블록/이용 시간 옵션 목록으로 하위 구성을 교체합니다.
    1. id 있음(유지) / id 없음(신규)으로 분류
    2. 유지 목록에 없는 기존 항목 일괄 삭제 (소프트 삭제)
    3. 신규 항목 일괄 추가 + 신규 블록 주차면 생성
    4. 주차장 및 유지 항목 정보 저장
    호출하는 쪽에서 트랜잭션을 열고 commit 합니다.
    """
    parking_lot_id = parking_lot.id

    # 1. 분류
    kept_block_ids: Set[UUID] = {block.id for block in request.blocks if block.id}
    kept_time_frame_ids: Set[UUID] = {tf.id for tf in request.time_frames if tf.id}

    live_blocks = {
        block.id: block for block in db.query(models.Block).filter(
            models.Block.parking_lot_id == parking_lot_id,
            models.Block.del_yn == models.YnType.N
        ).all()
    }
    live_time_frames = {
        tf.id: tf for tf in db.query(models.TimeFrame).filter(
            models.TimeFrame.parking_lot_id == parking_lot_id,
            models.TimeFrame.del_yn == models.YnType.N
        ).all()
    }

    # 다른 주차장 소속이거나 이미 삭제된 id는 유지 대상이 될 수 없음
    unknown_block_ids = kept_block_ids - live_blocks.keys()
    if unknown_block_ids:
        raise NotFoundException(ResponseCode.INVALID_BLOCK, data=sorted(str(i) for i in unknown_block_ids))
    unknown_time_frame_ids = kept_time_frame_ids - live_time_frames.keys()
    if unknown_time_frame_ids:
        raise NotFoundException(ResponseCode.INVALID_TIME_FRAME, data=sorted(str(i) for i in unknown_time_frame_ids))

    # 2. 삭제할 ID = (현재 DB에 있는 ID) - (요청으로 들어온 ID)
    now = models.now_local()
    block_ids_to_delete: List[UUID] = list(live_blocks.keys() - kept_block_ids)
    if block_ids_to_delete:
        db.query(models.Block).filter(
            models.Block.id.in_(block_ids_to_delete)
        ).update(
            {models.Block.del_yn: models.YnType.Y, models.Block.update_by: user_id, models.Block.update_at: now},
            synchronize_session=False
        )
        slot_function.retire_slots(db, user_id, block_ids_to_delete)

    time_frame_ids_to_delete: List[UUID] = list(live_time_frames.keys() - kept_time_frame_ids)
    if time_frame_ids_to_delete:
        db.query(models.TimeFrame).filter(
            models.TimeFrame.id.in_(time_frame_ids_to_delete)
        ).update(
            {models.TimeFrame.del_yn: models.YnType.Y, models.TimeFrame.update_by: user_id, models.TimeFrame.update_at: now},
            synchronize_session=False
        )

    # 3. 신규 항목 추가
    new_blocks = [
        models.Block(
            code=declared.code,
            description=declared.description,
            slot=declared.slot,
            parking_lot_id=parking_lot_id,
            create_by=user_id,
            update_by=user_id
        )
        for declared in request.blocks if not declared.id
    ]
    new_time_frames = [
        models.TimeFrame(
            duration=declared.duration,
            cost=declared.cost,
            parking_lot_id=parking_lot_id,
            create_by=user_id,
            update_by=user_id
        )
        for declared in request.time_frames if not declared.id
    ]
    db.add_all(new_blocks)
    db.add_all(new_time_frames)
    db.flush()  # 신규 블록 ID 확보

    for block in new_blocks:
        slot_function.provision_slots(db, block, user_id)

    # 4. 유지 항목과 주차장 정보 저장 (slot 값이 바뀌어도 주차면은 다시 만들지 않음)
    for declared in request.blocks:
        if declared.id:
            block = live_blocks[declared.id]
            block.code = declared.code
            block.description = declared.description
            block.slot = declared.slot
            block.update_by = user_id
    for declared in request.time_frames:
        if declared.id:
            time_frame = live_time_frames[declared.id]
            time_frame.duration = declared.duration
            time_frame.cost = declared.cost
            time_frame.update_by = user_id

    _apply_scalar_fields(parking_lot, request)
    parking_lot.update_by = user_id
    bump_version(parking_lot)
    db.flush()

    logging.info(
        f"[PARKING_LOT] lot {parking_lot_id}: "
        f"blocks -{len(block_ids_to_delete)} +{len(new_blocks)}, "
        f"time frames -{len(time_frame_ids_to_delete)} +{len(new_time_frames)}"
    )

# =================================================================
# 주차장 통계
# =================================================================

def get_parking_lots_info_by_ids(db: Session, parking_lot_ids: List[UUID]) -> List[schemas.ParkingLotInfoResponse]:
    """
    운영 중인(주차장/회사 모두 active) 주차장별 주차면 수, 예약 현황, 리뷰 수를 조회합니다.
    """
    if not parking_lot_ids:
        return []

    with read_scope(db):
        active_lot_ids = [
            row[0] for row in db.query(models.ParkingLot.id).join(
                models.Company, models.ParkingLot.company_id == models.Company.id
            ).filter(
                models.ParkingLot.id.in_(parking_lot_ids),
                models.ParkingLot.status == models.ParkingLotStatus.ACTIVE,
                models.Company.status == "active"
            ).all()
        ]
        if not active_lot_ids:
            return []

        slot_counts = dict(
            db.query(models.Block.parking_lot_id, func.count(models.ParkingSlot.id)).join(
                models.ParkingSlot, models.ParkingSlot.block_id == models.Block.id
            ).filter(
                models.Block.parking_lot_id.in_(active_lot_ids),
                models.Block.del_yn == models.YnType.N,
                models.ParkingSlot.del_yn == models.YnType.N
            ).group_by(models.Block.parking_lot_id).all()
        )

        ticket_stats = {
            row.parking_lot_id: row for row in db.query(
                models.Ticket.parking_lot_id,
                func.count(models.Ticket.id).label("total"),
                func.sum(case(
                    (models.Ticket.state.in_([models.TicketState.CANCEL, models.TicketState.COMPLETED]), 0),
                    else_=1
                )).label("booked"),
                func.sum(case((models.Ticket.is_good_review.is_(True), 1), else_=0)).label("good"),
                func.sum(case((models.Ticket.is_good_review.is_(False), 1), else_=0)).label("bad"),
            ).filter(
                models.Ticket.parking_lot_id.in_(active_lot_ids)
            ).group_by(models.Ticket.parking_lot_id).all()
        }

    result = []
    for lot_id in active_lot_ids:
        stats = ticket_stats.get(lot_id)
        result.append(schemas.ParkingLotInfoResponse(
            id=lot_id,
            total_slots=slot_counts.get(lot_id, 0),
            booked_slots=int(stats.booked or 0) if stats else 0,
            total_booked_slots=int(stats.total or 0) if stats else 0,
            good_reviews=int(stats.good or 0) if stats else 0,
            bad_reviews=int(stats.bad or 0) if stats else 0,
        ))
    return result
