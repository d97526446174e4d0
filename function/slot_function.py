# app/function/slot_function.py
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from core import models


def provision_slots(db: Session, block: models.Block, user_id: Optional[UUID] = None) -> List[models.ParkingSlot]:
    """
    블록의 선언된 주차면 수(slot = N)만큼 주차면 "1" ~ "N"을 생성합니다.
    블록과 같은 트랜잭션 안에서 호출해야 하며, 블록은 이미 flush되어 ID가 있어야 합니다.
    N < 1 이면 아무것도 만들지 않습니다.
    """
    if block.slot is None or block.slot < 1:
        return []

    slots = [
        models.ParkingSlot(
            name=str(slot_no),
            slot_no=slot_no,
            block_id=block.id,
            create_by=user_id,
            update_by=user_id,
        )
        for slot_no in range(1, block.slot + 1)
    ]
    db.add_all(slots)
    db.flush()

    logging.info(f"[SLOT] provisioned {len(slots)} slots for block {block.id}")
    return slots


def retire_slots(db: Session, user_id: Optional[UUID], block_ids: List[UUID]) -> int:
    """삭제되는 블록들의 주차면을 함께 소프트 삭제합니다. 과거 티켓은 그대로 참조 가능합니다."""
    if not block_ids:
        return 0

    retired = db.query(models.ParkingSlot).filter(
        models.ParkingSlot.block_id.in_(block_ids),
        models.ParkingSlot.del_yn == models.YnType.N
    ).update(
        {
            models.ParkingSlot.del_yn: models.YnType.Y,
            models.ParkingSlot.update_by: user_id,
            models.ParkingSlot.update_at: models.now_local(),
        },
        synchronize_session=False
    )
    return retired
