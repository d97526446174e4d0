import pytest

from core import models, schemas
from core.exceptions import NotFoundException, ConflictException
from function import parking_lot_function, ticket_function


def _reconcile(db, actor_id, lot, blocks, time_frames, **fields):
    request = schemas.UpdateParkingLotV2Request(
        parking_lot_id=lot.id,
        name=fields.get("name", lot.name),
        address=fields.get("address", lot.address),
        blocks=blocks,
        time_frames=time_frames,
        version=fields.get("version", lot.version),
    )
    return parking_lot_function.update_parking_lot_v2(db, actor_id, request)


def test_reconcile_keeps_creates_and_deletes_children(db, actor_id, make_parking_lot):
    lot = make_parking_lot([("B1", 2), ("B3", 1)], [(60, 10000), (120, 18000)])
    b1, b3 = lot.blocks
    t1, t2 = lot.time_frames

    result = _reconcile(
        db, actor_id, lot,
        blocks=[
            schemas.DeclaredBlock(id=b1.id, code="B1", slot=2),
            schemas.DeclaredBlock(code="B2", slot=3),
        ],
        time_frames=[schemas.DeclaredTimeFrame(id=t1.id, duration=60, cost=12000)],
        address="12 Nguyen Hue",
    )

    assert [block.code for block in result.blocks] == ["B1", "B2"]
    assert result.blocks[0].id == b1.id
    assert [slot.name for slot in result.blocks[0].parking_slots] == ["1", "2"]
    assert [slot.name for slot in result.blocks[1].parking_slots] == ["1", "2", "3"]
    assert [tf.id for tf in result.time_frames] == [t1.id]
    assert result.time_frames[0].cost == 12000
    assert result.address == "12 Nguyen Hue"
    assert result.version == lot.version + 1

    deleted_block = db.get(models.Block, b3.id)
    assert deleted_block.del_yn == models.YnType.Y
    retired_slots = db.query(models.ParkingSlot).filter(models.ParkingSlot.block_id == b3.id).all()
    assert retired_slots and all(slot.del_yn == models.YnType.Y for slot in retired_slots)
    assert db.get(models.TimeFrame, t2.id).del_yn == models.YnType.Y


def test_reconcile_kept_block_slot_change_does_not_reprovision(db, actor_id, make_parking_lot):
    lot = make_parking_lot([("B1", 2)], [(60, 10000)])
    b1 = lot.blocks[0]

    result = _reconcile(
        db, actor_id, lot,
        blocks=[schemas.DeclaredBlock(id=b1.id, code="B1-renamed", slot=6)],
        time_frames=[schemas.DeclaredTimeFrame(id=lot.time_frames[0].id, duration=60, cost=10000)],
    )

    assert result.blocks[0].code == "B1-renamed"
    assert result.blocks[0].slot == 6
    assert len(result.blocks[0].parking_slots) == 2


def test_reconcile_unknown_block_id_rolls_back(db, actor_id, make_parking_lot):
    lot = make_parking_lot([("B1", 2)], [(60, 10000)])
    other = make_parking_lot([("X1", 1)], [(30, 5000)], name="Lot B")

    with pytest.raises(NotFoundException) as exc_info:
        _reconcile(
            db, actor_id, lot,
            blocks=[
                schemas.DeclaredBlock(code="NEW", slot=4),
                schemas.DeclaredBlock(id=other.blocks[0].id, code="X1", slot=1),
            ],
            time_frames=[],
            name="Renamed",
        )
    assert exc_info.value.code == "INVALID_BLOCK"

    after = parking_lot_function.get_parking_lot(db, lot.id)
    assert after.name == "Lot A"
    assert after.version == lot.version
    assert [block.id for block in after.blocks] == [lot.blocks[0].id]
    assert [tf.id for tf in after.time_frames] == [lot.time_frames[0].id]
    assert db.query(models.Block).filter(models.Block.code == "NEW").count() == 0


def test_reconcile_with_stale_version_is_rejected(db, actor_id, make_parking_lot):
    lot = make_parking_lot([("B1", 2)], [(60, 10000)])

    with pytest.raises(ConflictException):
        _reconcile(
            db, actor_id, lot,
            blocks=[schemas.DeclaredBlock(code="B9", slot=1)],
            time_frames=[schemas.DeclaredTimeFrame(duration=15, cost=1000)],
            version=lot.version - 1,
        )

    assert parking_lot_function.get_parking_lot(db, lot.id).blocks[0].code == "B1"


def test_concurrent_write_is_detected_on_flush(db, actor_id, make_parking_lot):
    lot = make_parking_lot([("B1", 2)], [(60, 10000)])
    loaded = db.get(models.ParkingLot, lot.id)
    assert loaded.version == lot.version

    # 다른 요청이 먼저 커밋한 상황 (세션이 알고 있는 버전은 그대로)
    table = models.ParkingLot.__table__
    db.execute(table.update().where(table.c.id == lot.id).values(version=lot.version + 1))

    with pytest.raises(ConflictException) as exc_info:
        parking_lot_function.update_parking_lot(db, actor_id, lot.id, schemas.EditParkingLotRequest(name="Late"))
    assert exc_info.value.code == "CONCURRENT_UPDATE"


def test_update_and_delete_parking_lot(db, actor_id, make_parking_lot):
    lot = make_parking_lot([("B1", 1)], [(60, 10000)])

    updated = parking_lot_function.update_parking_lot(
        db, actor_id, lot.id,
        schemas.EditParkingLotRequest(description="Open 24h", status=models.ParkingLotStatus.ACTIVE, version=lot.version)
    )
    assert updated.description == "Open 24h"
    assert updated.status == models.ParkingLotStatus.ACTIVE
    assert updated.name == "Lot A"

    parking_lot_function.delete_parking_lot(db, actor_id, lot.id)
    assert parking_lot_function.get_parking_lot(db, lot.id).status == models.ParkingLotStatus.INACTIVE


def test_get_missing_parking_lot_raises_not_found(db):
    from uuid import uuid4

    with pytest.raises(NotFoundException):
        parking_lot_function.get_parking_lot(db, uuid4())


def test_parking_lot_info_counts_slots_bookings_and_reviews(db, actor_id, seed, make_parking_lot, booking_window):
    lot = make_parking_lot([("B1", 2), ("B2", 3)], [(60, 10000)])
    pending = make_parking_lot([("P1", 1)], [(60, 10000)], name="Pending Lot")
    parking_lot_function.update_parking_lot(
        db, actor_id, lot.id, schemas.EditParkingLotRequest(status=models.ParkingLotStatus.ACTIVE)
    )
    start, end = booking_window
    slot_id = lot.blocks[0].parking_slots[0].id

    def _book():
        return ticket_function.create_ticket(db, actor_id, schemas.TicketRequest(
            user_id=seed["user_id"], vehicle_id=seed["vehicle_id"], parking_lot_id=lot.id,
            parking_slot_id=slot_id, start_time=start, end_time=end, total=10000
        ))

    _book()
    cancelled = _book()
    ticket_function.cancel_ticket(db, actor_id, cancelled.id)
    reviewed = _book()
    for transition in (models.TicketTransition.CHECK_IN, models.TicketTransition.CHECK_OUT):
        ticket_function.procedure_with_ticket(db, actor_id, schemas.ProcedureRequest(ticket_id=reviewed.id, type=transition))
    ticket_function.review_ticket(db, actor_id, reviewed.id, schemas.ReviewTicketRequest(is_good_review=True))

    infos = parking_lot_function.get_parking_lots_info_by_ids(db, [lot.id, pending.id])

    assert len(infos) == 1
    info = infos[0]
    assert info.id == lot.id
    assert info.total_slots == 5
    assert info.total_booked_slots == 3
    assert info.booked_slots == 1
    assert info.good_reviews == 1
    assert info.bad_reviews == 0


def test_structural_edits_bump_parking_lot_version(db, actor_id, make_parking_lot):
    from function import block_function, time_frame_function

    lot = make_parking_lot([("B1", 2)], [(60, 10000)])

    block = block_function.create_block(db, actor_id, schemas.BlockRequest(code="NEW", slot=1, parking_lot_id=lot.id))
    assert parking_lot_function.get_parking_lot(db, lot.id).version == lot.version + 1

    block_function.update_block(db, actor_id, block.id, schemas.EditBlockRequest(description="near gate"))
    time_frame_function.create_time_frame(db, actor_id, schemas.TimeFrameRequest(duration=30, cost=5000, parking_lot_id=lot.id))
    block_function.delete_block(db, actor_id, block.id)
    assert parking_lot_function.get_parking_lot(db, lot.id).version == lot.version + 4


def test_reconcile_after_block_added_elsewhere_is_rejected(db, actor_id, make_parking_lot):
    from function import block_function

    lot = make_parking_lot([("B1", 2)], [(60, 10000)])
    added = block_function.create_block(db, actor_id, schemas.BlockRequest(code="NEW", slot=1, parking_lot_id=lot.id))

    # 블록 추가 전에 읽은 버전으로 일괄 수정
    with pytest.raises(ConflictException) as exc_info:
        _reconcile(
            db, actor_id, lot,
            blocks=[schemas.DeclaredBlock(id=lot.blocks[0].id, code="B1", slot=2)],
            time_frames=[schemas.DeclaredTimeFrame(id=lot.time_frames[0].id, duration=60, cost=10000)],
        )
    assert exc_info.value.code == "CONCURRENT_UPDATE"
    assert db.get(models.Block, added.id).del_yn == models.YnType.N


def test_update_parking_lot_can_clear_optional_fields(db, actor_id, make_parking_lot):
    lot = make_parking_lot([("B1", 1)], [(60, 10000)])
    parking_lot_function.update_parking_lot(
        db, actor_id, lot.id, schemas.EditParkingLotRequest(description="Open 24h", address="1 Le Loi", lat=10.77)
    )

    cleared = parking_lot_function.update_parking_lot(
        db, actor_id, lot.id, schemas.EditParkingLotRequest(description=None, lat=None, name=None)
    )

    assert cleared.description is None
    assert cleared.lat is None
    assert cleared.address == "1 Le Loi"
    assert cleared.name == "Lot A"


def test_reconcile_store_failure_rolls_back_everything(db, actor_id, make_parking_lot, monkeypatch):
    from sqlalchemy.exc import OperationalError
    from core.exceptions import StoreException
    from function import slot_function

    lot = make_parking_lot([("B1", 2), ("B3", 1)], [(60, 10000), (120, 18000)])
    b1, b3 = lot.blocks

    def _fail(*args, **kwargs):
        raise OperationalError("INSERT INTO parking_slot", {}, Exception("disk I/O error"))

    # 삭제 반영 후 주차면 생성 단계에서 실패
    monkeypatch.setattr(slot_function, "provision_slots", _fail)
    with pytest.raises(StoreException):
        _reconcile(
            db, actor_id, lot,
            blocks=[schemas.DeclaredBlock(id=b1.id, code="B1", slot=2), schemas.DeclaredBlock(code="B2", slot=3)],
            time_frames=[schemas.DeclaredTimeFrame(id=lot.time_frames[0].id, duration=60, cost=10000)],
        )

    after = parking_lot_function.get_parking_lot(db, lot.id)
    assert after.version == lot.version
    assert [block.id for block in after.blocks] == [b1.id, b3.id]
    assert [slot.name for slot in after.blocks[1].parking_slots] == ["1"]
    assert len(after.time_frames) == 2
    assert db.query(models.Block).filter(models.Block.code == "B2").count() == 0
