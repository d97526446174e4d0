# app/models.py
import enum
import uuid
from datetime import datetime
from zoneinfo import ZoneInfo

from sqlalchemy import Column, Integer, String, DateTime, Time, ForeignKey, Text, Enum, Float, Boolean, Uuid, VARCHAR, UniqueConstraint, and_
from sqlalchemy.orm import relationship

from .config import settings
from .database import Base

# 감사(audit) 컬럼과 입/출차 시각에 쓰는 시간대
LOCAL_TZ = ZoneInfo(settings.TIMEZONE)

def now_local() -> datetime:
    return datetime.now(LOCAL_TZ)

# =================================================================
# Enums (모든 모델 클래스보다 먼저 정의해야 합니다)
# =================================================================
class YnType(str, enum.Enum):
    Y = "Y"
    N = "N"

class ParkingLotStatus(str, enum.Enum):
    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"

class TicketState(str, enum.Enum):
    NEW = "new"
    ONGOING = "ongoing"
    COMPLETED = "completed"
    CANCEL = "cancel"
    EXTEND = "extend"

class TicketTransition(str, enum.Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"
    CANCEL = "cancel"
    EXTEND = "extend"

class LongTermType(str, enum.Enum):
    DAILY = "DAILY"
    CYCLE = "CYCLE"
    CUSTOM = "CUSTOM"


def _enum_values(enum_cls):
    # DB에는 Enum 이름이 아닌 값("new", "pending" ...)을 저장
    return [member.value for member in enum_cls]


### Reference ###
# 회사/사용자/차량 CRUD는 외부 서비스 담당. 외래키 참조용 최소 컬럼만 유지
class Company(Base):
    __tablename__ = "company"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    create_at = Column(DateTime(timezone=True), nullable=False, default=now_local)
    name = Column(VARCHAR(128), nullable=False)
    status = Column(VARCHAR(16), nullable=False, default="pending")

class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    create_at = Column(DateTime(timezone=True), nullable=False, default=now_local)
    display_name = Column(VARCHAR(64))
    phone_number = Column(VARCHAR(16), nullable=False)

class Vehicle(Base):
    __tablename__ = "vehicle"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    create_at = Column(DateTime(timezone=True), nullable=False, default=now_local)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    license_plate = Column(VARCHAR(16), nullable=False)
    vehicle_type = Column(VARCHAR(32))
### Reference ###


### Parking Lot ###
class ParkingLot(Base):
    __tablename__ = "parking_lot"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    create_at = Column(DateTime(timezone=True), nullable=False, default=now_local)
    create_by = Column(Uuid)
    update_at = Column(DateTime(timezone=True), nullable=False, default=now_local, onupdate=now_local)
    update_by = Column(Uuid)
    name = Column(VARCHAR(128), nullable=False)
    description = Column(Text)
    address = Column(VARCHAR(256))
    # 운영 시간
    start_time = Column(Time)
    end_time = Column(Time)
    lat = Column(Float)
    long = Column(Float)
    company_id = Column(Uuid, ForeignKey("company.id"))
    status = Column(Enum(ParkingLotStatus, values_callable=_enum_values), nullable=False, default=ParkingLotStatus.PENDING)
    # 낙관적 잠금 버전. 변경 시 명시적으로 증가시킴
    version = Column(Integer, nullable=False, default=1)

    company = relationship("Company")
    # 삭제되지 않은 하위 항목만 노출 (삭제된 항목은 티켓 조회에서만 사용)
    blocks = relationship(
        "Block",
        primaryjoin=lambda: and_(ParkingLot.id == Block.parking_lot_id, Block.del_yn == YnType.N),
        order_by=lambda: [Block.create_at, Block.code],
        viewonly=True,
    )
    time_frames = relationship(
        "TimeFrame",
        primaryjoin=lambda: and_(ParkingLot.id == TimeFrame.parking_lot_id, TimeFrame.del_yn == YnType.N),
        order_by=lambda: [TimeFrame.duration, TimeFrame.create_at],
        viewonly=True,
    )

    __mapper_args__ = {"version_id_col": version, "version_id_generator": False}

class Block(Base):
    __tablename__ = "block"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    create_at = Column(DateTime(timezone=True), nullable=False, default=now_local)
    create_by = Column(Uuid)
    update_at = Column(DateTime(timezone=True), nullable=False, default=now_local, onupdate=now_local)
    update_by = Column(Uuid)
    del_yn = Column(Enum(YnType), nullable=False, default=YnType.N)
    code = Column(VARCHAR(32), nullable=False)
    description = Column(Text)
    # 선언된 주차면 수. 생성 시점에만 주차면으로 전개됨
    slot = Column(Integer, nullable=False, default=0)
    parking_lot_id = Column(Uuid, ForeignKey("parking_lot.id"), nullable=False, index=True)

    parking_lot = relationship("ParkingLot")
    parking_slots = relationship(
        "ParkingSlot",
        primaryjoin=lambda: and_(Block.id == ParkingSlot.block_id, ParkingSlot.del_yn == YnType.N),
        order_by=lambda: ParkingSlot.slot_no,
        viewonly=True,
    )

class ParkingSlot(Base):
    __tablename__ = "parking_slot"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    create_at = Column(DateTime(timezone=True), nullable=False, default=now_local)
    create_by = Column(Uuid)
    update_at = Column(DateTime(timezone=True), nullable=False, default=now_local, onupdate=now_local)
    update_by = Column(Uuid)
    del_yn = Column(Enum(YnType), nullable=False, default=YnType.N)
    # 표시 이름 "1", "2", ... (slot_no의 문자열 형태)
    name = Column(VARCHAR(16), nullable=False)
    slot_no = Column(Integer, nullable=False)
    block_id = Column(Uuid, ForeignKey("block.id"), nullable=False, index=True)

    # 삭제된 블록도 그대로 참조 (과거 티켓 라벨 표시용)
    block = relationship("Block")

    __table_args__ = (
        UniqueConstraint("block_id", "name", name="parking_slot_unique_01"),
    )

class TimeFrame(Base):
    __tablename__ = "time_frame"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    create_at = Column(DateTime(timezone=True), nullable=False, default=now_local)
    create_by = Column(Uuid)
    update_at = Column(DateTime(timezone=True), nullable=False, default=now_local, onupdate=now_local)
    update_by = Column(Uuid)
    del_yn = Column(Enum(YnType), nullable=False, default=YnType.N)
    # 이용 시간(분)과 요금
    duration = Column(Integer, nullable=False)
    cost = Column(Float, nullable=False, default=0)
    parking_lot_id = Column(Uuid, ForeignKey("parking_lot.id"), nullable=False, index=True)
### Parking Lot ###


### Ticket ###
class Ticket(Base):
    __tablename__ = "ticket"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    create_at = Column(DateTime(timezone=True), nullable=False, default=now_local)
    create_by = Column(Uuid)
    update_at = Column(DateTime(timezone=True), nullable=False, default=now_local, onupdate=now_local)
    update_by = Column(Uuid)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    vehicle_id = Column(Uuid, ForeignKey("vehicle.id"), nullable=False)
    parking_lot_id = Column(Uuid, ForeignKey("parking_lot.id"), nullable=False, index=True)
    parking_slot_id = Column(Uuid, ForeignKey("parking_slot.id"), nullable=False)
    time_frame_id = Column(Uuid, ForeignKey("time_frame.id"))
    state = Column(Enum(TicketState, values_callable=_enum_values), nullable=False, default=TicketState.NEW)
    # 예약 시간
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)
    # 실제 입/출차 시간
    entry_time = Column(DateTime(timezone=True))
    exit_time = Column(DateTime(timezone=True))
    total = Column(Float, nullable=False, default=0)
    is_extend = Column(Boolean, nullable=False, default=False)
    # None: 리뷰 없음
    is_good_review = Column(Boolean)
    comment = Column(Text)
    version = Column(Integer, nullable=False, default=1)

    user = relationship("User")
    vehicle = relationship("Vehicle")
    parking_lot = relationship("ParkingLot")
    parking_slot = relationship("ParkingSlot")
    time_frame = relationship("TimeFrame")

    __mapper_args__ = {"version_id_col": version, "version_id_generator": False}

# 장기 예약. 티켓과의 외래키 연결 없이 독립적으로 조회되는 기록
class LongTermTicket(Base):
    __tablename__ = "long_term_ticket"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    create_at = Column(DateTime(timezone=True), nullable=False, default=now_local)
    create_by = Column(Uuid)
    update_at = Column(DateTime(timezone=True), nullable=False, default=now_local, onupdate=now_local)
    update_by = Column(Uuid)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    vehicle_id = Column(Uuid, ForeignKey("vehicle.id"), nullable=False)
    parking_lot_id = Column(Uuid, ForeignKey("parking_lot.id"), nullable=False)
    parking_slot_id = Column(Uuid, ForeignKey("parking_slot.id"), nullable=False)
    time_frame_id = Column(Uuid, ForeignKey("time_frame.id"))
    long_term_type = Column(Enum(LongTermType), nullable=False)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=False)

# 연장 이력: 원본 티켓 1 : N 연장 티켓
class TicketExtend(Base):
    __tablename__ = "ticket_extend"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    create_at = Column(DateTime(timezone=True), nullable=False, default=now_local)
    ticket_id = Column(Uuid, ForeignKey("ticket.id"), nullable=False, index=True)
    ticket_extend_id = Column(Uuid, ForeignKey("ticket.id"), nullable=False, unique=True)

    ticket = relationship("Ticket", foreign_keys=[ticket_id])
    ticket_extend = relationship("Ticket", foreign_keys=[ticket_extend_id])
### Ticket ###
