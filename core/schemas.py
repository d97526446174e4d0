# app/schemas.py
from pydantic import BaseModel, Field
from typing import TypeVar, Generic, Optional, List
from datetime import datetime, time
from uuid import UUID
# 정의한 Enum import
from .models import ParkingLotStatus, TicketState, TicketTransition, LongTermType

T = TypeVar('T')

class PageInfo(BaseModel, Generic[T]):
    page_number: int = Field(..., alias="pageNumber")
    page_size: int = Field(..., alias="pageSize")
    total_pages: int = Field(..., alias="totalPages")
    total_content_count: int = Field(..., alias="totalContentCount")
    content: T

    class Config:
        populate_by_name = True

# =================================================================
# Base Config for ORM Mapping (일괄 적용을 위한 기본 클래스)
# =================================================================

class OrmConfig(BaseModel):
    class Config:
        from_attributes = True
        populate_by_name = True

# RootResponse 제네릭 모델
class RootResponse(BaseModel, Generic[T]):
    status: str = "OK"
    message: str = "success"
    data: Optional[T] = None

    @classmethod
    def ok(cls, data: T):
        return cls(data=data)


### Reference ###
class VehicleResponse(OrmConfig):
    id: UUID
    license_plate: str = Field(..., alias="licensePlate")
    vehicle_type: Optional[str] = Field(None, alias="vehicleType")
### Reference ###


### Block / Slot ###
# --- Request Schemas ---
class BlockRequest(OrmConfig):
    code: str = Field(..., description="블록 코드")
    description: Optional[str] = Field(None, description="블록 설명")
    slot: int = Field(0, ge=0, description="주차면 수")
    parking_lot_id: UUID = Field(..., alias="parkingLotId", description="주차장ID")

class EditBlockRequest(OrmConfig):
    code: Optional[str] = None
    description: Optional[str] = None
    slot: Optional[int] = Field(None, ge=0, description="주차면 수 (주차면 재생성 없음)")

class ListBlockParam(OrmConfig):
    parking_lot_id: UUID = Field(..., alias="parkingLotId")
    code: Optional[str] = None
    page: int = 1
    page_size: Optional[int] = Field(None, alias="pageSize")

# --- Response Schemas ---
class ParkingSlotResponse(OrmConfig):
    id: UUID
    name: str
    block_id: UUID = Field(..., alias="blockId")

class BlockSummaryResponse(OrmConfig):
    id: UUID
    code: str
    description: Optional[str] = None
    slot: int
    parking_lot_id: UUID = Field(..., alias="parkingLotId")

class BlockResponse(BlockSummaryResponse):
    parking_slots: List[ParkingSlotResponse] = Field(default_factory=list, alias="parkingSlots")

class SlotWithBlockResponse(ParkingSlotResponse):
    block: BlockSummaryResponse
### Block / Slot ###


### Time Frame ###
# --- Request Schemas ---
class TimeFrameRequest(OrmConfig):
    duration: int = Field(..., ge=0, description="이용 시간(분)")
    cost: float = Field(..., ge=0, description="요금")
    parking_lot_id: UUID = Field(..., alias="parkingLotId", description="주차장ID")

# --- Response Schemas ---
class TimeFrameResponse(OrmConfig):
    id: UUID
    duration: int
    cost: float
    parking_lot_id: UUID = Field(..., alias="parkingLotId")
### Time Frame ###


### Parking Lot ###
# --- Request Schemas ---
class ParkingLotRequest(OrmConfig):
    name: str = Field(..., description="주차장 이름")
    description: Optional[str] = None
    address: Optional[str] = None
    start_time: Optional[time] = Field(None, alias="startTime", description="운영 시작 시간")
    end_time: Optional[time] = Field(None, alias="endTime", description="운영 종료 시간")
    lat: Optional[float] = None
    long: Optional[float] = None
    company_id: Optional[UUID] = Field(None, alias="companyId", description="회사ID")

class EditParkingLotRequest(OrmConfig):
    name: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    start_time: Optional[time] = Field(None, alias="startTime")
    end_time: Optional[time] = Field(None, alias="endTime")
    lat: Optional[float] = None
    long: Optional[float] = None
    status: Optional[ParkingLotStatus] = None
    version: Optional[int] = Field(None, description="마지막으로 조회한 버전 (충돌 검사)")

class DeclaredBlock(OrmConfig):
    # id가 없으면 신규 블록
    id: Optional[UUID] = None
    code: str
    description: Optional[str] = None
    slot: int = Field(0, ge=0)
    parking_lot_id: Optional[UUID] = Field(None, alias="parkingLotId")

class DeclaredTimeFrame(OrmConfig):
    # id가 없으면 신규 이용 시간 옵션
    id: Optional[UUID] = None
    duration: int = Field(..., ge=0)
    cost: float = Field(..., ge=0)
    parking_lot_id: Optional[UUID] = Field(None, alias="parkingLotId")

class UpdateParkingLotV2Request(OrmConfig):
    parking_lot_id: UUID = Field(..., alias="parkingLotId", description="주차장ID")
    name: str
    description: Optional[str] = None
    address: Optional[str] = None
    start_time: Optional[time] = Field(None, alias="startTime")
    end_time: Optional[time] = Field(None, alias="endTime")
    lat: Optional[float] = None
    long: Optional[float] = None
    blocks: List[DeclaredBlock] = Field(default_factory=list)
    time_frames: List[DeclaredTimeFrame] = Field(default_factory=list, alias="timeFrames")
    version: Optional[int] = Field(None, description="마지막으로 조회한 버전 (충돌 검사)")

class ListParkingLotParam(OrmConfig):
    company_id: Optional[UUID] = Field(None, alias="companyId")
    name: Optional[str] = None
    status: Optional[ParkingLotStatus] = None
    page: int = 1
    page_size: Optional[int] = Field(None, alias="pageSize")

# --- Response Schemas ---
class ParkingLotSummaryResponse(OrmConfig):
    id: UUID
    name: str
    description: Optional[str] = None
    address: Optional[str] = None
    start_time: Optional[time] = Field(None, alias="startTime")
    end_time: Optional[time] = Field(None, alias="endTime")
    lat: Optional[float] = None
    long: Optional[float] = None
    company_id: Optional[UUID] = Field(None, alias="companyId")
    status: ParkingLotStatus
    version: int

class ParkingLotResponse(ParkingLotSummaryResponse):
    blocks: List[BlockResponse] = Field(default_factory=list)
    time_frames: List[TimeFrameResponse] = Field(default_factory=list, alias="timeFrames")

class ParkingLotInfoResponse(OrmConfig):
    id: UUID
    total_slots: int = Field(..., alias="totalSlots")
    booked_slots: int = Field(..., alias="bookedSlots")
    total_booked_slots: int = Field(..., alias="totalBookedSlots")
    good_reviews: int = Field(..., alias="goodReviews")
    bad_reviews: int = Field(..., alias="badReviews")
### Parking Lot ###


### Ticket ###
# --- Request Schemas ---
class TicketRequest(OrmConfig):
    user_id: Optional[UUID] = Field(None, alias="userId", description="예약 사용자ID (없으면 요청자)")
    vehicle_id: UUID = Field(..., alias="vehicleId")
    parking_lot_id: UUID = Field(..., alias="parkingLotId")
    parking_slot_id: UUID = Field(..., alias="parkingSlotId")
    time_frame_id: Optional[UUID] = Field(None, alias="timeFrameId")
    start_time: datetime = Field(..., alias="startTime")
    end_time: datetime = Field(..., alias="endTime")
    total: float = Field(0, ge=0, description="요금 합계")
    is_long_term: bool = Field(False, alias="isLongTerm")
    type: Optional[LongTermType] = Field(None, description="장기 예약 유형")

class ExtendTicketRequest(OrmConfig):
    ticket_origin_id: UUID = Field(..., alias="ticketOriginId")
    start_time: datetime = Field(..., alias="startTime")
    end_time: datetime = Field(..., alias="endTime")
    time_frame_id: Optional[UUID] = Field(None, alias="timeFrameId")
    total: float = Field(0, ge=0)
    version: Optional[int] = None

class ProcedureRequest(OrmConfig):
    ticket_id: UUID = Field(..., alias="ticketId")
    type: TicketTransition = Field(..., description="check_in | check_out")
    version: Optional[int] = None

class ReviewTicketRequest(OrmConfig):
    is_good_review: bool = Field(..., alias="isGoodReview")
    comment: Optional[str] = None

class ListTicketParam(OrmConfig):
    parking_lot_id: Optional[UUID] = Field(None, alias="parkingLotId")
    state: Optional[TicketState] = None

class ListTicketCompanyParam(OrmConfig):
    parking_lot_id: UUID = Field(..., alias="parkingLotId")
    state: Optional[TicketState] = None

# --- Response Schemas ---
class TicketResponse(OrmConfig):
    id: UUID
    user_id: UUID = Field(..., alias="userId")
    vehicle_id: UUID = Field(..., alias="vehicleId")
    parking_lot_id: UUID = Field(..., alias="parkingLotId")
    parking_slot_id: UUID = Field(..., alias="parkingSlotId")
    time_frame_id: Optional[UUID] = Field(None, alias="timeFrameId")
    state: TicketState
    start_time: datetime = Field(..., alias="startTime")
    end_time: datetime = Field(..., alias="endTime")
    entry_time: Optional[datetime] = Field(None, alias="entryTime")
    exit_time: Optional[datetime] = Field(None, alias="exitTime")
    total: float
    is_extend: bool = Field(..., alias="isExtend")
    is_good_review: Optional[bool] = Field(None, alias="isGoodReview")
    comment: Optional[str] = None
    version: int

class TicketDetailResponse(TicketResponse):
    vehicle: Optional[VehicleResponse] = None
    parking_lot: Optional[ParkingLotSummaryResponse] = Field(None, alias="parkingLot")
    parking_slot: Optional[SlotWithBlockResponse] = Field(None, alias="parkingSlot")

class TicketExtendResponse(OrmConfig):
    id: UUID
    ticket_id: UUID = Field(..., alias="ticketId")
    ticket_extend_id: UUID = Field(..., alias="ticketExtendId")

class TicketWithExtendResponse(OrmConfig):
    ticket: TicketResponse
    ticket_extend: List[TicketExtendResponse] = Field(default_factory=list, alias="ticketExtend")
### Ticket ###
