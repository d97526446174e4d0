# app/function/ticket_function.py
import logging
from typing import List
from uuid import UUID

from sqlalchemy.orm import Session, joinedload

from core import models, schemas
from core.constants import ResponseCode
from core.database import transaction, read_scope
from core.exceptions import NotFoundException, DomainRuleException, ValidationException
from .function import check_version, bump_version

TicketState = models.TicketState
TicketTransition = models.TicketTransition

# (현재 상태, 요청) -> 다음 상태. 표에 없는 조합은 거부
# completed / cancel 은 종료 상태 (cancel 재요청만 허용)
TICKET_TRANSITIONS = {
    (TicketState.NEW, TicketTransition.CHECK_IN): TicketState.ONGOING,
    (TicketState.EXTEND, TicketTransition.CHECK_IN): TicketState.ONGOING,
    (TicketState.ONGOING, TicketTransition.CHECK_OUT): TicketState.COMPLETED,

    (TicketState.NEW, TicketTransition.CANCEL): TicketState.CANCEL,
    (TicketState.EXTEND, TicketTransition.CANCEL): TicketState.CANCEL,
    (TicketState.ONGOING, TicketTransition.CANCEL): TicketState.CANCEL,
    (TicketState.CANCEL, TicketTransition.CANCEL): TicketState.CANCEL,

    # 연장은 원본 상태를 바꾸지 않고 is_extend 표시 + 연장 티켓 생성
    (TicketState.NEW, TicketTransition.EXTEND): TicketState.NEW,
    (TicketState.EXTEND, TicketTransition.EXTEND): TicketState.EXTEND,
    (TicketState.ONGOING, TicketTransition.EXTEND): TicketState.ONGOING,
}

PROCEDURE_TRANSITIONS = (TicketTransition.CHECK_IN, TicketTransition.CHECK_OUT)

def next_state(current: TicketState, transition: TicketTransition) -> TicketState:
    """전이표에 따라 다음 상태를 반환하고, 허용되지 않으면 예외를 발생시킵니다."""
    state = TICKET_TRANSITIONS.get((current, transition))
    if state is None:
        raise DomainRuleException(
            ResponseCode.INVALID_TICKET_TRANSITION,
            data={"state": current.value, "transition": transition.value}
        )
    return state

# =================================================================
# 내부 유틸리티 함수
# =================================================================

def _get_ticket_by_id(db: Session, ticket_id: UUID) -> models.Ticket:
    """ID로 티켓을 조회하고 없으면 예외를 발생시킵니다."""
    ticket = db.query(models.Ticket).filter(models.Ticket.id == ticket_id).first()
    if not ticket:
        raise NotFoundException(ResponseCode.INVALID_TICKET)
    return ticket

def _ticket_detail_query(db: Session):
    # 삭제된 주차면/블록도 그대로 조인 (레이아웃 변경 전 티켓의 라벨 표시)
    return db.query(models.Ticket).options(
        joinedload(models.Ticket.vehicle),
        joinedload(models.Ticket.parking_lot),
        joinedload(models.Ticket.parking_slot).joinedload(models.ParkingSlot.block)
    )

# =================================================================
# 티켓 생성 / 연장 (POST)
# =================================================================

def create_ticket(db: Session, user_id: UUID, request: schemas.TicketRequest) -> schemas.TicketResponse:
    """
    예약 티켓을 생성합니다. (state=new)
    장기 예약이면 같은 예약 기간의 장기 예약 기록을 먼저 별도로 저장합니다.
    """
    owner_id = request.user_id or user_id

    if request.is_long_term:
        if request.type is None:
            raise ValidationException(ResponseCode.LONG_TERM_TYPE_REQUIRED)
        # 티켓 생성 성공 여부와 무관하게 먼저 커밋
        with transaction(db):
            long_term_ticket = models.LongTermTicket(
                user_id=owner_id,
                vehicle_id=request.vehicle_id,
                parking_lot_id=request.parking_lot_id,
                parking_slot_id=request.parking_slot_id,
                time_frame_id=request.time_frame_id,
                long_term_type=request.type,
                start_time=request.start_time,
                end_time=request.end_time,
                create_by=user_id,
                update_by=user_id
            )
            db.add(long_term_ticket)
        logging.info(f"[TICKET] created long term ticket {long_term_ticket.id} ({request.type.value})")

    with transaction(db):
        ticket = models.Ticket(
            user_id=owner_id,
            vehicle_id=request.vehicle_id,
            parking_lot_id=request.parking_lot_id,
            parking_slot_id=request.parking_slot_id,
            time_frame_id=request.time_frame_id,
            start_time=request.start_time,
            end_time=request.end_time,
            state=TicketState.NEW,
            total=request.total,
            is_extend=False,
            version=1,
            create_by=user_id,
            update_by=user_id
        )
        db.add(ticket)

    logging.info(f"[TICKET] created ticket {ticket.id}")
    return schemas.TicketResponse.model_validate(ticket)

def extend_ticket(db: Session, user_id: UUID, request: schemas.ExtendTicketRequest) -> schemas.TicketExtendResponse:
    """
    티켓을 연장합니다.
    원본과 같은 사용자/차량/주차장/주차면으로 state=extend 인 새 티켓을 만들고,
    원본에 연장 표시 후 연장 이력을 남깁니다. 세 작업은 하나의 트랜잭션입니다.
    """
    with transaction(db):
        ticket = _get_ticket_by_id(db, request.ticket_origin_id)
        check_version(ticket, request.version)
        next_state(ticket.state, TicketTransition.EXTEND)

        new_ticket = models.Ticket(
            user_id=ticket.user_id,
            vehicle_id=ticket.vehicle_id,
            parking_lot_id=ticket.parking_lot_id,
            parking_slot_id=ticket.parking_slot_id,
            time_frame_id=request.time_frame_id or ticket.time_frame_id,
            start_time=request.start_time,
            end_time=request.end_time,
            state=TicketState.EXTEND,
            total=request.total,
            is_extend=False,
            version=1,
            create_by=ticket.create_by,
            update_by=user_id
        )

        ticket.is_extend = True
        ticket.update_by = user_id
        bump_version(ticket)

        db.add(new_ticket)
        db.flush()  # 연장 티켓 ID 확보

        ticket_extend = models.TicketExtend(
            ticket_id=ticket.id,
            ticket_extend_id=new_ticket.id
        )
        db.add(ticket_extend)

    logging.info(f"[TICKET] extended ticket {request.ticket_origin_id} -> {ticket_extend.ticket_extend_id}")
    return schemas.TicketExtendResponse.model_validate(ticket_extend)

# =================================================================
# 티켓 상태 변경 (PUT)
# =================================================================

def procedure_with_ticket(db: Session, user_id: UUID, request: schemas.ProcedureRequest) -> schemas.TicketResponse:
    """입차(check_in) / 출차(check_out) 처리를 합니다."""
    if request.type not in PROCEDURE_TRANSITIONS:
        raise ValidationException(ResponseCode.INVALID_REQUEST_PARAMETER, data={"type": request.type.value})

    with transaction(db):
        ticket = _get_ticket_by_id(db, request.ticket_id)
        check_version(ticket, request.version)

        ticket.state = next_state(ticket.state, request.type)
        if request.type == TicketTransition.CHECK_IN:
            ticket.entry_time = models.now_local()
        else:
            ticket.exit_time = models.now_local()
        ticket.update_by = user_id
        bump_version(ticket)

    logging.info(f"[TICKET] {request.type.value} ticket {request.ticket_id}")
    return schemas.TicketResponse.model_validate(ticket)

def cancel_ticket(db: Session, user_id: UUID, ticket_id: UUID) -> schemas.TicketResponse:
    """티켓을 취소합니다. 이미 취소된 티켓은 그대로 성공 처리합니다."""
    with transaction(db):
        ticket = _get_ticket_by_id(db, ticket_id)
        state = next_state(ticket.state, TicketTransition.CANCEL)
        if ticket.state != state:
            ticket.state = state
            ticket.update_by = user_id
            bump_version(ticket)

    logging.info(f"[TICKET] cancelled ticket {ticket_id}")
    return schemas.TicketResponse.model_validate(ticket)

def review_ticket(db: Session, user_id: UUID, ticket_id: UUID, request: schemas.ReviewTicketRequest) -> schemas.TicketResponse:
    """완료된 티켓에 리뷰를 남깁니다. 다시 요청하면 덮어씁니다."""
    with transaction(db):
        ticket = _get_ticket_by_id(db, ticket_id)
        if ticket.state != TicketState.COMPLETED:
            raise DomainRuleException(ResponseCode.TICKET_NOT_COMPLETED)

        ticket.is_good_review = request.is_good_review
        if request.comment is not None:
            ticket.comment = request.comment
        ticket.update_by = user_id
        bump_version(ticket)

    return schemas.TicketResponse.model_validate(ticket)

# =================================================================
# 티켓 조회 (GET)
# =================================================================

def get_one_ticket_with_extend(db: Session, ticket_id: UUID) -> schemas.TicketWithExtendResponse:
    """티켓과 이 티켓에서 시작된 연장 이력 목록(1단계)을 조회합니다."""
    with read_scope(db):
        ticket = _get_ticket_by_id(db, ticket_id)
        ticket_extends = db.query(models.TicketExtend).filter(
            models.TicketExtend.ticket_id == ticket.id
        ).order_by(models.TicketExtend.create_at).all()

        return schemas.TicketWithExtendResponse(
            ticket=schemas.TicketResponse.model_validate(ticket),
            ticket_extend=[schemas.TicketExtendResponse.model_validate(te) for te in ticket_extends]
        )

def get_all_ticket(db: Session, user_id: UUID, params: schemas.ListTicketParam) -> List[schemas.TicketDetailResponse]:
    """사용자의 티켓 목록을 조회합니다."""
    with read_scope(db):
        query = _ticket_detail_query(db).filter(models.Ticket.user_id == user_id)
        if params.parking_lot_id:
            query = query.filter(models.Ticket.parking_lot_id == params.parking_lot_id)
        if params.state:
            query = query.filter(models.Ticket.state == params.state)
        tickets = query.order_by(models.Ticket.create_at.desc()).all()
        return [schemas.TicketDetailResponse.model_validate(t) for t in tickets]

def get_all_ticket_company(db: Session, params: schemas.ListTicketCompanyParam) -> List[schemas.TicketDetailResponse]:
    """주차장의 전체 티켓 목록을 조회합니다. (운영사용)"""
    with read_scope(db):
        query = _ticket_detail_query(db).filter(models.Ticket.parking_lot_id == params.parking_lot_id)
        if params.state:
            query = query.filter(models.Ticket.state == params.state)
        tickets = query.order_by(models.Ticket.create_at.desc()).all()
        return [schemas.TicketDetailResponse.model_validate(t) for t in tickets]
