# app/router/ticket.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID

from core.database import get_db
from core import schemas, models
from function import ticket_function
from core.dependencies import get_current_user_id

router = APIRouter(prefix="/api/v1", tags=["Ticket"])

# =================================================================
# API Endpoints (PUT, POST, GET 순서)
# =================================================================

# -----------------------------------------------------------------
# PUT Endpoints
# -----------------------------------------------------------------

@router.put("/ticket/procedure", summary="입차 / 출차 처리")
def procedure_with_ticket(
    request: schemas.ProcedureRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    data = ticket_function.procedure_with_ticket(db, user_id, request)
    return schemas.RootResponse.ok(data)

@router.put("/ticket/cancel/{ticket_id}", summary="티켓 취소")
def cancel_ticket(
    ticket_id: UUID,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    data = ticket_function.cancel_ticket(db, user_id, ticket_id)
    return schemas.RootResponse.ok(data)

@router.put("/ticket/review/{ticket_id}", summary="티켓 리뷰 등록")
def review_ticket(
    ticket_id: UUID,
    request: schemas.ReviewTicketRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    data = ticket_function.review_ticket(db, user_id, ticket_id, request)
    return schemas.RootResponse.ok(data)

# -----------------------------------------------------------------
# POST Endpoints
# -----------------------------------------------------------------

@router.post("/ticket/create", summary="티켓 생성 (예약)")
def create_ticket(
    request: schemas.TicketRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    data = ticket_function.create_ticket(db, user_id, request)
    return schemas.RootResponse.ok(data)

@router.post("/ticket/extend", summary="티켓 연장")
def extend_ticket(
    request: schemas.ExtendTicketRequest,
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    data = ticket_function.extend_ticket(db, user_id, request)
    return schemas.RootResponse.ok(data)

# -----------------------------------------------------------------
# GET Endpoints
# -----------------------------------------------------------------

@router.get("/ticket/get-one/{ticket_id}", summary="티켓 상세 조회 (연장 이력 포함)")
def get_one_ticket(
    ticket_id: UUID,
    db: Session = Depends(get_db)
):
    data = ticket_function.get_one_ticket_with_extend(db, ticket_id)
    return schemas.RootResponse.ok(data)

@router.get("/ticket/get-all", summary="내 티켓 목록 조회")
def get_all_ticket(
    parking_lot_id: Optional[UUID] = Query(None, alias="parkingLotId", description="주차장ID"),
    state: Optional[models.TicketState] = Query(None, description="티켓 상태"),
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    params = schemas.ListTicketParam(parking_lot_id=parking_lot_id, state=state)
    data = ticket_function.get_all_ticket(db, user_id, params)
    return schemas.RootResponse.ok(data)

@router.get("/merchant/ticket/get-all", summary="주차장 티켓 목록 조회 (운영사)")
def get_all_ticket_company(
    parking_lot_id: UUID = Query(..., alias="parkingLotId", description="주차장ID"),
    state: Optional[models.TicketState] = Query(None, description="티켓 상태"),
    user_id: UUID = Depends(get_current_user_id),
    db: Session = Depends(get_db)
):
    params = schemas.ListTicketCompanyParam(parking_lot_id=parking_lot_id, state=state)
    data = ticket_function.get_all_ticket_company(db, params)
    return schemas.RootResponse.ok(data)
