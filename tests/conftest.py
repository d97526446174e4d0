import os
from datetime import datetime
from uuid import uuid4

# 앱 import 전에 설정 (메모리 SQLite, 테이블 자동 생성 안 함)
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("DB_AUTO_MIGRATE", "false")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core import models, schemas  # noqa: E402
from core.database import Base, get_db  # noqa: E402
from main import app  # noqa: E402


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def actor_id():
    return uuid4()


@pytest.fixture
def seed(db):
    """회사(운영 중) / 사용자 / 차량 기준 데이터"""
    company = models.Company(name="Saigon Parking", status="active")
    user = models.User(display_name="Minh", phone_number="0901234567")
    db.add_all([company, user])
    db.flush()
    vehicle = models.Vehicle(user_id=user.id, license_plate="51A-12345", vehicle_type="car")
    db.add(vehicle)
    db.commit()
    return {"company_id": company.id, "user_id": user.id, "vehicle_id": vehicle.id}


@pytest.fixture
def make_parking_lot(db, actor_id, seed):
    """블록/이용 시간 옵션이 구성된 주차장을 만드는 헬퍼"""
    from function import parking_lot_function

    def _make(blocks, time_frames, name="Lot A"):
        lot = parking_lot_function.create_parking_lot(
            db, actor_id, schemas.ParkingLotRequest(name=name, company_id=seed["company_id"])
        )
        return parking_lot_function.update_parking_lot_v2(db, actor_id, schemas.UpdateParkingLotV2Request(
            parking_lot_id=lot.id,
            name=name,
            blocks=[schemas.DeclaredBlock(code=code, slot=slot) for code, slot in blocks],
            time_frames=[schemas.DeclaredTimeFrame(duration=d, cost=c) for d, c in time_frames],
            version=lot.version,
        ))

    return _make


@pytest.fixture
def booking_window():
    return datetime(2026, 5, 1, 9, 0), datetime(2026, 5, 1, 11, 0)
