# app/core/database.py
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, declarative_base, Session
from .config import settings # .env 값을 읽어온 설정 객체 import
from .exceptions import ApiException, classify_store_error

# 1. DB 연결 설정
# .env 파일에 정의된 DATABASE_URL을 사용
SQLALCHEMY_DATABASE_URL = settings.DATABASE_URL


def _connect_args(url: str) -> dict:
    """요청별 DB 작업 제한 시간을 드라이버 옵션으로 변환합니다."""
    if url.startswith("sqlite"):
        # SQLite를 사용할 경우 스레드 공유 허용 + busy timeout(초)
        return {"check_same_thread": False, "timeout": settings.DB_STATEMENT_TIMEOUT_MS / 1000}
    if url.startswith("postgresql"):
        return {"options": f"-c statement_timeout={settings.DB_STATEMENT_TIMEOUT_MS}"}
    return {}


# SQLAlchemy 엔진 생성
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args=_connect_args(SQLALCHEMY_DATABASE_URL),
    echo=settings.DB_ECHO,
    # 일정 시간 이상 사용되지 않은 커넥션은 자동으로 재연결합니다.
    pool_recycle=settings.DB_POOL_RECYCLE_SECONDS
)

# 2. DB 세션 생성 (commit/flush 는 transaction() 에서 명시적으로)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# 3. ORM 모델의 기본 클래스 생성
Base = declarative_base()


# 4. FastAPI 의존성 주입을 위한 DB 세션 생성 함수
def get_db():
    """요청마다 DB 세션을 열고 응답 후 닫습니다. (`Depends(get_db)`)"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# 5. 트랜잭션 범위
@contextmanager
def transaction(db: Session):
    """
    블록 안의 모든 쓰기를 하나의 트랜잭션으로 묶습니다.
    성공하면 commit, 실패하면 rollback 후 분류된 예외를 다시 발생시킵니다.
    """
    try:
        yield db
        db.commit()
    except ApiException:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        raise classify_store_error(e) from e
    except Exception:
        db.rollback()
        raise


@contextmanager
def read_scope(db: Session):
    """조회 전용 작업의 DB 오류를 분류된 예외로 변환합니다."""
    try:
        yield db
    except SQLAlchemyError as e:
        db.rollback()
        raise classify_store_error(e) from e


def init_db():
    """모든 테이블을 생성합니다. (DB_AUTO_MIGRATE=true 일 때 기동 시 호출)"""
    from . import models  # noqa: F401  모델 등록
    Base.metadata.create_all(bind=engine)
