import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder

from core.config import settings
from core.constants import ErrorClass, ResponseCode
from core.database import init_db
from core.exceptions import ApiException
from core.schemas import RootResponse

from router.parking_lot import router as parking_lot_router, router_v2 as parking_lot_v2_router
from router.block import router as block_router
from router.time_frame import router as time_frame_router
from router.ticket import router as ticket_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(message)s"
)

# 오류 분류 -> HTTP 상태 코드
STATUS_BY_ERROR_CLASS = {
    ErrorClass.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorClass.DOMAIN_RULE: status.HTTP_400_BAD_REQUEST,
    ErrorClass.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ErrorClass.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorClass.UNAUTHENTICATED: status.HTTP_401_UNAUTHORIZED,
    ErrorClass.INFRASTRUCTURE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorClass.TIMEOUT: status.HTTP_504_GATEWAY_TIMEOUT,
}


# FastAPI 생명주기(lifespan) 관리자 정의
@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.info(f"[APP START] {settings.APP_NAME} ({settings.APP_ENV})")
    if settings.DB_AUTO_MIGRATE:
        logging.info("[APP START] Creating tables...")
        init_db()

    yield # 애플리케이션 실행

    logging.info("[APP SHUTDOWN] Application shutdown complete.")

app = FastAPI(
    title=settings.APP_NAME,
    openapi_url="/openapi.json",  # OpenAPI 문서 경로
    docs_url="/docs",            # Swagger UI 경로
    redoc_url="/redoc",          # ReDoc 경로
    lifespan=lifespan
)

origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

########## Custom Exception Handlers ##########
@app.exception_handler(ApiException)
async def api_exception_handler(request: Request, exc: ApiException):
    status_code = STATUS_BY_ERROR_CLASS.get(exc.error_class, status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logging.error(f"[API ERROR] {request.method} {request.url.path} -> {exc.code}")
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(RootResponse(status=exc.code, message=exc.message, data=exc.data))
    )

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    code = ResponseCode.INVALID_REQUEST_PARAMETER
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder(RootResponse(status=code.code, message=code.message, data=jsonable_encoder(exc.errors())))
    )


@app.get("/", description="Connetion Check")
def root():
    return f"{settings.APP_NAME} Server"

# Parking-lot
app.include_router(parking_lot_router)
app.include_router(parking_lot_v2_router)

# Block
app.include_router(block_router)

# Time-frame
app.include_router(time_frame_router)

# Ticket
app.include_router(ticket_router)
