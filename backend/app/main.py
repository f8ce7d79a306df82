"""FastAPI 애플리케이션 진입점. 미들웨어, API 라우터, 스키마 생성과 도메인 오류 처리를 등록합니다."""

import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from app.config import settings
from app.database import Base, engine
import app.models  # noqa: F401 - 모델 import로 metadata 등록
from app.routers import take_snapshots, takes, shot_decisions, shot_selections
from app.services.shot_decision_machine import ImpossibleStateError, InvalidTransitionError

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="CineBoard 테이크 이력/결정 서비스",
    description="테이크 스냅샷, 에셋 선택 원장, 샷 결정 상태를 append-only 이력으로 관리하는 시스템",
    version="1.0.0",
    debug=settings.DEBUG,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register all routers
app.include_router(take_snapshots.router)
app.include_router(takes.router)
app.include_router(shot_decisions.router)
app.include_router(shot_selections.router)


@app.exception_handler(ImpossibleStateError)
def impossible_state_handler(request: Request, exc: ImpossibleStateError):
    # 데이터 무결성 위반. 정상 응답(UNDECIDED 등)으로 대체하지 않고 500으로 드러낸다.
    logger.error("[decision] impossible state on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=500, content={"detail": str(exc), "error": "impossible_state"})


@app.exception_handler(InvalidTransitionError)
def invalid_transition_handler(request: Request, exc: InvalidTransitionError):
    return JSONResponse(status_code=409, content={"detail": str(exc), "error": "invalid_transition"})


@app.on_event("startup")
def ensure_schema():
    Base.metadata.create_all(bind=engine)


@app.get("/api/health")
def health_check():
    return {"status": "ok", "service": "CineBoard 테이크 이력/결정 서비스"}
