"""환경 변수 기반 애플리케이션 설정을 중앙에서 관리합니다."""

from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./cineboard.db"
    DEBUG: bool = True
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:8000"]
    LOG_LEVEL: str = "INFO"

    # Snapshot history
    SNAPSHOT_HISTORY_DEFAULT_LIMIT: int = 10
    SNAPSHOT_HISTORY_MAX_LIMIT: int = 100

    # 순번(order_index/selection_number) 충돌 시 재시도 횟수
    APPEND_RETRY_LIMIT: int = 3

    # 스냅샷에서 분기한 테이크의 기본 이름에 쓰는 시간 포맷 (24시간제)
    BRANCH_LABEL_TIME_FORMAT: str = "%H:%M"

    class Config:
        # 실행 cwd와 무관하게 backend/.env를 로드한다.
        env_file = str(Path(__file__).resolve().parents[1] / ".env")


settings = Settings()
