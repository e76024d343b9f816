# alerta_climatica/main.py
import os, asyncio, sys, math
import uvicorn
from alerta_climatica.settings import Settings
from alerta_climatica.api.app import create_app
from alerta_climatica.observability.logging_setup import setup_logging, get_logger
from alerta_climatica.orchestrators.lifecycle import Lifecycle

def _b(name, default=False): return os.getenv(name, str(default)).lower() in ("1","true","yes","on")

def build_settings() -> Settings:
    s = Settings()

    # 저장소
    s.storage.enabled = _b("STORAGE_ENABLED", s.storage.enabled)
    s.storage.db_path = os.getenv("DB_PATH", s.storage.db_path)

    # 파이프라인
    s.pipeline.workers = int(os.getenv("WORKERS", s.pipeline.workers))
    s.pipeline.queue_maxsize = int(os.getenv("QUEUE_MAXSIZE", s.pipeline.queue_maxsize))
    s.pipeline.processing_delay_sec = float(os.getenv("PROCESSING_DELAY_SEC", s.pipeline.processing_delay_sec))
    s.pipeline.default_zone = os.getenv("DEFAULT_ZONE", s.pipeline.default_zone)
    zones = os.getenv("ZONES")
    if zones:
        s.pipeline.zones = [z.strip() for z in zones.split(",") if z.strip()]

    # 구역 부트스트랩
    fallback = os.getenv("ZONES_GEOJSON")
    if fallback:
        s.bootstrap.geojson_fallback = fallback
        s.bootstrap.geojson_candidates = [fallback] + s.bootstrap.geojson_candidates

    # HTTP
    s.http.host = os.getenv("HOST", s.http.host)
    s.http.port = int(os.getenv("PORT", s.http.port))
    s.http.shutdown_timeout_sec = float(os.getenv("SHUTDOWN_TIMEOUT_SEC", s.http.shutdown_timeout_sec))

    # 관측성
    s.observability.log_level = os.getenv("LOG_LEVEL", s.observability.log_level)
    s.observability.log_format = os.getenv("LOG_FORMAT", s.observability.log_format)
    s.observability.metrics_enabled = _b("METRICS_ENABLED", s.observability.metrics_enabled)

    return s

def build_server_config(s: Settings, app) -> uvicorn.Config:
    # uvicorn은 정수 초만 받음: 소수 설정은 올림 (0.5 -> 1, 0으로 잘리지 않음)
    return uvicorn.Config(
        app,
        host=s.http.host,
        port=s.http.port,
        lifespan="on",
        log_level=s.observability.log_level.lower(),
        timeout_graceful_shutdown=math.ceil(s.http.shutdown_timeout_sec),
    )

async def main() -> int:
    # 로거 초기화 (환경변수 LOG_LEVEL 우선)
    setup_logging(os.getenv("LOG_LEVEL", "INFO"), os.getenv("LOG_FORMAT", "dev"))
    log = get_logger("alerta.main")

    s = build_settings()
    setup_logging(s.observability.log_level, s.observability.log_format)
    log.info("설정 로드 완료")

    lifecycle = Lifecycle(s)
    app = create_app(s, lifecycle)

    # uvicorn이 SIGINT/SIGTERM을 처리: 연결 정리(타임아웃) 후 lifespan 종료에서 큐를 비움
    server = uvicorn.Server(build_server_config(s, app))
    log.info(f"서버 시작 http://{s.http.host}:{s.http.port}")
    await server.serve()

    if not server.started:
        log.error("시작 실패")
        return 1
    log.info("종료 완료")
    return 0

def run() -> None:
    sys.exit(asyncio.run(main()))

if __name__ == "__main__":
    run()
