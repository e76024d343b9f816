"""
HTTP endpoints for Alerta Climática observability.

This module implements health, readiness, metrics, and info endpoints
for monitoring and operational visibility.
"""

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response, JSONResponse
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
import time
from alerta_climatica.settings import Settings
from alerta_climatica.observability.logging_setup import get_logger
from alerta_climatica.orchestrators.lifecycle import Lifecycle

log = get_logger("alerta.health")

def create_health_router(settings: Settings, lifecycle: Lifecycle) -> APIRouter:
    """헬스/메트릭 라우터를 생성합니다."""
    router = APIRouter()
    start_time = time.time()

    @router.get("/health")
    async def health():
        """헬스 체크 엔드포인트"""
        return JSONResponse({
            "status": "ok",
            "service": settings.observability.service_name,
            "timestamp": time.time()
        })

    @router.get("/ready")
    async def ready():
        """레디니스 체크 엔드포인트 (라이프사이클 시작 전에는 503)"""
        if not lifecycle.started:
            return JSONResponse({
                "status": "starting",
                "service": settings.observability.service_name,
                "timestamp": time.time()
            }, status_code=503)
        return JSONResponse({
            "status": "ready",
            "service": settings.observability.service_name,
            "workers": lifecycle.processor.worker_count if lifecycle.processor else 0,
            "timestamp": time.time()
        })

    @router.get("/metrics")
    async def metrics():
        """Prometheus 메트릭 엔드포인트"""
        if not settings.observability.metrics_enabled:
            raise HTTPException(status_code=503, detail="Metrics disabled")

        try:
            return Response(
                generate_latest(),
                media_type=CONTENT_TYPE_LATEST
            )
        except Exception as e:
            log.error(f"메트릭 생성 오류: {e}")
            raise HTTPException(status_code=500, detail="Metrics generation failed")

    @router.get("/info")
    async def info():
        """서비스 정보 엔드포인트"""
        uptime = time.time() - start_time
        return JSONResponse({
            "service": settings.observability.service_name,
            "version": settings.observability.build_version,
            "build_date": settings.observability.build_date,
            "uptime_seconds": int(uptime),
            "metrics_enabled": settings.observability.metrics_enabled,
            "log_level": settings.observability.log_level,
            "storage_enabled": settings.storage.enabled,
            "workers": settings.pipeline.workers,
        })

    return router
