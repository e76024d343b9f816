"""
HTTP transport for Alerta Climática.

This module exposes the pipeline to the dashboard: SMS submission,
alert and zone queries, zone reset and GeoJSON zone import. The
FastAPI lifespan drives the lifecycle controller, so the worker pool
runs on the server's event loop and is drained on shutdown.
"""

import json
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional
from urllib.parse import parse_qs
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from pydantic import ValidationError
from alerta_climatica.core.errors import GeoJSONError, ProcessorClosedError
from alerta_climatica.core.geojson import enrich_feature_collection, zones_feature_collection
from alerta_climatica.core.models import SmsSubmission
from alerta_climatica.observability.health import create_health_router
from alerta_climatica.observability.logging_setup import get_logger
from alerta_climatica.orchestrators.lifecycle import Lifecycle
from alerta_climatica.settings import Settings

log = get_logger("alerta.api")

async def _read_submission(request: Request) -> SmsSubmission:
    """JSON 또는 form-urlencoded 본문을 SmsSubmission으로 변환합니다."""
    body = await request.body()
    content_type = request.headers.get("content-type", "")
    try:
        if "application/json" in content_type:
            payload = json.loads(body or b"null")
            if not isinstance(payload, dict):
                raise HTTPException(status_code=400, detail="JSON inválido")
        else:
            form = parse_qs(body.decode("utf-8"), keep_blank_values=True)
            payload = {k: v[0] for k, v in form.items() if k in ("zona", "texto")}
        return SmsSubmission.model_validate(payload)
    except (ValueError, ValidationError):
        detail = "JSON inválido" if "application/json" in content_type else "Formulario inválido"
        raise HTTPException(status_code=400, detail=detail)

def create_app(settings: Settings, lifecycle: Optional[Lifecycle] = None) -> FastAPI:
    """
    FastAPI 애플리케이션을 생성합니다.

    Args:
        settings: 애플리케이션 설정
        lifecycle: 라이프사이클 컨트롤러 (None이면 설정으로 생성)

    Returns:
        FastAPI 애플리케이션
    """
    lc = lifecycle or Lifecycle(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # 시작 실패는 그대로 전파 (서버가 트래픽을 받지 않음)
        await lc.start()
        try:
            yield
        finally:
            await lc.shutdown()

    app = FastAPI(
        title=settings.observability.service_name,
        version=settings.observability.build_version,
        description="Alerta Climática field report processing service",
        lifespan=lifespan,
    )
    app.state.lifecycle = lc
    app.include_router(create_health_router(settings, lc))

    @app.post("/api/sms")
    async def submit_sms(request: Request):
        """메시지를 받아 워커 풀에 넣습니다."""
        sub = await _read_submission(request)
        try:
            await lc.submit(sub.texto, sub.zona)
        except ProcessorClosedError:
            raise HTTPException(status_code=503, detail="servicio no disponible")
        return {"status": "enviado"}

    @app.get("/api/alerts")
    async def list_alerts():
        """최근 경보 목록"""
        alerts = await lc.aggregator.list_alerts()
        return JSONResponse([a.model_dump(mode="json", by_alias=True) for a in alerts])

    @app.get("/api/zones")
    async def zones():
        """구역별 색상"""
        return JSONResponse(await lc.aggregator.zone_status())

    @app.post("/api/reset", status_code=204)
    async def reset():
        """구역 상태를 verde로 되돌립니다."""
        await lc.aggregator.reset_zones()
        return Response(status_code=204)

    @app.post("/api/admin/import_zones", status_code=204)
    async def import_zones(request: Request):
        """GeoJSON FeatureCollection을 저장소로 가져옵니다 (인증 없음)."""
        data = await request.body()
        try:
            await lc.aggregator.import_zones(data)
        except GeoJSONError as e:
            log.warning(f"구역 가져오기 거부: {e}")
            raise HTTPException(status_code=400, detail="geojson inválido")
        except Exception as e:
            log.error(f"구역 가져오기 실패: {e}")
            raise HTTPException(status_code=500, detail="import failed")
        return Response(status_code=204)

    @app.get("/api/zones_geojson")
    async def zones_geojson():
        """현재 상태가 포함된 구역 GeoJSON"""
        statuses = await lc.aggregator.zone_status()
        try:
            stored = await lc.aggregator.list_stored_zones()
        except Exception as e:
            log.warning(f"저장된 구역 조회 실패, 파일 사용: {e}")
            stored = []
        if stored:
            log.debug(f"저장소 구역 {len(stored)}개 제공")
            return JSONResponse(zones_feature_collection(stored, statuses))

        path = Path(settings.bootstrap.geojson_fallback)
        try:
            data = path.read_bytes()
        except OSError as e:
            log.error(f"{path} 읽기 실패: {e}")
            raise HTTPException(status_code=500, detail="no se pudo leer zones.geojson")
        try:
            return JSONResponse(enrich_feature_collection(data, statuses))
        except GeoJSONError as e:
            log.error(f"{path} 파싱 실패: {e}")
            raise HTTPException(status_code=500, detail="geojson inválido")

    return app
