"""
테스트 설정 및 픽스처

이 모듈은 pytest 설정과 공통 픽스처를 제공합니다.
"""

import pytest
import inspect
import tempfile
import os
from datetime import datetime, timezone
from alerta_climatica.settings import Settings


@pytest.fixture
def temp_db_path():
    """임시 데이터베이스 파일 경로"""
    with tempfile.NamedTemporaryFile(suffix='.db', delete=False) as f:
        temp_path = f.name
    yield temp_path
    # 테스트 후 파일 정리 (WAL 보조 파일 포함)
    for suffix in ("", "-wal", "-shm"):
        if os.path.exists(temp_path + suffix):
            os.unlink(temp_path + suffix)


@pytest.fixture
def sample_settings(temp_db_path, tmp_path):
    """테스트용 설정 (임시 DB, 지연 없음, 부트스트랩 파일 없음)"""
    settings = Settings()
    settings.storage.db_path = temp_db_path
    settings.pipeline.workers = 3
    settings.pipeline.processing_delay_sec = 0.0
    settings.bootstrap.geojson_candidates = [str(tmp_path / "missing.geojson")]
    settings.bootstrap.geojson_fallback = str(tmp_path / "missing.geojson")
    settings.observability.service_name = "test-service"
    settings.observability.build_version = "1.0.0"
    settings.observability.log_level = "INFO"
    return settings


@pytest.fixture
def sample_alert():
    """테스트용 Alert 객체"""
    from alerta_climatica.core.models import Alert
    return Alert(
        id="a1",
        zone="Zona Test",
        type="lluvia",
        severity="alta",
        message="Lluvia intensa en el area",
        extract="Lluvia intensa",
        timestamp=datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample_geojson():
    """테스트용 구역 GeoJSON"""
    return (
        b'{"type": "FeatureCollection", "features": ['
        b'{"type": "Feature", "properties": {"name": "Zona Norte"}, '
        b'"geometry": {"type": "Polygon", "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 0]]]}},'
        b'{"type": "Feature", "properties": {"nombre": "Zona Sur"}, "geometry": null},'
        b'{"type": "Feature", "id": 7, "properties": {}, "geometry": {"type": "Point", "coordinates": [0, 0]}}'
        b']}'
    )


# pytest 설정
def pytest_configure(config):
    """pytest 설정"""
    config.addinivalue_line(
        "markers", "slow: 느린 테스트 마커"
    )
    config.addinivalue_line(
        "markers", "integration: 통합 테스트 마커"
    )


def pytest_collection_modifyitems(config, items):
    """테스트 아이템 수정"""
    for item in items:
        # 비동기 테스트에 asyncio 마커 추가
        if inspect.iscoroutinefunction(getattr(item, "function", None)):
            item.add_marker(pytest.mark.asyncio)

        # 느린 테스트 마커 추가
        if "performance" in item.name or "stress" in item.name:
            item.add_marker(pytest.mark.slow)

        # 통합 테스트 마커 추가
        if "integration" in item.name or "end_to_end" in item.name:
            item.add_marker(pytest.mark.integration)
