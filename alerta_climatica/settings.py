# alerta_climatica/settings.py
from __future__ import annotations
from typing import List
from pydantic import BaseModel, Field

class Storage(BaseModel):
    enabled: bool = True
    db_path: str = "alerts.db"

class Pipeline(BaseModel):
    workers: int = 3                          # 워커 수 (0 이하이면 1)
    queue_maxsize: int = 64
    history_size: int = 500
    processing_delay_sec: float = 0.0         # 데모용 지연 (원래 구현은 0.05)
    default_zone: str = "Zona Centro"
    zones: List[str] = Field(default_factory=lambda: ["Zona Norte", "Zona Centro", "Zona Sur"])

class Bootstrap(BaseModel):
    geojson_candidates: List[str] = Field(default_factory=lambda: [
        "web/static/zones.geojson",
        "export.geojson",
        "../export.geojson",
    ])
    geojson_fallback: str = "web/static/zones.geojson"

class HTTP(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080
    shutdown_timeout_sec: float = 10.0

class Observability(BaseModel):
    service_name: str = "Alerta Climática"
    build_version: str = "0.3.0"
    build_date: str = "2025-06-01"
    log_level: str = "INFO"
    log_format: str = "dev"                   # dev | json
    metrics_enabled: bool = True

class Settings(BaseModel):
    # 하위 섹션 (기본값/팩토리로 누락 방지)
    storage: Storage = Field(default_factory=Storage)
    pipeline: Pipeline = Field(default_factory=Pipeline)
    bootstrap: Bootstrap = Field(default_factory=Bootstrap)
    http: HTTP = Field(default_factory=HTTP)
    observability: Observability = Field(default_factory=Observability)
