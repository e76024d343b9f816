"""
Core domain models for Alerta Climática.

This module defines the core domain models using Pydantic v2.
Wire names (zona, tipo, severidad, ...) are kept as aliases so the
dashboard and stored records stay compatible.
"""

from datetime import datetime, timezone
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field

# 심각도 타입 정의 (빈 문자열은 빈 메시지에서 생성된 경보)
Severity = Literal["", "baja", "media", "alta", "crítica"]

# 구역 상태 색상
ZoneColor = Literal["verde", "amarillo", "rojo"]

def utcnow() -> datetime:
    """현재 UTC 시각을 반환합니다."""
    return datetime.now(timezone.utc)

class IncomingMessage(BaseModel):
    """수신된 (시뮬레이션) SMS 메시지"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    zone: str = Field(alias="zona")
    text: str = Field(alias="texto")
    received_at: datetime = Field(default_factory=utcnow, alias="recibido_en")

class Alert(BaseModel):
    """메시지 분석 결과로 생성된 경보 (생성 후 변경 불가)"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    zone: str = Field(alias="zona")
    type: str = Field(alias="tipo")
    severity: Severity = Field(alias="severidad")
    message: str = Field(alias="mensaje")
    extract: str = Field(default="", alias="extracto")
    timestamp: datetime

class Zone(BaseModel):
    """저장소에 보관된 구역 (geometry는 불투명한 GeoJSON 텍스트)"""
    id: int
    name: str
    geom: str = "null"

class SmsSubmission(BaseModel):
    """POST /api/sms 요청 본문"""
    model_config = ConfigDict(extra="ignore")

    zona: Optional[str] = None
    texto: str = ""
