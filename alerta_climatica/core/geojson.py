"""
GeoJSON handling for Alerta Climática.

Zone geometry is an opaque payload: this module only decodes a
FeatureCollection far enough to pull out zone names, and builds the
status-enriched collection served to the dashboard map.
"""

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence
from pydantic import BaseModel, Field, field_validator
from .errors import GeoJSONError
from .escalation import RESET_COLOR
from .models import Zone

class Feature(BaseModel):
    """GeoJSON Feature (geometry는 그대로 전달)"""
    id: Any = None
    geometry: Any = None
    properties: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("properties", mode="before")
    @classmethod
    def _properties_mapping(cls, v: Any) -> Dict[str, Any]:
        return v if isinstance(v, dict) else {}

    def zone_name(self) -> str:
        """properties.name -> properties.nombre -> id 순서로 구역 이름을 결정합니다."""
        name = self.properties.get("name")
        if isinstance(name, str):
            return name
        nombre = self.properties.get("nombre")
        if isinstance(nombre, str):
            return nombre
        if self.id is not None:
            return str(self.id)
        return ""

    def geometry_json(self) -> str:
        """geometry를 JSON 텍스트로 직렬화합니다."""
        try:
            return json.dumps(self.geometry, ensure_ascii=False)
        except (TypeError, ValueError):
            return "null"

class FeatureCollection(BaseModel):
    """GeoJSON FeatureCollection (features가 없으면 None)"""
    features: Optional[List[Feature]] = None

    @field_validator("features", mode="before")
    @classmethod
    def _object_features(cls, v: Any) -> Optional[List[Any]]:
        # 배열이 아니면 처리할 것이 없음, 객체가 아닌 항목은 건너뜀
        if not isinstance(v, list):
            return None
        return [f for f in v if isinstance(f, dict)]

def parse_feature_collection(data: bytes) -> FeatureCollection:
    """
    원시 GeoJSON 바이트를 FeatureCollection으로 디코딩합니다.

    Args:
        data: GeoJSON 바이트

    Returns:
        FeatureCollection

    Raises:
        GeoJSONError: JSON이 아니거나 최상위가 객체가 아닌 경우
    """
    try:
        raw = json.loads(data)
    except (ValueError, UnicodeDecodeError) as e:
        raise GeoJSONError(f"invalid GeoJSON: {e}") from e

    if not isinstance(raw, dict):
        raise GeoJSONError("GeoJSON root must be an object")

    return FeatureCollection.model_validate({"features": raw.get("features")})

def zones_feature_collection(zones: Sequence[Zone], statuses: Mapping[str, str]) -> Dict[str, Any]:
    """
    저장된 구역으로 현재 상태가 포함된 FeatureCollection을 만듭니다.

    Args:
        zones: 저장소의 구역 목록
        statuses: 구역 이름 -> 색상

    Returns:
        GeoJSON FeatureCollection 딕셔너리
    """
    features = []
    for z in zones:
        try:
            geom = json.loads(z.geom)
        except (TypeError, ValueError):
            geom = None
        features.append({
            "type": "Feature",
            "properties": {"name": z.name, "status": statuses.get(z.name)},
            "geometry": geom,
        })
    return {"type": "FeatureCollection", "features": features}

def enrich_feature_collection(data: bytes, statuses: Mapping[str, str]) -> Dict[str, Any]:
    """
    GeoJSON 파일 내용의 각 feature에 properties.status를 추가합니다.

    이름이 문자열인 feature만 갱신하며, 상태를 모르는 구역은 verde로 표시합니다.

    Raises:
        GeoJSONError: 파일 내용이 GeoJSON 객체가 아닌 경우
    """
    try:
        fc = json.loads(data)
    except (ValueError, UnicodeDecodeError) as e:
        raise GeoJSONError(f"invalid GeoJSON: {e}") from e
    if not isinstance(fc, dict):
        raise GeoJSONError("GeoJSON root must be an object")

    features = fc.get("features")
    if isinstance(features, list):
        for f in features:
            if not isinstance(f, dict):
                continue
            props = f.get("properties")
            if not isinstance(props, dict):
                continue
            name = props.get("name")
            if isinstance(name, str):
                props["status"] = statuses.get(name, RESET_COLOR)
    return fc
