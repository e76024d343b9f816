"""
Zone status escalation rule for Alerta Climática.

Pure functions deciding how an alert's severity moves a zone's colour.
Status only goes up; lowering it is the job of an explicit reset.
"""

from typing import Dict, Optional
from alerta_climatica.core.models import Severity, ZoneColor

# 심각도 순서 정의 (낮음 -> 높음)
SEVERITY_ORDER: Dict[Severity, int] = {
    "baja": 0,
    "media": 1,
    "alta": 2,
    "crítica": 3,
}

# 구역 색상 순서 정의
COLOR_ORDER: Dict[ZoneColor, int] = {
    "verde": 0,
    "amarillo": 1,
    "rojo": 2,
}

# 상태를 올리는 심각도와 목표 색상 (그 외 심각도는 상태 변경 없음)
SEVERITY_COLOR: Dict[Severity, ZoneColor] = {
    "alta": "amarillo",
    "crítica": "rojo",
}

RESET_COLOR: ZoneColor = "verde"

def escalate(current: Optional[ZoneColor], severity: str) -> Optional[ZoneColor]:
    """
    경보 심각도를 적용한 뒤의 구역 상태를 계산합니다.

    Args:
        current: 현재 구역 색상 (알 수 없는 구역이면 None)
        severity: 경보 심각도

    Returns:
        새 구역 색상 (변경이 없으면 current 그대로)
    """
    target = SEVERITY_COLOR.get(severity)
    if target is None:
        return current

    # 하향 조정 금지
    if current in COLOR_ORDER and COLOR_ORDER[current] >= COLOR_ORDER[target]:
        return current
    return target
