"""
Hazard pattern matching for Alerta Climática.

This module contains the pure classification function that maps a free
text field report to a (type, severity, extract) triple.
"""

import re
from typing import Tuple

# 기본 분류 (어떤 패턴과도 일치하지 않을 때)
DEFAULT_TYPE = "informativo"
DEFAULT_SEVERITY = "baja"

# (정규식, 경보 유형, 심각도) 목록. 순서가 우선순위를 결정합니다.
# 모듈 로드 시 한 번만 컴파일되며 이후 변경되지 않습니다.
PATTERNS: Tuple[Tuple["re.Pattern[str]", str, str], ...] = tuple(
    (re.compile(expr, re.IGNORECASE), alert_type, severity)
    for expr, alert_type, severity in (
        (
            r"lluvias?\s+(?:intensas?|fuertes?|torrenciales?)"
            r"|fuertes\s+lluvias"
            r"|precipitaci[oó]n(?:es)?\s+intensas?",
            "lluvia", "alta",
        ),
        (
            r"desbordes?|desbordamientos?|desbordad[oa]s?"
            r"|crecidas?\s+del?\s*r[ií]os?"
            r"|crecientes?"
            r"|inundaci[oó]n(?:es)?",
            "desborde", "alta",
        ),
        (
            r"sequ[ií]as?|falta\s+de\s+agua|escasez\s+h[ií]drica",
            "sequía", "media",
        ),
        (
            r"huaicos?|aluvi[oó]n(?:es)?|deslizamientos?",
            "huaico", "alta",
        ),
        (
            r"alertas?\s+rojas?",
            "alerta-roja", "crítica",
        ),
        (
            r"alertas?\s+naranjas?",
            "alerta-naranja", "alta",
        ),
        (
            r"vientos?\s+fuertes?|fuertes\s+vientos|rachas\s+de\s+viento",
            "viento", "media",
        ),
    )
)

def classify(text: str) -> Tuple[str, str, str]:
    """
    텍스트를 위험 패턴에 따라 분류합니다.
    
    Args:
        text: 분류할 원문 (비어 있을 수 있음)
        
    Returns:
        (유형, 심각도, 일치한 구간) 튜플.
        공백뿐인 텍스트는 ("", "", ""), 일치 없음은 ("informativo", "baja", "")
    """
    t = text.strip()
    if not t:
        return "", "", ""
    
    # 목록 순서대로 첫 번째 일치를 사용
    for regex, alert_type, severity in PATTERNS:
        m = regex.search(t)
        if m:
            return alert_type, severity, m.group(0)
    
    return DEFAULT_TYPE, DEFAULT_SEVERITY, ""
