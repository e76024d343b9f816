"""
Exception hierarchy for Alerta Climática.

Store errors are absorbed at the aggregator boundary, initialization
errors are fatal, and transport maps the rest to HTTP status codes.
"""

class AlertaError(Exception):
    """모든 애플리케이션 예외의 기본 클래스"""


class StoreError(AlertaError):
    """저장소 읽기/쓰기 실패"""


class StoreInitError(StoreError):
    """저장소를 열거나 스키마를 만들 수 없음 (치명적)"""


class StoreClosedError(StoreError):
    """이미 닫힌 저장소에 접근함"""


class GeoJSONError(AlertaError, ValueError):
    """GeoJSON FeatureCollection 파싱 실패"""


class ProcessorClosedError(AlertaError):
    """종료가 시작된 후 메시지가 제출됨"""
