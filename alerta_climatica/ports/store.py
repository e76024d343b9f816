"""
Durable alert store port interface.

This module defines the protocol for the durable alert log and
zone geometry storage.
"""

from typing import List, Protocol
from alerta_climatica.core.models import Alert, Zone

class AlertStorePort(Protocol):
    """경보 저장소 포트 인터페이스"""

    async def save_alert(self, alert: Alert) -> None:
        """
        경보를 저장합니다 (같은 id는 덮어씀).

        Args:
            alert: 저장할 경보
        """
        ...

    async def list_alerts(self, limit: int = 500) -> List[Alert]:
        """
        최근 경보를 최신순으로 조회합니다.

        Args:
            limit: 최대 개수

        Returns:
            경보 목록
        """
        ...

    async def import_zones(self, data: bytes) -> int:
        """
        GeoJSON FeatureCollection으로 구역 테이블을 교체합니다.

        Args:
            data: 원시 GeoJSON 바이트

        Returns:
            가져온 구역 수
        """
        ...

    async def list_zones(self) -> List[Zone]:
        """저장된 구역을 조회합니다."""
        ...

    async def close(self) -> None:
        """저장소를 닫습니다."""
        ...
