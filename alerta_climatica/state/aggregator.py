"""
Shared alert state for Alerta Climática.

The Aggregator owns the bounded in-memory alert history and the
per-zone status map. Every read and write of those two structures
goes through one reader-writer lock; durable store I/O happens after
the lock is released, so once accept() returns the in-memory status
already reflects the alert whether or not persistence succeeded.
"""

from collections import deque
from datetime import datetime
from typing import Deque, Dict, Iterable, List, Optional
from alerta_climatica.common.rwlock import ReadWriteLock
from alerta_climatica.core.escalation import RESET_COLOR, escalate
from alerta_climatica.core.models import Alert, Zone, ZoneColor
from alerta_climatica.observability import metrics
from alerta_climatica.observability.logging_setup import get_logger
from alerta_climatica.ports.store import AlertStorePort

log = get_logger("alerta.aggregator")

DEFAULT_ZONES = ("Zona Norte", "Zona Centro", "Zona Sur")
HISTORY_SIZE = 500

# 시드 경보는 고정 ID: 재시작 시 저장소의 같은 행을 덮어씀
SEED_ALERT_ID = "inicio-sistema"

class Aggregator:
    """경보 이력과 구역 상태를 관리하는 공유 상태"""

    def __init__(self,
                 store: Optional[AlertStorePort] = None,
                 *,
                 zones: Iterable[str] = DEFAULT_ZONES,
                 history_size: int = HISTORY_SIZE):
        """
        초기화합니다.

        Args:
            store: 영구 저장소 (None이면 메모리 전용)
            zones: 처음부터 알려진 구역 이름 (모두 verde로 시작)
            history_size: 메모리 이력 최대 크기 (초과 시 가장 오래된 것부터 제거)
        """
        self.store = store
        self.history_size = history_size
        self._lock = ReadWriteLock()
        self._alerts: Deque[Alert] = deque(maxlen=history_size)
        self._zone_status: Dict[str, ZoneColor] = {z: RESET_COLOR for z in zones}
        self._seed_zone = next(iter(self._zone_status), DEFAULT_ZONES[0])

    async def accept(self, alert: Alert) -> None:
        """
        경보를 이력에 추가하고 구역 상태 상향 규칙을 적용한 뒤 저장소에 기록합니다.

        저장 실패는 로그로만 보고되며 메모리 상태를 되돌리지 않습니다.

        Args:
            alert: 수락할 경보
        """
        async with self._lock.write():
            self._alerts.append(alert)
            current = self._zone_status.get(alert.zone)
            status = escalate(current, alert.severity)
            if status is not None and status != current:
                self._zone_status[alert.zone] = status
            size = len(self._alerts)
        metrics.history_size.set(size)

        if status != current:
            log.info(f"구역 상태 변경 zone:{alert.zone} {current} -> {status} (severity:{alert.severity})")

        if self.store is not None:
            try:
                await self.store.save_alert(alert)
            except Exception as e:
                metrics.alert_persist_failures.inc()
                log.warning(f"경보 저장 실패 id:{alert.id} error:{e}")

    async def list_alerts(self) -> List[Alert]:
        """
        최근 경보를 최신순으로 반환합니다.

        저장소가 있으면 저장소 내용을 우선 사용하고, 읽기 실패 시 메모리 이력으로 대체합니다.

        Returns:
            경보 목록 (최대 history_size개)
        """
        if self.store is not None:
            try:
                return await self.store.list_alerts(limit=self.history_size)
            except Exception as e:
                metrics.store_read_failures.inc()
                log.warning(f"저장소 조회 실패, 메모리 이력 사용: {e}")
        return await self.recent_alerts()

    async def recent_alerts(self) -> List[Alert]:
        """메모리 이력을 최신순으로 반환합니다."""
        async with self._lock.read():
            out = list(self._alerts)
        # 정렬은 안정적: 같은 시각이면 나중에 수락된 경보가 앞에 옴
        out.reverse()
        out.sort(key=lambda a: a.timestamp, reverse=True)
        return out

    async def zone_status(self) -> Dict[str, ZoneColor]:
        """구역 상태의 복사본을 반환합니다."""
        async with self._lock.read():
            return dict(self._zone_status)

    async def reset_zones(self) -> None:
        """알려진 모든 구역을 verde로 되돌립니다 (경보 이력은 유지)."""
        async with self._lock.write():
            for zone in self._zone_status:
                self._zone_status[zone] = RESET_COLOR
        log.info("구역 상태 초기화됨")

    async def seed(self, now: datetime) -> None:
        """
        시작 직후 상태가 비어 있지 않도록 정보성 경보를 하나 추가합니다.

        Args:
            now: 시드 경보 시각
        """
        await self.accept(Alert(
            id=SEED_ALERT_ID,
            zone=self._seed_zone,
            type="informativo",
            severity="baja",
            message="Inicio del sistema",
            extract="",
            timestamp=now,
        ))

    async def import_zones(self, data: bytes) -> int:
        """
        GeoJSON 구역을 저장소로 가져옵니다 (저장소가 없으면 아무것도 하지 않음).

        Returns:
            가져온 구역 수
        """
        if self.store is None:
            return 0
        return await self.store.import_zones(data)

    async def list_stored_zones(self) -> List[Zone]:
        """저장소의 구역 목록 (저장소가 없으면 빈 목록)"""
        if self.store is None:
            return []
        return await self.store.list_zones()

    async def close(self) -> None:
        """저장소를 닫습니다."""
        if self.store is not None:
            await self.store.close()
