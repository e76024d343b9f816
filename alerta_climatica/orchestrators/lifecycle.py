"""
Lifecycle controller for Alerta Climática.

This module wires the store, the aggregator and the worker pool
together at startup and tears them down in order at shutdown.
Startup failures propagate (the service must not serve traffic with
an unusable store); shutdown failures are logged and the remaining
steps still run.
"""

import asyncio
from pathlib import Path
from typing import Optional
from alerta_climatica.adapters.storage.sqlite_store import SQLiteAlertStore
from alerta_climatica.core.errors import ProcessorClosedError
from alerta_climatica.core.models import IncomingMessage, utcnow
from alerta_climatica.observability import metrics
from alerta_climatica.observability.logging_setup import get_logger
from alerta_climatica.orchestrators.processor import Processor
from alerta_climatica.ports.store import AlertStorePort
from alerta_climatica.settings import Settings
from alerta_climatica.state.aggregator import Aggregator

log = get_logger("alerta.lifecycle")

class Lifecycle:
    """시작/종료 순서를 관리하는 컨트롤러"""

    def __init__(self, settings: Settings, *, store: Optional[AlertStorePort] = None):
        """
        초기화합니다.

        Args:
            settings: 애플리케이션 설정
            store: 주입할 저장소 (None이면 설정에 따라 SQLite 저장소를 생성)
        """
        self.settings = settings
        self.store = store
        self.aggregator: Optional[Aggregator] = None
        self.processor: Optional[Processor] = None
        self.started = False
        self._stopped = False

    async def start(self) -> None:
        """
        저장소 -> Aggregator -> 구역 부트스트랩 -> 시드 -> 워커 풀 순서로 시작합니다.

        Raises:
            StoreInitError: 저장소를 초기화할 수 없는 경우 (치명적)
        """
        s = self.settings
        if self.store is None and s.storage.enabled:
            store = SQLiteAlertStore(s.storage.db_path)
            try:
                await store.init()
            except Exception as e:
                log.error(f"저장소 초기화 실패: {e}")
                raise
            self.store = store

        self.aggregator = Aggregator(
            self.store,
            zones=s.pipeline.zones,
            history_size=s.pipeline.history_size,
        )
        await self.bootstrap_zones()
        await self.aggregator.seed(utcnow())

        self.processor = Processor(
            self.aggregator.accept,
            queue_maxsize=s.pipeline.queue_maxsize,
            processing_delay=s.pipeline.processing_delay_sec,
        )
        self.processor.start(s.pipeline.workers)
        self.started = True
        log.info(f"서비스 시작됨 workers:{self.processor.worker_count} store:{'on' if self.store else 'off'}")

    async def bootstrap_zones(self) -> Optional[str]:
        """
        저장소에 구역이 없으면 알려진 경로에서 GeoJSON을 찾아 가져옵니다.

        후보 파일이 하나도 없어도 오류가 아닙니다.

        Returns:
            가져온 파일 경로 (가져오지 않았으면 None)
        """
        if self.aggregator is None or self.store is None:
            return None
        try:
            zones = await self.aggregator.list_stored_zones()
        except Exception as e:
            log.warning(f"구역 목록 조회 실패, 부트스트랩 건너뜀: {e}")
            return None
        if zones:
            return None

        for candidate in self.settings.bootstrap.geojson_candidates:
            try:
                data = Path(candidate).read_bytes()
            except OSError:
                continue
            try:
                count = await self.aggregator.import_zones(data)
            except Exception as e:
                log.warning(f"{candidate}에서 구역을 가져올 수 없음: {e}")
                continue
            log.info(f"{candidate}에서 구역 {count}개 가져옴")
            return candidate
        return None

    async def submit(self, text: str, zone: Optional[str] = None, *, source: str = "http") -> IncomingMessage:
        """
        외부 제출을 메시지로 만들어 워커 풀에 넣습니다.

        Args:
            text: 메시지 본문
            zone: 구역 이름 (비어 있으면 기본 구역)
            source: 메트릭용 제출 경로

        Returns:
            큐에 들어간 메시지

        Raises:
            ProcessorClosedError: 시작 전이거나 종료가 시작된 경우
        """
        if self.processor is None:
            raise ProcessorClosedError("service not started")
        if zone is None or not zone.strip():
            zone = self.settings.pipeline.default_zone
        msg = IncomingMessage(zone=zone, text=text, received_at=utcnow())
        await self.processor.submit(msg)
        metrics.messages_submitted.labels(source=source).inc()
        return msg

    async def shutdown(self) -> None:
        """
        워커 풀을 닫아 큐를 모두 처리한 뒤 저장소를 닫습니다.
        드레인이 shutdown_timeout_sec를 넘기면 경고만 남기고 끝까지 기다립니다.

        각 단계의 실패는 로그만 남기고 다음 단계를 계속 진행합니다.
        """
        if self._stopped:
            return
        self._stopped = True
        log.info("종료 시작")

        if self.processor is not None:
            timeout = self.settings.http.shutdown_timeout_sec
            try:
                try:
                    await asyncio.wait_for(asyncio.shield(self.processor.close()), timeout=timeout)
                except asyncio.TimeoutError:
                    # 이미 큐에 들어간 메시지는 버리지 않음: 경고 후 드레인 완료까지 대기
                    log.warning(f"워커 풀 드레인이 {timeout}s를 넘김, 남은 메시지 {self.processor.q.qsize()}개 처리 대기")
                    await self.processor.close()
            except Exception as e:
                log.error(f"워커 풀 종료 실패: {e}")

        if self.aggregator is not None:
            try:
                await self.aggregator.close()
            except Exception as e:
                log.error(f"저장소 닫기 실패: {e}")
        elif self.store is not None:
            try:
                await self.store.close()
            except Exception as e:
                log.error(f"저장소 닫기 실패: {e}")

        self.started = False
        log.info("종료 완료")
