"""
Dispatch queue and worker pool for Alerta Climática.

This module implements the concurrent pipeline that drains incoming
field messages, classifies them and hands each alert to the
aggregator. With more than one worker, alerts reach the aggregator in
no particular order.
"""

import asyncio
import secrets
from datetime import timezone
from typing import Awaitable, Callable, List, Optional
from alerta_climatica.core.classify import classify
from alerta_climatica.core.errors import ProcessorClosedError
from alerta_climatica.core.models import Alert, IncomingMessage, utcnow
from alerta_climatica.observability import metrics
from alerta_climatica.observability.logging_setup import get_logger, with_context

log = get_logger("alerta.processor")

AlertCallback = Callable[[Alert], Awaitable[None]]

# 워커 종료 신호
_STOP = object()

def new_alert_id() -> str:
    """8바이트 암호학적 난수로 경보 ID를 생성합니다."""
    return secrets.token_hex(8)

def build_alert(msg: IncomingMessage) -> Alert:
    """
    메시지를 분류해 경보를 생성합니다.

    Args:
        msg: 수신 메시지

    Returns:
        새 ID와 현재 시각이 부여된 경보
    """
    with metrics.classify_seconds.time():
        alert_type, severity, extract = classify(msg.text)
    return Alert(
        id=new_alert_id(),
        zone=msg.zone,
        type=alert_type,
        severity=severity,
        message=msg.text,
        extract=extract,
        timestamp=utcnow(),
    )

class Processor:
    """메시지 큐와 워커 풀"""

    def __init__(self,
                 on_alert: Optional[AlertCallback],
                 *,
                 queue_maxsize: int = 64,
                 processing_delay: float = 0.0):
        """
        초기화합니다.

        Args:
            on_alert: 경보 수락 콜백 (보통 Aggregator.accept)
            queue_maxsize: 큐 최대 크기 (가득 차면 submit이 대기)
            processing_delay: 메시지당 시뮬레이션 지연 (초, 0이면 없음)
        """
        self.on_alert = on_alert
        self.q: asyncio.Queue = asyncio.Queue(maxsize=queue_maxsize)
        self.processing_delay = processing_delay
        self._workers: List[asyncio.Task] = []
        self._closed = False
        self._drain: Optional[asyncio.Future] = None

    @property
    def closed(self) -> bool:
        """close()가 호출되었는지 여부"""
        return self._closed

    @property
    def worker_count(self) -> int:
        """시작된 워커 수"""
        return len(self._workers)

    def start(self, n: int) -> None:
        """
        n개의 워커를 시작합니다.

        Args:
            n: 워커 수 (0 이하이면 1)

        Raises:
            ProcessorClosedError: 이미 닫힌 경우
        """
        if self._closed:
            raise ProcessorClosedError("processor is closed")
        if n <= 0:
            n = 1
        base = len(self._workers)
        for i in range(n):
            self._workers.append(asyncio.create_task(self._worker(base + i), name=f"worker-{base + i}"))
        metrics.workers_running.set(len(self._workers))
        log.info(f"워커 {n}개 시작됨 (총 {len(self._workers)}개)")

    async def submit(self, msg: IncomingMessage) -> None:
        """
        메시지를 큐에 추가합니다. 큐가 가득 차면 공간이 생길 때까지 대기합니다.

        Args:
            msg: 수신 메시지

        Raises:
            ProcessorClosedError: 종료가 시작된 경우
        """
        if self._closed:
            raise ProcessorClosedError("processor is closed")
        await self.q.put(msg)
        metrics.queue_depth.set(self.q.qsize())

    async def close(self) -> None:
        """
        새 메시지 수락을 중단하고, 이미 큐에 들어간 메시지를 모두 처리한 뒤 워커를 종료합니다.

        여러 번 호출해도 안전하며 모든 호출자가 같은 종료를 기다립니다.
        """
        if self._drain is None:
            self._closed = True
            self._drain = asyncio.ensure_future(self._drain_and_stop())
        await asyncio.shield(self._drain)

    async def _drain_and_stop(self) -> None:
        if not self._workers:
            if not self.q.empty():
                log.warning(f"워커 없이 닫힘, 미처리 메시지 {self.q.qsize()}개")
            return

        # 대기 중인 submit 뒤에 종료 신호를 워커 수만큼 넣음
        for _ in self._workers:
            await self.q.put(_STOP)
        results = await asyncio.gather(*self._workers, return_exceptions=True)
        for r in results:
            if isinstance(r, BaseException):
                log.error(f"워커 비정상 종료: {r!r}")
        metrics.workers_running.set(0)
        metrics.queue_depth.set(self.q.qsize())
        log.info("모든 워커 종료됨")

    async def _worker(self, worker_id: int) -> None:
        """큐에서 메시지를 소비하는 워커"""
        while True:
            msg = await self.q.get()
            try:
                if msg is _STOP:
                    return
                metrics.queue_depth.set(self.q.qsize())
                with with_context(worker=worker_id, zone=msg.zone):
                    await self._process(msg, worker_id)
            except Exception as e:
                # 오류 처리 (로깅만 하고 계속 진행)
                log.error(f"메시지 처리 오류 worker:{worker_id} zone:{getattr(msg, 'zone', '?')} error:{e}")
            finally:
                self.q.task_done()

    async def _process(self, msg: IncomingMessage, worker_id: int) -> None:
        """분류 -> 경보 생성 -> 전달을 순서대로 수행합니다."""
        alert = build_alert(msg)
        metrics.alerts_classified.labels(type=alert.type, severity=alert.severity).inc()

        # 전달은 fire-and-forget: 콜백 실패가 워커를 멈추지 않음
        if self.on_alert is not None:
            try:
                await self.on_alert(alert)
            except Exception as e:
                metrics.delivery_failures.inc()
                log.error(f"경보 전달 실패 worker:{worker_id} id:{alert.id} error:{e}")

        received = msg.received_at
        if received.tzinfo is None:
            received = received.replace(tzinfo=timezone.utc)
        metrics.end_to_end_seconds.observe(max(0.0, (alert.timestamp - received).total_seconds()))
        log.debug(f"경보 처리됨 worker:{worker_id} zone:{alert.zone} type:{alert.type} severity:{alert.severity}")

        # 센서/구역별 지연 시뮬레이션
        if self.processing_delay > 0:
            await asyncio.sleep(self.processing_delay)
