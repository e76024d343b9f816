"""
SQLite-based alert store for Alerta Climática.

This module implements the durable alert log and zone geometry
table on top of aiosqlite.
"""

import aiosqlite
from datetime import datetime, timezone
from typing import List
from alerta_climatica.core.errors import StoreClosedError, StoreError, StoreInitError
from alerta_climatica.core.geojson import parse_feature_collection
from alerta_climatica.core.models import Alert, Zone
from alerta_climatica.observability.logging_setup import get_logger

log = get_logger("alerta.store")

# SQLite 스키마
SCHEMA = """
CREATE TABLE IF NOT EXISTS alerts (
    id TEXT PRIMARY KEY,
    zone TEXT,
    type TEXT,
    severity TEXT,
    message TEXT,
    extract TEXT,
    timestamp TEXT
);
CREATE INDEX IF NOT EXISTS idx_alerts_timestamp ON alerts(timestamp);
CREATE TABLE IF NOT EXISTS zones (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    geom TEXT,
    created_at TEXT
);
"""

_EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)

def format_timestamp(ts: datetime) -> str:
    """datetime을 RFC3339 UTC 문자열(마이크로초, Z 접미사)로 변환합니다."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")

def parse_timestamp(value: str) -> datetime:
    """RFC3339 문자열을 datetime으로 변환합니다 (실패 시 epoch)."""
    try:
        ts = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return _EPOCH
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts

class SQLiteAlertStore:
    """SQLite 기반 경보 저장소"""

    def __init__(self, path: str):
        """
        초기화합니다.

        Args:
            path: SQLite 데이터베이스 파일 경로
        """
        self.path = path
        self.closed = False
        log.info(f"SQLiteAlertStore 초기화: {path}")

    def _check_open(self) -> None:
        if self.closed:
            raise StoreClosedError(f"store {self.path} is closed")

    async def init(self) -> None:
        """
        데이터베이스를 초기화합니다.

        Raises:
            StoreInitError: 파일을 열 수 없거나 스키마를 만들 수 없는 경우
        """
        try:
            async with aiosqlite.connect(self.path) as db:
                # WAL 모드: 작은 쓰기가 동시에 일어날 때 유리
                try:
                    await db.execute("PRAGMA journal_mode=WAL;")
                except aiosqlite.Error as e:
                    log.warning(f"WAL 모드 설정 실패: {e}")
                await db.executescript(SCHEMA)
                await db.commit()
        except (aiosqlite.Error, OSError) as e:
            raise StoreInitError(f"cannot initialize store {self.path}: {e}") from e
        log.info(f"SQLiteAlertStore 스키마 초기화 완료: {self.path}")

    async def save_alert(self, alert: Alert) -> None:
        """
        경보를 저장합니다 (같은 id는 덮어씀).

        Args:
            alert: 저장할 경보

        Raises:
            StoreError: 쓰기 실패
        """
        self._check_open()
        try:
            async with aiosqlite.connect(self.path) as db:
                await db.execute(
                    "INSERT OR REPLACE INTO alerts (id, zone, type, severity, message, extract, timestamp) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (alert.id, alert.zone, alert.type, alert.severity, alert.message,
                     alert.extract, format_timestamp(alert.timestamp))
                )
                await db.commit()
        except aiosqlite.Error as e:
            raise StoreError(f"save_alert {alert.id}: {e}") from e

    async def list_alerts(self, limit: int = 500) -> List[Alert]:
        """
        최근 경보를 최신순으로 조회합니다.

        Args:
            limit: 최대 개수

        Returns:
            경보 목록

        Raises:
            StoreError: 읽기 실패
        """
        self._check_open()
        try:
            async with aiosqlite.connect(self.path) as db:
                cursor = await db.execute(
                    "SELECT id, zone, type, severity, message, extract, timestamp "
                    "FROM alerts ORDER BY timestamp DESC LIMIT ?",
                    (limit,)
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StoreError(f"list_alerts: {e}") from e

        return [
            Alert(
                id=row[0],
                zone=row[1] or "",
                type=row[2] or "",
                severity=row[3] or "",
                message=row[4] or "",
                extract=row[5] or "",
                timestamp=parse_timestamp(row[6]),
            )
            for row in rows
        ]

    async def import_zones(self, data: bytes) -> int:
        """
        GeoJSON FeatureCollection으로 zones 테이블을 교체합니다.

        features 배열이 없으면 아무것도 하지 않습니다.

        Args:
            data: 원시 GeoJSON 바이트

        Returns:
            가져온 구역 수

        Raises:
            GeoJSONError: 파싱 실패
            StoreError: 쓰기 실패 (트랜잭션 롤백)
        """
        self._check_open()
        fc = parse_feature_collection(data)
        if fc.features is None:
            return 0

        now = format_timestamp(datetime.now(timezone.utc))
        rows = [(f.zone_name(), f.geometry_json(), now) for f in fc.features]
        try:
            async with aiosqlite.connect(self.path) as db:
                try:
                    await db.execute("DELETE FROM zones")
                    await db.executemany(
                        "INSERT INTO zones (name, geom, created_at) VALUES (?, ?, ?)",
                        rows
                    )
                    await db.commit()
                except aiosqlite.Error:
                    await db.rollback()
                    raise
        except aiosqlite.Error as e:
            raise StoreError(f"import_zones: {e}") from e

        log.info(f"구역 {len(rows)}개 가져옴")
        return len(rows)

    async def list_zones(self) -> List[Zone]:
        """
        저장된 구역을 id 순으로 조회합니다.

        Raises:
            StoreError: 읽기 실패
        """
        self._check_open()
        try:
            async with aiosqlite.connect(self.path) as db:
                cursor = await db.execute("SELECT id, name, geom FROM zones ORDER BY id")
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise StoreError(f"list_zones: {e}") from e
        return [Zone(id=row[0], name=row[1] or "", geom=row[2] or "null") for row in rows]

    async def close(self) -> None:
        """저장소를 닫습니다. 이후 호출은 StoreClosedError를 발생시킵니다."""
        if self.closed:
            return
        self.closed = True
        log.info(f"SQLiteAlertStore 닫힘: {self.path}")
