"""
State 모듈 단위 테스트

Aggregator의 구역 상태 상향, 이력 크기 제한, 저장소 대체 동작을 테스트합니다.
"""

import pytest
import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

from alerta_climatica.adapters.storage.sqlite_store import SQLiteAlertStore
from alerta_climatica.core.errors import StoreError
from alerta_climatica.core.models import Alert
from alerta_climatica.state.aggregator import Aggregator, SEED_ALERT_ID

BASE = datetime(2025, 1, 1, tzinfo=timezone.utc)


def make_alert(i: int, zone: str = "Zona Norte", severity: str = "baja", seconds: int = None) -> Alert:
    return Alert(
        id=f"id-{i}",
        zone=zone,
        type="informativo",
        severity=severity,
        message=f"mensaje {i}",
        timestamp=BASE + timedelta(seconds=i if seconds is None else seconds),
    )


class TestZoneStatus:
    """구역 상태 테스트"""

    @pytest.mark.asyncio
    async def test_initial_zones_are_green(self):
        """알려진 구역은 verde로 시작"""
        agg = Aggregator()
        assert await agg.zone_status() == {
            "Zona Norte": "verde", "Zona Centro": "verde", "Zona Sur": "verde",
        }

    @pytest.mark.asyncio
    async def test_escalation_scenario(self):
        """alta -> amarillo, crítica -> rojo, 이후 alta는 rojo 유지"""
        agg = Aggregator()

        await agg.accept(make_alert(1, "Zona Norte", "alta"))
        assert (await agg.zone_status())["Zona Norte"] == "amarillo"

        await agg.accept(make_alert(2, "Zona Norte", "crítica"))
        await agg.accept(make_alert(3, "Zona Norte", "alta"))
        await agg.accept(make_alert(4, "Zona Norte", "media"))
        status = await agg.zone_status()
        assert status["Zona Norte"] == "rojo"
        assert status["Zona Sur"] == "verde"

    @pytest.mark.asyncio
    async def test_unknown_zone_appears_on_escalation_only(self):
        """모르는 구역은 상향될 때만 상태 맵에 추가"""
        agg = Aggregator()

        await agg.accept(make_alert(1, "Zona Este", "media"))
        assert "Zona Este" not in await agg.zone_status()

        await agg.accept(make_alert(2, "Zona Este", "crítica"))
        assert (await agg.zone_status())["Zona Este"] == "rojo"

    @pytest.mark.asyncio
    async def test_snapshot_is_a_copy(self):
        """반환된 상태를 수정해도 내부 상태는 그대로"""
        agg = Aggregator()
        snap = await agg.zone_status()
        snap["Zona Norte"] = "rojo"

        assert (await agg.zone_status())["Zona Norte"] == "verde"

    @pytest.mark.asyncio
    async def test_reset_keeps_history(self):
        """reset은 상태만 verde로 되돌리고 이력은 유지"""
        agg = Aggregator()
        await agg.accept(make_alert(1, "Zona Norte", "crítica"))
        await agg.accept(make_alert(2, "Zona Este", "alta"))

        await agg.reset_zones()

        status = await agg.zone_status()
        assert set(status.values()) == {"verde"}
        assert status["Zona Este"] == "verde"
        assert len(await agg.list_alerts()) == 2

    @pytest.mark.asyncio
    async def test_concurrent_accepts(self):
        """동시 수락에서도 최종 상태는 가장 높은 심각도"""
        agg = Aggregator()
        severities = ["baja", "alta", "media", "crítica", "alta"] * 20

        await asyncio.gather(*(
            agg.accept(make_alert(i, "Zona Centro", sev)) for i, sev in enumerate(severities)
        ))

        assert (await agg.zone_status())["Zona Centro"] == "rojo"
        assert len(await agg.recent_alerts()) == len(severities)


class TestHistory:
    """메모리 이력 테스트"""

    @pytest.mark.asyncio
    async def test_most_recent_first(self):
        """최신순 반환"""
        agg = Aggregator()
        for i in (2, 0, 1):
            await agg.accept(make_alert(i))

        assert [a.id for a in await agg.list_alerts()] == ["id-2", "id-1", "id-0"]

    @pytest.mark.asyncio
    async def test_equal_timestamps_latest_accepted_first(self):
        """같은 시각이면 나중에 수락된 경보가 앞"""
        agg = Aggregator()
        for i in range(3):
            await agg.accept(make_alert(i, seconds=0))

        assert [a.id for a in await agg.list_alerts()] == ["id-2", "id-1", "id-0"]

    @pytest.mark.asyncio
    async def test_history_is_bounded(self):
        """이력은 최대 500개, 가장 오래된 것부터 제거"""
        agg = Aggregator()
        for i in range(501):
            await agg.accept(make_alert(i))

        alerts = await agg.list_alerts()
        assert len(alerts) == 500
        assert "id-0" not in {a.id for a in alerts}
        assert alerts[0].id == "id-500"

    @pytest.mark.asyncio
    async def test_custom_history_size(self):
        """history_size 설정"""
        agg = Aggregator(history_size=3)
        for i in range(5):
            await agg.accept(make_alert(i))

        assert [a.id for a in await agg.list_alerts()] == ["id-4", "id-3", "id-2"]

    @pytest.mark.asyncio
    async def test_seed(self):
        """시드 경보는 첫 구역의 정보성 경보"""
        agg = Aggregator(zones=["Zona A", "Zona B"])
        now = datetime(2025, 6, 1, tzinfo=timezone.utc)

        await agg.seed(now)

        alerts = await agg.list_alerts()
        assert len(alerts) == 1
        seed = alerts[0]
        assert seed.id == SEED_ALERT_ID
        assert seed.zone == "Zona A"
        assert (seed.type, seed.severity) == ("informativo", "baja")
        assert seed.message == "Inicio del sistema"
        assert seed.timestamp == now
        assert await agg.zone_status() == {"Zona A": "verde", "Zona B": "verde"}


class TestWithStore:
    """저장소 연동 테스트"""

    @pytest.mark.asyncio
    async def test_accept_persists(self, temp_db_path):
        """수락된 경보는 저장소에 기록되고 저장소에서 조회됨"""
        store = SQLiteAlertStore(temp_db_path)
        await store.init()
        agg = Aggregator(store)

        await agg.accept(make_alert(1, "Zona Norte", "alta"))

        assert len(await store.list_alerts()) == 1
        assert [a.id for a in await agg.list_alerts()] == ["id-1"]
        await agg.close()
        assert store.closed

    @pytest.mark.asyncio
    async def test_store_outlives_memory_history(self, temp_db_path):
        """저장소가 있으면 재시작 이후 경보도 조회됨"""
        store = SQLiteAlertStore(temp_db_path)
        await store.init()
        await store.save_alert(make_alert(99))

        agg = Aggregator(store)
        assert [a.id for a in await agg.list_alerts()] == ["id-99"]

    @pytest.mark.asyncio
    async def test_persist_failure_keeps_memory_state(self):
        """저장 실패는 메모리 상태를 되돌리지 않음"""
        store = AsyncMock()
        store.save_alert.side_effect = StoreError("disk full")
        store.list_alerts.side_effect = StoreError("disk full")
        agg = Aggregator(store)

        await agg.accept(make_alert(1, "Zona Sur", "crítica"))

        assert (await agg.zone_status())["Zona Sur"] == "rojo"
        assert [a.id for a in await agg.list_alerts()] == ["id-1"]

    @pytest.mark.asyncio
    async def test_read_failure_falls_back_to_memory(self):
        """저장소 조회 실패 시 메모리 이력 사용"""
        store = AsyncMock()
        store.list_alerts.side_effect = StoreError("locked")
        agg = Aggregator(store, history_size=10)

        await agg.accept(make_alert(1))
        await agg.accept(make_alert(2))

        assert [a.id for a in await agg.list_alerts()] == ["id-2", "id-1"]
        store.list_alerts.assert_awaited_with(limit=10)

    @pytest.mark.asyncio
    async def test_zone_operations_without_store(self, sample_geojson):
        """저장소가 없으면 구역 가져오기는 아무것도 하지 않음"""
        agg = Aggregator()

        assert await agg.import_zones(sample_geojson) == 0
        assert await agg.list_stored_zones() == []
        await agg.close()

    @pytest.mark.asyncio
    async def test_zone_operations_with_store(self, temp_db_path, sample_geojson):
        """저장소로 구역 가져오기"""
        store = SQLiteAlertStore(temp_db_path)
        await store.init()
        agg = Aggregator(store)

        assert await agg.import_zones(sample_geojson) == 3
        assert [z.name for z in await agg.list_stored_zones()] == ["Zona Norte", "Zona Sur", "7"]
