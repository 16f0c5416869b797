"""
共通フィクスチャ
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from runway.adapters.clock import ManualClock
from runway.adapters.storage.memory import InMemoryShareStorage
from runway.api.dependencies import reset_dependencies
from runway.core.config import RunwaySettings, SecuritySettings, ShareSettings, get_settings
from runway.domain.models.airfield import Airfield, Coordinates, FlightPath
from runway.domain.services.share import ShareService


@pytest.fixture(autouse=True)
def clean_state():
    """テスト前後にグローバル状態をクリア"""
    reset_dependencies()
    get_settings.cache_clear()
    yield
    reset_dependencies()
    get_settings.cache_clear()


@pytest.fixture
def clock():
    """手動で進める時計"""
    return ManualClock(datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage():
    """インメモリストレージ"""
    return InMemoryShareStorage()


@pytest.fixture
def service(storage, clock):
    """共有サービス"""
    return ShareService(storage=storage, clock=clock)


@pytest.fixture
def test_settings():
    """レート制限なしの設定"""
    return RunwaySettings(
        share=ShareSettings(),
        security=SecuritySettings(rate_limit_enabled=False),
    )


@pytest.fixture
def api_app(service, test_settings):
    """テスト用アプリケーション（共有サービスを注入）"""
    from runway.api.main import create_app

    return create_app(settings=test_settings, share_service=service)


@pytest.fixture
def client(api_app):
    """テストクライアント"""
    return TestClient(api_app)


@pytest.fixture
def airfields():
    """テスト用の飛行場"""
    return [
        Airfield(
            id="edny",
            name="Friedrichshafen",
            icao="EDNY",
            type=2,
            coordinates=Coordinates(lat=47.6713, lng=9.5115),
            visited=True,
            runway_length=2356,
            runway_surface="asphalt",
            elevation=417,
        ),
        Airfield(
            id="edtm",
            name="Mengen-Hohentengen",
            icao="EDTM",
            type=3,
            coordinates=Coordinates(lat=48.0539, lng=9.3728),
            planned=True,
            notes="PPR am Wochenende",
        ),
    ]


@pytest.fixture
def flight_paths():
    """テスト用のフライト"""
    return [
        FlightPath(
            id="f1",
            name="EDNY - EDTM",
            date="2024-05-18",
            coordinates=[(47.6713, 9.5115), (47.85, 9.44), (48.0539, 9.3728)],
            file_type="GPX",
            file_name="2024-05-18.gpx",
            departure="edny",
            arrival="edtm",
        ),
    ]
