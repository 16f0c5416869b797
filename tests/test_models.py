"""
共有ペイロード・共有URLのテスト
"""

from datetime import datetime, timezone

import pytest

from runway.client.urls import build_share_url, parse_share_url
from runway.core.encryption import decrypt, encrypt, generate_key
from runway.core.exceptions import InvalidKeyError, InvalidShareURLError
from runway.domain.models.airfield import Airfield, FlightPath
from runway.domain.models.share import SHARE_FORMAT_VERSION, ShareableData

SHARE_ID = "0123456789abcdef0123456789abcdef"
KEY = "00112233445566778899aabbccddeeff"


class TestShareableData:
    """共有ペイロードのテスト"""

    def test_build_sets_metadata(self, airfields, flight_paths):
        created = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

        data = ShareableData.build(airfields, flight_paths, title="Bodensee", created_at=created)

        assert data.version == SHARE_FORMAT_VERSION
        assert data.metadata.total_airfields == 2
        assert data.metadata.total_flights == 1
        assert data.metadata.title == "Bodensee"
        assert data.metadata.created_at == "2024-06-01T12:00:00+00:00"

    def test_wire_shape_is_camel_case(self, airfields, flight_paths):
        """ブラウザ側クライアントと同じキー"""
        wire = ShareableData.build(airfields, flight_paths).to_dict()

        assert set(wire) == {"version", "airfields", "flightPaths", "metadata"}
        assert set(wire["metadata"]) == {"createdAt", "totalAirfields", "totalFlights"}
        assert wire["airfields"][0]["runwayLength"] == 2356
        assert wire["airfields"][0]["coordinates"] == {"lat": 47.6713, "lng": 9.5115}
        assert "notes" not in wire["airfields"][0]
        assert wire["flightPaths"][0]["fileType"] == "GPX"
        assert wire["flightPaths"][0]["coordinates"][0] == [47.6713, 9.5115]

    def test_survives_encryption(self, airfields, flight_paths):
        """暗号化・復号を経ても同じ内容に戻る"""
        original = ShareableData.build(airfields, flight_paths, title="Bodensee")
        key = generate_key()

        restored = ShareableData.from_dict(decrypt(encrypt(original.to_dict(), key), key))

        assert restored == original

    def test_from_browser_payload(self):
        """ブラウザ側で作られたペイロードを読み込める"""
        payload = {
            "version": "1.0",
            "airfields": [{
                "id": "a1", "name": "Konstanz", "icao": "EDTZ", "type": 3,
                "coordinates": {"lat": 47.68, "lng": 9.14},
                "visited": True, "planned": False, "private": False,
            }],
            "flightPaths": [{
                "id": "f1", "name": "Local", "date": "2024-05-01",
                "coordinates": [[47.68, 9.14], [47.7, 9.2]],
                "fileType": "KML", "fileName": "local.kml",
            }],
            "metadata": {"createdAt": "2024-05-01T10:00:00.000Z", "totalAirfields": 1, "totalFlights": 1},
        }

        data = ShareableData.from_dict(payload)

        assert data.airfields[0].icao == "EDTZ"
        assert data.flight_paths[0].coordinates == [(47.68, 9.14), (47.7, 9.2)]
        assert data.metadata.title is None
        assert data.to_dict() == payload

    def test_unsupported_file_type(self):
        with pytest.raises(ValueError):
            FlightPath(id="f", name="n", date="2024-01-01", coordinates=[],
                       file_type="IGC", file_name="x.igc")

    def test_airfield_optional_fields(self):
        airfield = Airfield.from_dict({
            "id": 7, "name": "Strip", "coordinates": {"lat": "48.1", "lng": "9.0"},
        })

        assert airfield.id == "7"
        assert airfield.icao == ""
        assert airfield.coordinates.lat == 48.1
        assert airfield.visited is False


class TestShareURL:
    """共有URLのテスト"""

    def test_build(self):
        url = build_share_url("https://runway.example/", SHARE_ID, KEY)

        assert url == f"https://runway.example/share/{SHARE_ID}#{KEY}"

    def test_parse(self):
        url = f"https://runway.example/share/{SHARE_ID}#{KEY}"

        assert parse_share_url(url) == (SHARE_ID, KEY)

    def test_parse_with_path_prefix(self):
        url = f"https://example.org/runway/share/{SHARE_ID}#{KEY}"

        assert parse_share_url(url) == (SHARE_ID, KEY)

    @pytest.mark.parametrize("url", [
        f"https://runway.example/{SHARE_ID}#{KEY}",
        f"https://runway.example/share/#{KEY}",
        f"https://runway.example/share/not-an-id#{KEY}",
        f"https://runway.example/shared/{SHARE_ID}#{KEY}",
    ])
    def test_parse_invalid_link(self, url):
        with pytest.raises(InvalidShareURLError):
            parse_share_url(url)

    @pytest.mark.parametrize("url", [
        f"https://runway.example/share/{SHARE_ID}",
        f"https://runway.example/share/{SHARE_ID}#",
        f"https://runway.example/share/{SHARE_ID}#abc",
    ])
    def test_parse_missing_key(self, url):
        with pytest.raises(InvalidKeyError):
            parse_share_url(url)
