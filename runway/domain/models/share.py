"""
共有モデル

- ShareRecord: サーバー側で保持する暗号化Blobのレコード
- ShareableData: 暗号化前のペイロード（クライアント側のみ）
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .airfield import Airfield, FlightPath

SHARE_FORMAT_VERSION = "1.0"


@dataclass
class ShareRecord:
    """
    共有レコード

    サーバーは encrypted_data を解釈しない。
    expires_at 以降は、掃除前であっても存在しないものとして扱う。
    """

    identifier: str
    encrypted_data: str  # Base64エンコードされた nonce + 暗号文
    created_at: datetime
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def to_dict(self) -> dict:
        return {
            "identifier": self.identifier,
            "encrypted_data": self.encrypted_data,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ShareRecord":
        return cls(
            identifier=data["identifier"],
            encrypted_data=data["encrypted_data"],
            created_at=datetime.fromisoformat(data["created_at"]),
            expires_at=datetime.fromisoformat(data["expires_at"]),
        )


@dataclass
class ShareMetadata:
    """共有メタデータ"""

    created_at: str
    total_airfields: int
    total_flights: int
    title: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "createdAt": self.created_at,
            "totalAirfields": self.total_airfields,
            "totalFlights": self.total_flights,
        }
        if self.title is not None:
            data["title"] = self.title
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShareMetadata":
        return cls(
            created_at=data["createdAt"],
            total_airfields=int(data["totalAirfields"]),
            total_flights=int(data["totalFlights"]),
            title=data.get("title"),
        )


@dataclass
class ShareableData:
    """
    共有ペイロード（暗号化前）

    ブラウザ側クライアントと同じ camelCase のJSON形状で入出力する。
    平文のまま永続化しないこと。
    """

    airfields: list[Airfield]
    flight_paths: list[FlightPath]
    metadata: ShareMetadata
    version: str = SHARE_FORMAT_VERSION

    @classmethod
    def build(
        cls,
        airfields: list[Airfield],
        flight_paths: list[FlightPath],
        title: str | None = None,
        created_at: datetime | None = None,
    ) -> "ShareableData":
        """飛行場・フライトから共有ペイロードを組み立てる"""
        created = created_at or datetime.now().astimezone()
        return cls(
            airfields=list(airfields),
            flight_paths=list(flight_paths),
            metadata=ShareMetadata(
                created_at=created.isoformat(),
                total_airfields=len(airfields),
                total_flights=len(flight_paths),
                title=title,
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "airfields": [a.to_dict() for a in self.airfields],
            "flightPaths": [f.to_dict() for f in self.flight_paths],
            "metadata": self.metadata.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShareableData":
        return cls(
            version=data.get("version", SHARE_FORMAT_VERSION),
            airfields=[Airfield.from_dict(a) for a in data.get("airfields", [])],
            flight_paths=[FlightPath.from_dict(f) for f in data.get("flightPaths", [])],
            metadata=ShareMetadata.from_dict(data["metadata"]),
        )


@dataclass
class ShareLink:
    """作成された共有リンク"""

    id: str
    key: str
    url: str
    expires_at: datetime | None = None
