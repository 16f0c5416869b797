"""
飛行場・フライトモデル
共有ペイロードに含まれるユーザーのコレクション
"""

from dataclasses import dataclass
from typing import Any

FILE_TYPES = ("KML", "GPX")


@dataclass
class Coordinates:
    """緯度経度"""

    lat: float
    lng: float

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Coordinates":
        return cls(lat=float(data["lat"]), lng=float(data["lng"]))


@dataclass
class Airfield:
    """
    飛行場

    type は OpenAIP の飛行場種別コード。
    """

    id: str
    name: str
    icao: str
    type: int
    coordinates: Coordinates
    visited: bool = False
    planned: bool = False
    private: bool = False
    notes: str | None = None
    runway_length: float | None = None  # メートル
    runway_surface: str | None = None
    elevation: float | None = None  # メートル

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "icao": self.icao,
            "type": self.type,
            "coordinates": self.coordinates.to_dict(),
            "visited": self.visited,
            "planned": self.planned,
            "private": self.private,
        }
        # 任意項目は値があるときだけ出力
        optional = {
            "notes": self.notes,
            "runwayLength": self.runway_length,
            "runwaySurface": self.runway_surface,
            "elevation": self.elevation,
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Airfield":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            icao=data.get("icao", ""),
            type=int(data.get("type", 0)),
            coordinates=Coordinates.from_dict(data["coordinates"]),
            visited=bool(data.get("visited", False)),
            planned=bool(data.get("planned", False)),
            private=bool(data.get("private", False)),
            notes=data.get("notes"),
            runway_length=data.get("runwayLength"),
            runway_surface=data.get("runwaySurface"),
            elevation=data.get("elevation"),
        )


@dataclass
class FlightPath:
    """フライト軌跡（アップロードされた KML/GPX から変換済み）"""

    id: str
    name: str
    date: str
    coordinates: list[tuple[float, float]]  # (lat, lng)
    file_type: str
    file_name: str
    departure: str | None = None  # 飛行場ID
    arrival: str | None = None  # 飛行場ID

    def __post_init__(self):
        if self.file_type not in FILE_TYPES:
            raise ValueError(f"Unsupported file type: {self.file_type}")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "date": self.date,
            "coordinates": [[lat, lng] for lat, lng in self.coordinates],
            "fileType": self.file_type,
            "fileName": self.file_name,
        }
        if self.departure is not None:
            data["departure"] = self.departure
        if self.arrival is not None:
            data["arrival"] = self.arrival
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FlightPath":
        return cls(
            id=str(data["id"]),
            name=data["name"],
            date=data["date"],
            coordinates=[(float(p[0]), float(p[1])) for p in data.get("coordinates", [])],
            file_type=data["fileType"],
            file_name=data["fileName"],
            departure=data.get("departure"),
            arrival=data.get("arrival"),
        )
