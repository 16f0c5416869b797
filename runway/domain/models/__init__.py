"""
Domain Models
"""

from .airfield import Airfield, Coordinates, FlightPath
from .share import (
    SHARE_FORMAT_VERSION,
    ShareableData,
    ShareLink,
    ShareMetadata,
    ShareRecord,
)

__all__ = [
    "Airfield",
    "Coordinates",
    "FlightPath",
    "SHARE_FORMAT_VERSION",
    "ShareableData",
    "ShareLink",
    "ShareMetadata",
    "ShareRecord",
]
