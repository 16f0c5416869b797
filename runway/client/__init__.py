"""
Share API Client
"""

from .share_client import ShareClient
from .urls import build_share_url, parse_share_url

__all__ = [
    "ShareClient",
    "build_share_url",
    "parse_share_url",
]
