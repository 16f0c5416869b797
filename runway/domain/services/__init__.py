"""
Domain Services
"""

from .share import ShareService, generate_identifier, is_valid_identifier
from .sweeper import ShareSweeper

__all__ = [
    "ShareService",
    "ShareSweeper",
    "generate_identifier",
    "is_valid_identifier",
]
