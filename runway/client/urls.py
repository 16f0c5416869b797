"""
共有URLの組み立て・解析

形式: https://<host>/share/{id}#{key}
鍵はフラグメントにのみ置く（フラグメントはHTTPリクエストでサーバーに送られない）。
"""

from urllib.parse import urlsplit

from ..core.encryption import is_valid_key_format
from ..core.exceptions import InvalidKeyError, InvalidShareURLError
from ..domain.services.share import is_valid_identifier

SHARE_PATH_SEGMENT = "share"


def build_share_url(base_url: str, identifier: str, key: str) -> str:
    """共有URLを組み立てる"""
    return f"{base_url.rstrip('/')}/{SHARE_PATH_SEGMENT}/{identifier}#{key}"


def parse_share_url(url: str) -> tuple[str, str]:
    """
    共有URLから (共有ID, 鍵) を取り出す

    Raises:
        InvalidShareURLError: /share/{id} の形でない、またはIDが不正
        InvalidKeyError: フラグメントの鍵が無い、または形式が不正
    """
    parts = urlsplit(url.strip())
    segments = [s for s in parts.path.split("/") if s]

    if len(segments) < 2 or segments[-2] != SHARE_PATH_SEGMENT:
        raise InvalidShareURLError("Not a share link", field="url")

    identifier = segments[-1]
    if not is_valid_identifier(identifier):
        raise InvalidShareURLError("Share link contains an invalid share ID", field="url")

    key = parts.fragment
    if not is_valid_key_format(key):
        raise InvalidKeyError("Share link is missing a valid encryption key", field="key")

    return identifier, key
