"""
ゼロナレッジ共有用の暗号化ユーティリティ

- クライアント側で鍵を生成し、JSONペイロードを AES-256-GCM で暗号化
- 鍵は共有URLのフラグメントでのみ受け渡し、サーバーには送らない
- 出力形式: base64( nonce(12バイト) || 暗号文+認証タグ )
"""

import base64
import binascii
import json
import logging
import re
from typing import Any

import nacl.utils
from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from .exceptions import DecryptionError, InvalidKeyError

logger = logging.getLogger(__name__)

KEY_BYTES = 16
NONCE_BYTES = 12
TAG_BYTES = 16
AES_KEY_BYTES = 32

# HKDF のコンテキスト（形式を変える場合はバージョンを上げる）
HKDF_INFO = b"runway-share-v1"

_KEY_PATTERN = re.compile(r"^[0-9a-fA-F]{32}$")


def generate_key() -> str:
    """
    共有用の暗号化キーを生成

    Returns:
        str: 16バイトの乱数を16進表記した32文字
    """
    return nacl.utils.random(KEY_BYTES).hex()


def is_valid_key_format(key: Any) -> bool:
    """暗号化キーの形式（32文字の16進、大文字小文字を区別しない）を検証"""
    return isinstance(key, str) and _KEY_PATTERN.match(key) is not None


def _derive_aes_key(key: str) -> bytes:
    """16進キーから AES-256 用の鍵を導出"""
    if not is_valid_key_format(key):
        # キーの値そのものはエラー詳細に含めない
        raise InvalidKeyError(
            "Encryption key must be 32 hexadecimal characters",
            field="key",
        )

    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=AES_KEY_BYTES,
        salt=None,
        info=HKDF_INFO,
    )
    return hkdf.derive(bytes.fromhex(key))


def encrypt(payload: Any, key: str) -> str:
    """
    ペイロードをJSON化して暗号化

    Args:
        payload: JSONシリアライズ可能なデータ
        key: 32文字の16進キー

    Returns:
        str: nonce を先頭に付けた暗号文の Base64 文字列
    """
    aes_key = _derive_aes_key(key)

    plaintext = json.dumps(payload, ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    # 呼び出しごとに新しい nonce
    nonce = nacl.utils.random(NONCE_BYTES)
    ciphertext = AESGCM(aes_key).encrypt(nonce, plaintext, None)

    return base64.b64encode(nonce + ciphertext).decode("ascii")


def decrypt(blob: str, key: str) -> Any:
    """
    暗号化Blobを復号してJSONを復元

    Args:
        blob: encrypt() が返した Base64 文字列
        key: 32文字の16進キー

    Returns:
        復号されたペイロード

    Raises:
        InvalidKeyError: キーの形式が不正
        DecryptionError: 認証タグ不一致（キー違い・改ざん）、Blob破損
    """
    aes_key = _derive_aes_key(key)

    try:
        combined = base64.b64decode(blob, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise DecryptionError("Encrypted data is not valid base64",
                              error_code="malformed_blob") from e

    if len(combined) < NONCE_BYTES + TAG_BYTES:
        raise DecryptionError("Encrypted data is too short",
                              error_code="malformed_blob")

    nonce, ciphertext = combined[:NONCE_BYTES], combined[NONCE_BYTES:]

    try:
        plaintext = AESGCM(aes_key).decrypt(nonce, ciphertext, None)
    except InvalidTag as e:
        logger.warning("Decryption failed: authentication tag mismatch")
        raise DecryptionError("Wrong or corrupted encryption key",
                              error_code="authentication_failed") from e

    try:
        return json.loads(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise DecryptionError("Decrypted payload is not valid JSON",
                              error_code="malformed_payload") from e

