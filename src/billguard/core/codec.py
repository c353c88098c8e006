"""
Reversible obfuscation codec for stored values.

Canonical JSON, XOR with a shared key reused cyclically, then base64. This
discourages casual inspection of stored data; it is not encryption. Changing
the key makes previously obfuscated entries unreadable.
"""

import base64
import binascii
import json
from typing import Any, Optional

import structlog

from .audit import SecurityEventLogger
from .exceptions import CodecError

logger = structlog.get_logger(__name__)


def serialize(value: Any) -> str:
    """Canonical plain serialization."""
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def deserialize(text: str) -> Any:
    return json.loads(text)


def xor_bytes(data: bytes, key: bytes) -> bytes:
    """XOR data with key, the key repeating over the length of data."""
    key_length = len(key)
    return bytes(b ^ key[i % key_length] for i, b in enumerate(data))


class ObfuscationCodec:
    """
    Encode/decode values for the keyed store.

    encode never raises: it falls back to plain serialization so a write never
    blocks on a codec problem. decode falls back to reading the input as plain
    serialized data and returns None if that fails too.
    """

    def __init__(self, key: str, audit: Optional[SecurityEventLogger] = None) -> None:
        if not key:
            raise ValueError("Codec key must not be empty")
        self._key = key.encode("utf-8")
        self.audit = audit

    def encode(self, value: Any) -> str:
        try:
            mixed = xor_bytes(serialize(value).encode("utf-8"), self._key)
            return base64.b64encode(mixed).decode("ascii")
        except Exception as e:
            logger.warning(
                "Obfuscation failed, storing plain data",
                error=str(e),
                error_type=type(e).__name__,
            )
            self._report("encryption", "Failed to encrypt data", "encode")
            try:
                return serialize(value)
            except Exception:
                return serialize(None)

    def decode(self, text: str) -> Any:
        try:
            return self._decode_obfuscated(text)
        except CodecError as e:
            logger.debug("Obfuscated decode failed, trying plain data", error=str(e))

        try:
            value = deserialize(text)
        except (TypeError, ValueError) as e:
            logger.warning(
                "Stored data could not be decoded",
                error_type=type(e).__name__,
                length=len(text) if isinstance(text, str) else 0,
            )
            self._report("decryption", "Failed to decrypt data", "decode")
            return None

        if self.audit is not None and self.audit.metrics is not None:
            self.audit.metrics.record_codec_fallback("decode")
        return value

    def _decode_obfuscated(self, text: str) -> Any:
        try:
            mixed = base64.b64decode(text, validate=True)
            return deserialize(xor_bytes(mixed, self._key).decode("utf-8"))
        except (binascii.Error, UnicodeDecodeError, TypeError, ValueError) as e:
            raise CodecError("Invalid obfuscated payload", details={"error_type": type(e).__name__}) from e

    def _report(self, field: str, message: str, direction: str) -> None:
        if self.audit is None:
            return
        self.audit.log_suspicious_input(field, message)
        if self.audit.metrics is not None:
            self.audit.metrics.record_codec_fallback(direction)
