"""
Secure keyed store.

Keeps one typed value mirrored in memory and persisted under one key of the
host backend, optionally obfuscated. Reads degrade to the fallback value,
writes never raise, and a recheck resets values whose type has drifted.
"""

from typing import Any, Callable, Generic, Optional, Type, TypeVar, Union

import structlog
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .audit import SecurityEventLogger
from .codec import ObfuscationCodec, deserialize, serialize
from .storage import StorageBackend

logger = structlog.get_logger(__name__)

T = TypeVar("T")

Updater = Callable[[T], T]


def type_tag(value: Any) -> str:
    """Coarse JSON type tag of a value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    return "object"


class SecureKeyedStore(Generic[T]):
    """
    A typed value persisted under one key.

    When value_type is given, stored data is validated and rebuilt with a
    pydantic TypeAdapter; otherwise only the coarse type tag of the stored
    value is compared with that of the fallback. A value of the right tag but
    the wrong shape passes the coarse check.
    """

    def __init__(
        self,
        key: str,
        fallback: T,
        backend: StorageBackend,
        codec: ObfuscationCodec,
        audit: SecurityEventLogger,
        obfuscate: bool = False,
        value_type: Optional[Type[T]] = None,
    ) -> None:
        self.key = key
        self.fallback = fallback
        self.backend = backend
        self.codec = codec
        self.audit = audit
        self.obfuscate = obfuscate
        self._adapter: Optional[TypeAdapter] = TypeAdapter(value_type) if value_type is not None else None
        self._checking = False

        self._value: T = self._initial_read()
        self.recheck()

    @property
    def value(self) -> T:
        return self._value

    def get(self) -> T:
        """Current in-memory value; reflects the latest set immediately."""
        return self._value

    def set(self, value: Union[T, Updater]) -> None:
        """
        Store a value, or the result of an updater applied to the current value.

        The in-memory value is updated before persisting and stays
        authoritative if persisting fails.
        """
        try:
            new_value = value(self._value) if callable(value) else value
        except Exception as e:
            logger.error("Store updater failed", key=self.key, error=str(e), error_type=type(e).__name__)
            self.audit.log_suspicious_input("localStorage_write", f"Failed to write {self.key}")
            self._record("write", "error")
            return

        self._value = new_value

        try:
            self.audit.log_data_access("write", self.key)
            self.backend.write(self.key, self._encode(new_value))
        except Exception as e:
            logger.error(
                "Error writing stored key",
                key=self.key,
                error=str(e),
                error_type=type(e).__name__,
            )
            self.audit.log_suspicious_input("localStorage_write", f"Failed to write {self.key}")
            self._record("write", "error")
            return

        self._record("write", "ok")

    def recheck(self) -> None:
        """
        Re-read the key and reset to the fallback if the stored value drifted.

        Not re-entrant: the reset write issued from here never triggers
        another check.
        """
        if self._checking:
            return

        self._checking = True
        try:
            self._check_stored_type()
        finally:
            self._checking = False

    def _check_stored_type(self) -> None:
        try:
            item = self.backend.read(self.key)
        except Exception as e:
            logger.error("Error reading stored key for validation", key=self.key, error=str(e))
            self.audit.log_suspicious_input("localStorage_read", f"Failed to read {self.key}")
            return

        if not item:
            return

        try:
            parsed = self._decode(item)
        except (TypeError, ValueError) as e:
            logger.error("Data validation failed for stored key", key=self.key, error_type=type(e).__name__)
            self._reset()
            return

        if not self._conforms(parsed):
            logger.warning(
                "Type mismatch for stored key, resetting to fallback",
                key=self.key,
                expected=type_tag(self.fallback),
                found=type_tag(parsed),
            )
            self._reset()

    def _initial_read(self) -> T:
        try:
            item = self.backend.read(self.key)
        except Exception as e:
            logger.error("Error reading stored key", key=self.key, error=str(e))
            self.audit.log_suspicious_input("localStorage_read", f"Failed to read {self.key}")
            self._record("read", "error")
            return self.fallback

        if not item:
            return self.fallback

        self.audit.log_data_access("read", self.key)
        try:
            parsed = self._decode(item)
        except (TypeError, ValueError) as e:
            logger.error("Error parsing stored key", key=self.key, error_type=type(e).__name__)
            self.audit.log_suspicious_input("localStorage_read", f"Failed to read {self.key}")
            self._record("read", "fallback")
            return self.fallback

        if parsed is None:
            self._record("read", "fallback")
            return self.fallback

        if self._adapter is not None:
            try:
                parsed = self._adapter.validate_python(parsed)
            except PydanticValidationError:
                # Left for recheck, which resets and re-persists
                pass

        self._record("read", "ok")
        return parsed

    def _conforms(self, parsed: Any) -> bool:
        if self._adapter is not None:
            try:
                self._adapter.validate_python(parsed)
            except PydanticValidationError:
                return False
            return True
        return type_tag(parsed) == type_tag(self.fallback)

    def _reset(self) -> None:
        self._record("recheck", "reset")
        self.set(self.fallback)

    def _encode(self, value: T) -> str:
        plain = self._adapter.dump_python(value, mode="json") if self._adapter is not None else value
        if self.obfuscate:
            return self.codec.encode(plain)
        return serialize(plain)

    def _decode(self, item: str) -> Any:
        if self.obfuscate:
            return self.codec.decode(item)
        return deserialize(item)

    def _record(self, operation: str, outcome: str) -> None:
        if self.audit.metrics is not None:
            self.audit.metrics.record_storage_operation(operation, outcome)
