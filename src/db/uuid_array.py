"""PostgreSQL ``uuid[]`` column support.

Values are exchanged with the database as array literals::

    {}
    {"0b7c1f2e-...","5d1e...-..."}

Decoding is lenient for compatibility with rows written by older clients:
elements may be unquoted and padded with whitespace. Elements are split on
every comma, so a quoted element containing a comma is not supported.
Canonical UUID strings never contain one.
"""

from __future__ import annotations

import logging
import re
import uuid
from typing import Any, Iterable, Protocol, Sequence, Union

from sqlalchemy import Text, cast, type_coerce
from sqlalchemy.engine import Dialect
from sqlalchemy.types import TypeDecorator, TypeEngine, UserDefinedType

logger = logging.getLogger(__name__)

RawArrayValue = Union[bytes, bytearray, memoryview, str]

EMPTY_ARRAY = "{}"

_HEX_UUID = (
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)
# Hyphenated, braced, URN and bare 32-digit forms.
_UUID_TOKEN = re.compile(
    rf"(?i:urn:uuid:)(?P<urn>{_HEX_UUID})"
    rf"|\{{(?P<braced>{_HEX_UUID})\}}"
    rf"|(?P<plain>{_HEX_UUID}|[0-9a-fA-F]{{32}})"
)


class UUIDArrayError(ValueError):
    """Base class for array literal decoding failures."""


class UnsupportedInputType(UUIDArrayError):
    """Raised when the raw value is neither bytes nor text."""

    def __init__(self, value: object) -> None:
        self.value_type = type(value).__name__
        super().__init__(
            f"failed to parse uuid array: unsupported data type {self.value_type}"
        )


class InvalidElement(UUIDArrayError):
    """Raised when an array element is not a valid UUID."""

    def __init__(self, token: str, reason: str) -> None:
        self.token = token
        self.reason = reason
        super().__init__(f"invalid UUID in array: {token!r} ({reason})")


class ArrayColumnCodec(Protocol):
    """Conversion between a stored array literal and a Python list."""

    storage_type: str

    def decode(self, raw: Any) -> list[Any]:
        """Parse a stored value, raising ``UUIDArrayError`` on bad input."""

    def encode(self, values: Sequence[Any]) -> str:
        """Render ``values`` as an array literal."""


def _as_text(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return bytes(raw).decode("utf-8", errors="replace")
    raise UnsupportedInputType(raw)


def _clean_element(candidate: str) -> str:
    token = candidate.strip()
    if len(token) >= 2 and token[0] == '"' and token[-1] == '"':
        token = token[1:-1]
    return token.strip()


def _parse_uuid(token: str) -> uuid.UUID:
    match = _UUID_TOKEN.fullmatch(token)
    if match is None:
        raise InvalidElement(token, "invalid UUID format")
    digits = match.group("urn") or match.group("braced") or match.group("plain")
    return uuid.UUID(digits)


def decode_uuid_array(raw: RawArrayValue) -> list[uuid.UUID]:
    """Parse a PostgreSQL array literal into an ordered list of UUIDs.

    Args:
        raw: The stored value, either bytes or text.

    Raises:
        UnsupportedInputType: ``raw`` is not bytes or text.
        InvalidElement: an element is not a valid UUID. No partial result
            is returned.
    """

    text = _as_text(raw).strip()
    if text.startswith("{"):
        text = text[1:]
    if text.endswith("}"):
        text = text[:-1]

    values: list[uuid.UUID] = []
    for candidate in text.split(","):
        token = _clean_element(candidate)
        if not token:
            continue
        values.append(_parse_uuid(token))
    return values


def encode_uuid_array(values: Iterable[uuid.UUID]) -> str:
    """Render UUIDs as a quoted PostgreSQL array literal."""

    elements = ",".join(f'"{value}"' for value in values)
    if not elements:
        return EMPTY_ARRAY
    return "{" + elements + "}"


class UUIDArrayCodec:
    """``ArrayColumnCodec`` for ``uuid[]`` columns."""

    storage_type = "uuid[]"

    def decode(self, raw: RawArrayValue) -> list[uuid.UUID]:
        return decode_uuid_array(raw)

    def encode(self, values: Sequence[uuid.UUID]) -> str:
        return encode_uuid_array(values)


class PGUUIDArrayLiteral(UserDefinedType):
    """Native ``UUID[]`` column exchanged as array literal text.

    Bound parameters are cast to ``UUID[]`` and selected columns are cast
    back to ``TEXT`` so the driver never converts the array itself.
    """

    cache_ok = True

    def get_col_spec(self, **kw: Any) -> str:
        return "UUID[]"

    def bind_expression(self, bindvalue):
        return cast(bindvalue, self)

    def column_expression(self, colexpr):
        # Keep the column type so results still pass through UUIDArray.
        return type_coerce(cast(colexpr, Text), colexpr.type)


class UUIDArray(TypeDecorator):
    """Column type storing ``list[uuid.UUID]`` as a ``uuid[]`` array."""

    impl = Text
    cache_ok = True

    codec: ArrayColumnCodec = UUIDArrayCodec()
    storage_type = codec.storage_type

    @property
    def python_type(self) -> type:
        return list

    def load_dialect_impl(self, dialect: Dialect) -> TypeEngine[Any]:
        if dialect.name == "postgresql":
            return dialect.type_descriptor(PGUUIDArrayLiteral())
        return dialect.type_descriptor(Text())

    def process_bind_param(
        self, value: Sequence[uuid.UUID] | None, dialect: Dialect
    ) -> str | None:
        if value is None:
            return None
        return self.codec.encode(value)

    def process_result_value(
        self, value: Any, dialect: Dialect
    ) -> list[uuid.UUID] | None:
        if value is None:
            return None
        try:
            return self.codec.decode(value)
        except UUIDArrayError:
            logger.error("Failed to decode %s column value", self.storage_type)
            raise


__all__ = [
    "ArrayColumnCodec",
    "EMPTY_ARRAY",
    "InvalidElement",
    "PGUUIDArrayLiteral",
    "RawArrayValue",
    "UUIDArray",
    "UUIDArrayCodec",
    "UUIDArrayError",
    "UnsupportedInputType",
    "decode_uuid_array",
    "encode_uuid_array",
]
