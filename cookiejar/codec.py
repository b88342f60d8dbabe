"""
Binary serialization of session collections.

The encoded form is compact and self-describing::

    version (1 byte) | item count (varint) | item ...

Each item is a varint-length-prefixed UTF-8 key, followed by a one-byte type
tag and a tag-specific payload. Varints are unsigned LEB128. Nested
collections are written as an item count followed by their items, and decode
as :class:`.SessionCollection`.

:func:`decode` is the left inverse of :func:`encode`: the type of every value
survives the round trip (a ``bool`` never comes back as an ``int``, nor an
``int`` as a ``float``).
"""

from typing import Any, Mapping, Tuple, Callable, Dict
from datetime import datetime, timedelta
import struct
import uuid

from dateutil import tz

from .domain import SessionCollection
from .exceptions import DecodeError, EncodeError

VERSION = 1
MAX_DEPTH = 32
"""Deepest permitted nesting of collections."""

NONE = 0
FALSE = 1
TRUE = 2
INT64 = 3
BIGINT = 4
FLOAT = 5
STRING = 6
BYTES = 7
DATETIME = 8
COLLECTION = 9
TIMEDELTA = 10
UUID = 11

_INT64 = struct.Struct('>q')
_FLOAT = struct.Struct('>d')
_TIMEDELTA = struct.Struct('>qii')
_INT64_MIN = -2 ** 63
_INT64_MAX = 2 ** 63 - 1

_EPOCH = datetime(1970, 1, 1)
_MICROSECOND = timedelta(microseconds=1)
_NAIVE = 0
_AWARE = 1


def encode(collection: Mapping[str, Any]) -> bytes:
    """
    Serialize a session collection.

    Parameters
    ----------
    collection : Mapping
        Keys must be ``str``. Values may be ``None``, ``bool``, ``int``,
        ``float``, ``str``, ``bytes``, :class:`datetime`, :class:`timedelta`,
        :class:`uuid.UUID`, or a nested mapping of the same.

    Returns
    -------
    bytes

    Raises
    ------
    :class:`EncodeError`
        Raised if a key or value cannot be represented.

    """
    out = bytearray([VERSION])
    _write_items(out, collection, 0)
    return bytes(out)


def decode(data: bytes) -> SessionCollection:
    """
    Deserialize a session collection produced by :func:`encode`.

    Empty input decodes to an empty collection.

    Raises
    ------
    :class:`DecodeError`
        Raised if ``data`` is truncated or otherwise malformed.

    """
    if not data:
        return SessionCollection()
    reader = _Reader(data)
    version = reader.byte()
    if version != VERSION:
        raise DecodeError(f'Unsupported format version: {version}')
    items = _read_items(reader, 0)
    if not reader.exhausted:
        raise DecodeError('Unexpected trailing bytes')
    return items


def _write_varint(out: bytearray, value: int) -> None:
    while True:
        low = value & 0x7f
        value >>= 7
        if value:
            out.append(low | 0x80)
        else:
            out.append(low)
            return


def _write_blob(out: bytearray, blob: bytes) -> None:
    _write_varint(out, len(blob))
    out += blob


def _write_datetime(out: bytearray, value: datetime) -> None:
    # Wall-clock time and UTC offset, both in microseconds.
    offset = value.utcoffset()
    wall = value.replace(tzinfo=None)
    out.append(_NAIVE if offset is None else _AWARE)
    out += _INT64.pack((wall - _EPOCH) // _MICROSECOND)
    if offset is not None:
        out += _INT64.pack(offset // _MICROSECOND)


def _write_items(out: bytearray, collection: Mapping[str, Any],
                 depth: int) -> None:
    if depth >= MAX_DEPTH:
        raise EncodeError('Session data is nested too deeply')
    _write_varint(out, len(collection))
    for key, value in collection.items():
        if not isinstance(key, str):
            raise EncodeError(f'Key {key!r} is not a str')
        _write_blob(out, key.encode('utf-8'))
        _write_value(out, value, depth)


def _write_value(out: bytearray, value: Any, depth: int) -> None:
    # bool is a subclass of int, and datetime of date; order matters.
    if value is None:
        out.append(NONE)
    elif value is True:
        out.append(TRUE)
    elif value is False:
        out.append(FALSE)
    elif isinstance(value, int):
        if _INT64_MIN <= value <= _INT64_MAX:
            out.append(INT64)
            out += _INT64.pack(value)
        else:
            out.append(BIGINT)
            size = (value.bit_length() + 8) // 8
            _write_blob(out, value.to_bytes(size, 'big', signed=True))
    elif isinstance(value, float):
        out.append(FLOAT)
        out += _FLOAT.pack(value)
    elif isinstance(value, str):
        out.append(STRING)
        _write_blob(out, value.encode('utf-8'))
    elif isinstance(value, (bytes, bytearray, memoryview)):
        out.append(BYTES)
        _write_blob(out, bytes(value))
    elif isinstance(value, datetime):
        out.append(DATETIME)
        _write_datetime(out, value)
    elif isinstance(value, timedelta):
        out.append(TIMEDELTA)
        out += _TIMEDELTA.pack(value.days, value.seconds, value.microseconds)
    elif isinstance(value, uuid.UUID):
        out.append(UUID)
        out += value.bytes
    elif isinstance(value, Mapping):
        out.append(COLLECTION)
        _write_items(out, value, depth + 1)
    else:
        raise EncodeError(f'Cannot serialize {type(value).__name__}')


class _Reader(object):
    """Cursor over the encoded bytes; every read is bounds-checked."""

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(data)
        self._pos = 0

    @property
    def exhausted(self) -> bool:
        return self._pos >= len(self._data)

    def take(self, size: int) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            raise DecodeError('Truncated data')
        chunk = self._data[self._pos:end].tobytes()
        self._pos = end
        return chunk

    def byte(self) -> int:
        return self.take(1)[0]

    def varint(self) -> int:
        result = 0
        shift = 0
        while True:
            b = self.byte()
            result |= (b & 0x7f) << shift
            if not b & 0x80:
                return result
            shift += 7
            if shift > 63:
                raise DecodeError('Varint too long')

    def blob(self) -> bytes:
        return self.take(self.varint())

    def text(self) -> str:
        try:
            return self.blob().decode('utf-8')
        except UnicodeDecodeError as e:
            raise DecodeError('Invalid UTF-8 text') from e


def _read_items(reader: _Reader, depth: int) -> SessionCollection:
    if depth >= MAX_DEPTH:
        raise DecodeError('Session data is nested too deeply')
    count = reader.varint()
    items: Dict[str, Any] = {}
    for _ in range(count):
        key = reader.text()
        if key in items:
            raise DecodeError(f'Duplicate key {key!r}')
        items[key] = _read_value(reader, depth)
    return SessionCollection(items)


def _read_datetime(reader: _Reader) -> datetime:
    flag = reader.byte()
    if flag not in (_NAIVE, _AWARE):
        raise DecodeError(f'Invalid date/time flag: {flag}')
    wall = _EPOCH + timedelta(microseconds=_INT64.unpack(reader.take(8))[0])
    if flag == _NAIVE:
        return wall
    offset = timedelta(microseconds=_INT64.unpack(reader.take(8))[0])
    if abs(offset) >= timedelta(days=1):
        raise DecodeError(f'UTC offset out of range: {offset}')
    return wall.replace(tzinfo=tz.tzoffset(None, offset) if offset
                        else tz.UTC)


def _read_timedelta(reader: _Reader) -> timedelta:
    days, seconds, microseconds = _TIMEDELTA.unpack(
        reader.take(_TIMEDELTA.size)
    )
    try:
        return timedelta(days=days, seconds=seconds,
                         microseconds=microseconds)
    except OverflowError as e:
        raise DecodeError('Time span out of range') from e


_READERS: Dict[int, Callable[[_Reader], Any]] = {
    NONE: lambda r: None,
    FALSE: lambda r: False,
    TRUE: lambda r: True,
    INT64: lambda r: _INT64.unpack(r.take(8))[0],
    BIGINT: lambda r: int.from_bytes(r.blob(), 'big', signed=True),
    FLOAT: lambda r: _FLOAT.unpack(r.take(8))[0],
    STRING: lambda r: r.text(),
    BYTES: lambda r: r.blob(),
    DATETIME: _read_datetime,
    TIMEDELTA: _read_timedelta,
    UUID: lambda r: uuid.UUID(bytes=r.take(16)),
}


def _read_value(reader: _Reader, depth: int) -> Any:
    tag = reader.byte()
    if tag == COLLECTION:
        return _read_items(reader, depth + 1)
    try:
        read = _READERS[tag]
    except KeyError as e:
        raise DecodeError(f'Unknown type tag: {tag}') from e
    try:
        return read(reader)
    except (struct.error, ValueError, OverflowError) as e:
        raise DecodeError(f'Invalid value for type tag {tag}: {e}') from e
