"""Tests for :mod:`cookiejar.codec`."""

from unittest import TestCase
from datetime import datetime, timedelta, timezone
from typing import Any, Mapping
import uuid

from hypothesis import given, settings
from hypothesis import strategies as st
from pytz import UTC

from .. import codec
from ..domain import SessionCollection
from ..exceptions import DecodeError, EncodeError

offsets = st.integers(min_value=-86399, max_value=86399).map(
    lambda seconds: timezone(timedelta(seconds=seconds))
)
scalars = st.one_of(
    st.none(),
    st.booleans(),
    st.integers(),
    st.floats(allow_nan=False),
    st.text(),
    st.binary(),
    st.datetimes(),
    st.datetimes(timezones=st.just(UTC)),
    st.datetimes(timezones=offsets),
    st.timedeltas(),
    st.uuids(),
)
values = st.recursive(
    scalars,
    lambda children: st.dictionaries(st.text(), children, max_size=4),
    max_leaves=20
)
collections = st.dictionaries(st.text(), values, max_size=8)


def assert_identical(test: TestCase, expected: Any, actual: Any) -> None:
    """Assert equal values of the same type, recursing into mappings."""
    if isinstance(expected, Mapping):
        test.assertIsInstance(actual, SessionCollection)
        test.assertEqual(list(expected), list(actual), "Key order survives")
        for key in expected:
            assert_identical(test, expected[key], actual[key])
        return
    test.assertIs(type(actual), type(expected))
    test.assertEqual(actual, expected)


class TestRoundTrip(TestCase):
    """:func:`codec.decode` is the left inverse of :func:`codec.encode`."""

    def test_all_value_types(self):
        """Each supported type comes back as the same type."""
        items = {
            'none': None,
            'true': True,
            'false': False,
            'int': 42,
            'negative': -7,
            'big': 2 ** 100,
            'negative_big': -(2 ** 80),
            'float': 1.5,
            'whole_float': 3.0,
            'text': 'héllo wörld',
            'empty_text': '',
            'bytes': b'\x00\xff\x10',
            'naive': datetime(2018, 3, 12, 10, 30, 15, 123),
            'aware': datetime(2018, 3, 12, 10, 30, tzinfo=UTC),
            'span': timedelta(days=-1, seconds=5, microseconds=3),
            'guid': uuid.UUID('12345678-1234-5678-1234-567812345678'),
            'nested': {'inner': {'deeper': 1}, 'flag': False},
        }
        assert_identical(self, items, codec.decode(codec.encode(items)))

    def test_timedelta(self):
        """Time spans keep every component, including negative days."""
        for value in [timedelta(0), timedelta(minutes=5),
                      timedelta(days=-3, microseconds=1), timedelta.max,
                      timedelta.min]:
            decoded = codec.decode(codec.encode({'span': value}))
            assert_identical(self, value, decoded['span'])

    def test_offset_with_seconds(self):
        """UTC offsets that are not whole minutes survive."""
        zone = timezone(timedelta(hours=5, minutes=30, seconds=15))
        value = datetime(2020, 1, 1, 12, 0, 0, 500, tzinfo=zone)
        decoded = codec.decode(codec.encode({'when': value}))['when']
        self.assertEqual(decoded, value)
        self.assertEqual(decoded.utcoffset(), zone.utcoffset(None))
        self.assertEqual(decoded.replace(tzinfo=None),
                         value.replace(tzinfo=None))

    def test_naive_stays_naive(self):
        """Naive date/times do not gain a time zone."""
        value = datetime(1, 1, 1)
        decoded = codec.decode(codec.encode({'when': value}))['when']
        self.assertIsNone(decoded.tzinfo)
        self.assertEqual(decoded, value)

    def test_int64_boundaries(self):
        """Integers either side of the 64-bit range keep their value."""
        for value in [2 ** 63 - 1, 2 ** 63, -(2 ** 63), -(2 ** 63) - 1]:
            decoded = codec.decode(codec.encode({'n': value}))
            self.assertEqual(decoded['n'], value)

    def test_decoded_collection_is_clean(self):
        """A freshly decoded collection has not been modified."""
        decoded = codec.decode(codec.encode({'foo': 'bar'}))
        self.assertFalse(decoded.dirty)

    @given(collections)
    @settings(max_examples=200)
    def test_round_trip(self, items):
        """Any representable collection survives encoding."""
        assert_identical(self, items, codec.decode(codec.encode(items)))


class TestDecode(TestCase):
    """Malformed input raises :class:`.DecodeError`."""

    def test_empty_input(self):
        """Empty input is an empty collection, not an error."""
        decoded = codec.decode(b'')
        self.assertIsInstance(decoded, SessionCollection)
        self.assertEqual(len(decoded), 0)

    def test_empty_collection(self):
        """An encoded empty collection decodes as empty."""
        self.assertEqual(codec.decode(codec.encode({})), {})

    def test_truncated(self):
        """Every strict prefix of a valid encoding is rejected."""
        data = codec.encode({'foo': 'bar', 'n': 12345, 'nested': {'x': 1.0}})
        for end in range(1, len(data)):
            with self.assertRaises(DecodeError, msg=f'prefix of {end}'):
                codec.decode(data[:end])

    def test_unknown_tag(self):
        """A type tag out of range is rejected."""
        data = bytearray(codec.encode({'k': None}))
        data[-1] = 200
        with self.assertRaises(DecodeError):
            codec.decode(bytes(data))

    def test_unknown_version(self):
        """Data written by another format version is rejected."""
        data = bytearray(codec.encode({'k': None}))
        data[0] = codec.VERSION + 1
        with self.assertRaises(DecodeError):
            codec.decode(bytes(data))

    def test_trailing_bytes(self):
        """Extra bytes after the collection are rejected."""
        with self.assertRaises(DecodeError):
            codec.decode(codec.encode({'k': 1}) + b'\x00')

    def test_duplicate_keys(self):
        """A key may appear only once."""
        data = bytes([codec.VERSION, 2,
                      1, ord('k'), codec.NONE,
                      1, ord('k'), codec.TRUE])
        with self.assertRaises(DecodeError):
            codec.decode(data)

    def test_invalid_utf8(self):
        """Keys must be valid UTF-8."""
        data = bytes([codec.VERSION, 1, 1, 0xff, codec.NONE])
        with self.assertRaises(DecodeError):
            codec.decode(data)

    def test_invalid_datetime(self):
        """A date/time with an unknown flag or bad offset is rejected."""
        header = bytes([codec.VERSION, 1, 1, ord('d'), codec.DATETIME])
        with self.assertRaises(DecodeError):
            codec.decode(header + bytes([7]) + bytes(8))
        day = 24 * 60 * 60 * 10 ** 6
        with self.assertRaises(DecodeError):
            codec.decode(header + bytes([1]) + bytes(8)
                         + day.to_bytes(8, 'big', signed=True))

    def test_datetime_out_of_range(self):
        """A date/time beyond the supported years is rejected."""
        data = bytes([codec.VERSION, 1, 1, ord('d'), codec.DATETIME, 0]) \
            + (2 ** 62).to_bytes(8, 'big', signed=True)
        with self.assertRaises(DecodeError):
            codec.decode(data)

    def test_truncated_timedelta(self):
        """A time span shorter than its fixed size is rejected."""
        data = bytes([codec.VERSION, 1, 1, ord('t'), codec.TIMEDELTA]) \
            + bytes(12)
        with self.assertRaises(DecodeError):
            codec.decode(data)

    def test_nested_too_deeply(self):
        """Nesting beyond the limit is rejected."""
        data = bytes([codec.VERSION]) \
            + bytes([1, 1, ord('k'), codec.COLLECTION]) * codec.MAX_DEPTH \
            + bytes([0])
        with self.assertRaises(DecodeError):
            codec.decode(data)

    @given(st.binary())
    def test_garbage_never_escapes(self, data):
        """Arbitrary bytes either decode or raise :class:`.DecodeError`."""
        try:
            decoded = codec.decode(data)
        except DecodeError:
            return
        self.assertIsInstance(decoded, SessionCollection)


class TestEncode(TestCase):
    """Values that cannot be represented raise :class:`.EncodeError`."""

    def test_unsupported_type(self):
        """Arbitrary objects are not serialized."""
        with self.assertRaises(EncodeError):
            codec.encode({'obj': object()})
        with self.assertRaises(EncodeError):
            codec.encode({'items': [1, 2, 3]})

    def test_non_string_key(self):
        """Nested mappings must also have str keys."""
        with self.assertRaises(EncodeError):
            codec.encode({'nested': {1: 'one'}})

    def test_cycle(self):
        """A collection that contains itself is refused."""
        items: dict = {}
        items['self'] = items
        with self.assertRaises(EncodeError):
            codec.encode(items)

    def test_bytearray(self):
        """Mutable byte sequences are stored as bytes."""
        decoded = codec.decode(codec.encode({'b': bytearray(b'abc')}))
        self.assertEqual(decoded['b'], b'abc')
