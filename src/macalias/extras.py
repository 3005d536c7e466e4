"""Tagged extra fields that follow the fixed alias record header.

Each entry on the wire is ``tag (u16) | length (u16) | payload`` plus one
zero byte when ``length`` is odd.  The list ends with ``{0xFFFF, 0}``.

Payloads are kept verbatim so that a decoded list re-encodes byte for byte.
Known tags additionally get a semantic :attr:`ExtraField.value`; the tag
table is a registry that callers can extend with :func:`register_extra_tag`.
"""

import logging
import struct
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from ._constants import (
    END_TAG,
    TAG_ABSOLUTE_PATH,
    TAG_APPLESHARE_SERVER,
    TAG_APPLESHARE_USER,
    TAG_APPLESHARE_ZONE,
    TAG_DIALUP_INFO,
    TAG_DIRECTORY_IDS,
    TAG_DIRECTORY_NAME,
    TAG_DRIVER_NAME,
    TAG_NETWORK_MOUNT_INFO,
    TAG_POSIX_MOUNT_POINT,
    TAG_POSIX_PATH,
    TAG_RECURSIVE_ALIAS,
    TAG_TARGET_CREATED_HIRES,
    TAG_UNICODE_FILENAME,
    TAG_UNICODE_VOLUME_NAME,
    TAG_USER_HOME_PREFIX_LENGTH,
    TAG_VOLUME_CREATED_HIRES,
)
from ._cursor import ByteReader, ByteWriter
from ._util import (
    decode_text,
    pack_counted_utf16,
    pack_hires_date,
    unpack_counted_utf16,
    unpack_hires_date,
)
from .errors import CapacityExceededError, FormatError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Payload codecs
# ---------------------------------------------------------------------------
def _decode_raw(payload: bytes) -> bytes:
    return payload


def _encode_raw(value: bytes) -> bytes:
    return bytes(value)


def _encode_text(value: str) -> bytes:
    return value.encode("utf-8")


def _decode_directory_ids(payload: bytes) -> tuple[int, ...]:
    if len(payload) % 4:
        raise ValueError(f"Directory ID list length {len(payload)} is not a multiple of 4")
    return struct.unpack(f">{len(payload) // 4}I", payload)


def _encode_directory_ids(value: Iterable[int]) -> bytes:
    ids = list(value)
    return struct.pack(f">{len(ids)}I", *ids)


def _decode_u16(payload: bytes) -> int:
    return struct.unpack(">H", payload)[0]


def _encode_u16(value: int) -> bytes:
    return struct.pack(">H", value)


def _decode_nested_record(payload: bytes):
    from .record import decode

    return decode(payload)


def _encode_nested_record(value) -> bytes:
    from .record import encode

    return encode(value)


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ExtraTag:
    """How one tag number is named and (de)serialized."""

    tag: int
    name: str
    decode: Callable[[bytes], object] = _decode_raw
    encode: Callable[[object], bytes] = _encode_raw


_REGISTRY: dict[int, ExtraTag] = {}
_BY_NAME: dict[str, ExtraTag] = {}


def register_extra_tag(
    tag: int,
    name: str,
    decode: Callable[[bytes], object] | None = None,
    encode: Callable[[object], bytes] | None = None,
) -> ExtraTag:
    """Give *tag* a semantic *name* and optional payload codecs.

    Re-registering a tag replaces the previous entry.  Without codecs the
    value is the raw payload.

    The registry is process-wide: a registration changes ``name`` and
    ``value`` of every :class:`ExtraField` with that tag, including ones
    already decoded.  Registering is not thread-safe; do it at import time,
    before records are decoded concurrently.
    """
    if not 0 <= tag < END_TAG:
        raise ValueError(f"Extra tag must be in 0..0xFFFE, got {tag}")
    old = _REGISTRY.get(tag)
    if old is not None:
        _BY_NAME.pop(old.name, None)
    entry = ExtraTag(tag, name, decode or _decode_raw, encode or _encode_raw)
    _REGISTRY[tag] = entry
    _BY_NAME[name] = entry
    return entry


def extra_tag_name(tag: int) -> str | None:
    """Registered name for *tag*, or ``None``."""
    entry = _REGISTRY.get(tag)
    return entry.name if entry else None


def extra_tag_number(name: str) -> int:
    """Tag number registered under *name*; ``KeyError`` if unknown."""
    return _BY_NAME[name].tag


for _tag, _name, _dec, _enc in (
    (TAG_DIRECTORY_NAME, "directory_name", decode_text, _encode_text),
    (TAG_DIRECTORY_IDS, "directory_ids", _decode_directory_ids, _encode_directory_ids),
    (TAG_ABSOLUTE_PATH, "absolute_path", decode_text, _encode_text),
    (TAG_APPLESHARE_ZONE, "appleshare_zone", decode_text, _encode_text),
    (TAG_APPLESHARE_SERVER, "appleshare_server", decode_text, _encode_text),
    (TAG_APPLESHARE_USER, "appleshare_user", decode_text, _encode_text),
    (TAG_DRIVER_NAME, "driver_name", decode_text, _encode_text),
    (TAG_NETWORK_MOUNT_INFO, "network_mount_info", None, None),
    (TAG_DIALUP_INFO, "dialup_info", None, None),
    (TAG_UNICODE_FILENAME, "unicode_filename", unpack_counted_utf16, pack_counted_utf16),
    (TAG_UNICODE_VOLUME_NAME, "unicode_volume_name", unpack_counted_utf16, pack_counted_utf16),
    (TAG_VOLUME_CREATED_HIRES, "volume_created_hires", unpack_hires_date, pack_hires_date),
    (TAG_TARGET_CREATED_HIRES, "target_created_hires", unpack_hires_date, pack_hires_date),
    (TAG_POSIX_PATH, "posix_path", decode_text, _encode_text),
    (TAG_POSIX_MOUNT_POINT, "posix_mount_point", decode_text, _encode_text),
    (TAG_RECURSIVE_ALIAS, "recursive_alias_of_disk_image", _decode_nested_record, _encode_nested_record),
    (TAG_USER_HOME_PREFIX_LENGTH, "user_home_prefix_length", _decode_u16, _encode_u16),
):
    register_extra_tag(_tag, _name, _dec, _enc)


# ---------------------------------------------------------------------------
# Extra field
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class ExtraField:
    """One tagged entry from the extra list.

    Equality is on ``(tag, payload)``; the semantic value is derived.
    """

    tag: int
    payload: bytes = b""

    @classmethod
    def from_value(cls, tag: int, value: object) -> "ExtraField":
        """Build an entry by encoding *value* with *tag*'s registered codec.

        Unregistered tags take the payload as ``bytes``.
        """
        entry = _REGISTRY.get(tag)
        if entry is None:
            return cls(tag, bytes(value))
        return cls(tag, entry.encode(value))

    @property
    def name(self) -> str | None:
        return extra_tag_name(self.tag)

    @property
    def value(self) -> object:
        """Semantic value, or the raw payload when the tag is unknown or the
        payload does not parse."""
        entry = _REGISTRY.get(self.tag)
        if entry is None:
            return self.payload
        try:
            return entry.decode(self.payload)
        except (ValueError, struct.error, FormatError) as exc:
            logger.warning(
                "Extra tag %d (%s): keeping raw payload: %s", self.tag, entry.name, exc
            )
            return self.payload


# ---------------------------------------------------------------------------
# List codec
# ---------------------------------------------------------------------------
def encoded_size(extras: Iterable[ExtraField]) -> int:
    """Bytes :func:`encode_extras` will produce, end marker included."""
    return sum(4 + len(e.payload) + (len(e.payload) & 1) for e in extras) + 4


def write_extras(writer: ByteWriter, extras: Iterable[ExtraField]) -> None:
    """Write *extras* and the end marker to *writer*."""
    for extra in extras:
        if not 0 <= extra.tag < END_TAG:
            raise FormatError(f"Extra tag must be in 0..0xFFFE, got {extra.tag}")
        length = len(extra.payload)
        if length > 0xFFFF:
            raise CapacityExceededError(
                f"Extra tag {extra.tag} payload is {length} bytes (max 65535)"
            )
        writer.u16(extra.tag)
        writer.u16(length)
        writer.write(extra.payload)
        if length & 1:
            writer.u8(0)  # pad
    writer.u16(END_TAG)
    writer.u16(0)


def encode_extras(extras: Iterable[ExtraField]) -> bytes:
    """Return the wire form of *extras* including the end marker."""
    writer = ByteWriter()
    write_extras(writer, extras)
    return writer.getvalue()


def decode_extras(reader: ByteReader) -> tuple[ExtraField, ...]:
    """Read entries from *reader* up to and including the end marker.

    The reader's window is the record's declared size; running out of it
    before the end marker is a format error, not a truncation.
    """
    extras = []
    while True:
        if reader.remaining() < 4:
            raise FormatError(
                f"Extra list missing end marker (offset {reader.tell()})"
            )
        tag = reader.u16()
        length = reader.u16()
        if tag == END_TAG:
            if length:
                raise FormatError(
                    f"End marker has non-zero length {length} "
                    f"(offset {reader.tell() - 4})"
                )
            break
        padded = length + (length & 1)
        if padded > reader.remaining():
            raise FormatError(
                f"Extra tag {tag} length {length} at offset {reader.tell() - 4} "
                f"overruns the record ({reader.remaining()} bytes left)"
            )
        payload = reader.read(length)
        if length & 1:
            reader.skip(1)
        extras.append(ExtraField(tag, payload))
        if tag not in _REGISTRY:
            logger.debug("Extra tag %d unknown, kept %d raw bytes", tag, length)
    return tuple(extras)
