"""Internal helpers for Mac dates, four-char codes, and string encodings."""

import struct
from datetime import UTC, datetime, timedelta

from ._constants import LEGACY_ENCODING, MAC_EPOCH_OFFSET
from ._types import FourCC, Timestamp

MAC_EPOCH = datetime(1904, 1, 1, tzinfo=UTC)


# ---------------------------------------------------------------------------
# Mac timestamps
# ---------------------------------------------------------------------------
def to_mac_timestamp(val: Timestamp) -> int:
    """Convert *val* to seconds since the Mac epoch (1904-01-01 UTC).

    Accepts ``None`` (unset, stored as 0), ``int`` (raw Mac seconds), or a
    timezone-aware ``datetime``.  Datetimes are rounded to whole seconds.
    """
    if val is None:
        return 0
    if isinstance(val, int):
        secs = val
    elif isinstance(val, datetime):
        if val.tzinfo is None:
            raise TypeError("datetime must be timezone-aware (e.g. tzinfo=UTC)")
        secs = round(val.timestamp()) + MAC_EPOCH_OFFSET
    else:
        raise TypeError(f"Expected None, int, or datetime, got {type(val).__name__}")
    if not 0 <= secs <= 0xFFFFFFFF:
        raise ValueError(f"Mac timestamp out of range for 32 bits: {secs}")
    return secs


def from_mac_timestamp(secs: int) -> datetime | None:
    """Convert Mac seconds to an aware UTC datetime; 0 means unset."""
    if secs == 0:
        return None
    return MAC_EPOCH + timedelta(seconds=secs)


def unix_to_datetime(ts: float) -> datetime:
    """Whole-second UTC datetime for a POSIX timestamp."""
    return datetime.fromtimestamp(int(ts), tz=UTC)


def pack_hires_date(val: datetime) -> bytes:
    """Pack *val* as a 64-bit UTCDateTime (u16 high, u32 low, u16 fraction)."""
    if val.tzinfo is None:
        raise TypeError("datetime must be timezone-aware (e.g. tzinfo=UTC)")
    delta = val - MAC_EPOCH
    secs = delta.days * 86400 + delta.seconds
    fraction = round(delta.microseconds * 65536 / 1_000_000)
    if fraction == 65536:
        secs += 1
        fraction = 0
    if not 0 <= secs < 1 << 48:
        raise ValueError(f"Date out of range for UTCDateTime: {val.isoformat()}")
    return struct.pack(">HIH", secs >> 32, secs & 0xFFFFFFFF, fraction)


def unpack_hires_date(data: bytes) -> datetime:
    """Inverse of :func:`pack_hires_date`."""
    high, low, fraction = struct.unpack(">HIH", data)
    secs = (high << 32) | low
    micros = round(fraction * 1_000_000 / 65536)
    return MAC_EPOCH + timedelta(seconds=secs, microseconds=micros)


# ---------------------------------------------------------------------------
# Four-char codes
# ---------------------------------------------------------------------------
def fourcc(val: FourCC | None, size: int = 4) -> bytes:
    """Normalize a type/creator style code to exactly *size* bytes.

    ``None`` and ``""`` give all zeros; strings are encoded as MacRoman.
    """
    if val is None:
        return b"\x00" * size
    data = val.encode(LEGACY_ENCODING) if isinstance(val, str) else bytes(val)
    if len(data) > size:
        raise ValueError(f"Code {val!r} is longer than {size} bytes")
    return data.ljust(size, b"\x00")


def format_fourcc(data: bytes) -> str:
    """Printable form of a code: text if it is printable, hex otherwise."""
    if not data.strip(b"\x00"):
        return ""
    text = data.decode(LEGACY_ENCODING)
    if text.isprintable():
        return text
    return data.hex().upper()


# ---------------------------------------------------------------------------
# Strings
# ---------------------------------------------------------------------------
def decode_text(data: bytes) -> str:
    """Decode UTF-8, falling back to MacRoman for legacy records."""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode(LEGACY_ENCODING)


def pack_counted_utf16(s: str) -> bytes:
    """u16 code-unit count followed by UTF-16BE code units."""
    encoded = s.encode("utf-16-be")
    return struct.pack(">H", len(encoded) // 2) + encoded


def unpack_counted_utf16(data: bytes) -> str:
    """Inverse of :func:`pack_counted_utf16`."""
    count = struct.unpack_from(">H", data, 0)[0]
    raw = data[2 : 2 + count * 2]
    if len(raw) != count * 2:
        raise ValueError(
            f"UTF-16 string declares {count} units but only {len(raw) // 2} present"
        )
    return raw.decode("utf-16-be")
