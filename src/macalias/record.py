"""Alias Record data model and the fixed header codec.

Layout of the 150-byte header (big-endian, dates in Mac seconds)::

    +0   4  application signature     +50  64  target name (Pascal, 63 max)
    +4   2  record size               +114  4  target file id
    +6   2  record version (2)        +118  4  target created
    +8   2  kind (0 file, 1 dir)      +122  4  file type
    +10 28  volume name (Pascal, 27)  +126  4  creator
    +38  4  volume created            +130  2  levels alias -> common ancestor
    +42  2  filesystem signature      +132  2  levels common ancestor -> target
    +44  2  drive type                +134  4  volume attributes
    +46  4  parent directory id       +138  2  volume filesystem id
                                      +140 10  reserved

The extra list follows at +150 and is described in :mod:`macalias.extras`.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import IntEnum

from ._constants import (
    DEFAULT_FS_SIGNATURE,
    END_MARKER_SIZE,
    HEADER_SIZE,
    MAX_RECORD_SIZE,
    NAME_ENCODING,
    OFF_RECORD_SIZE,
    RECORD_VERSION,
    RESERVED_SIZE,
    TARGET_NAME_CAPACITY,
    VOLUME_NAME_CAPACITY,
)
from ._cursor import ByteReader, ByteWriter
from ._util import decode_text, from_mac_timestamp, to_mac_timestamp
from .errors import (
    CapacityExceededError,
    FormatError,
    TruncatedInputError,
    UnsupportedVersionError,
)
from .extras import ExtraField, decode_extras, encoded_size, write_extras

logger = logging.getLogger(__name__)


class TargetKind(IntEnum):
    FILE = 0
    DIRECTORY = 1


class DriveType(IntEnum):
    FIXED = 0
    NETWORK = 1
    FLOPPY_400K = 2
    FLOPPY_800K = 3
    FLOPPY_1440K = 4
    OTHER = 5


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class Volume:
    """Identity of the volume holding the target.

    ``created`` is stored in whole Mac seconds.  A stored 0 means unset, so
    a date of exactly 1904-01-01T00:00:00Z reads back as ``None``.
    """

    name: str
    created: datetime | None = None
    signature: bytes = DEFAULT_FS_SIGNATURE
    drive_type: DriveType = DriveType.FIXED


@dataclass(frozen=True, slots=True)
class Target:
    """Identity of the alias target itself.

    ``created`` follows the same rules as :attr:`Volume.created`: whole
    seconds, and the Mac epoch itself is indistinguishable from unset.
    """

    name: str
    file_id: int = 0
    created: datetime | None = None
    file_type: bytes = b"\x00\x00\x00\x00"
    creator: bytes = b"\x00\x00\x00\x00"
    parent_id: int = 0


@dataclass(frozen=True, slots=True)
class AliasRecord:
    """A complete version 2 alias record."""

    kind: TargetKind
    volume: Volume
    target: Target
    application: bytes = b"\x00\x00\x00\x00"
    version: int = RECORD_VERSION
    levels_from: int = -1
    levels_to: int = -1
    volume_attributes: int = 0
    volume_fs_id: int = 0
    extras: tuple[ExtraField, ...] = ()

    def extra(self, tag: int) -> ExtraField | None:
        """First extra field carrying *tag*, or ``None``."""
        for e in self.extras:
            if e.tag == tag:
                return e
        return None

    def extras_for(self, tag: int) -> list[ExtraField]:
        """All extra fields carrying *tag*, in record order."""
        return [e for e in self.extras if e.tag == tag]


# ---------------------------------------------------------------------------
# Encode
# ---------------------------------------------------------------------------
def encode(record: AliasRecord, *, encoding: str = NAME_ENCODING) -> bytes:
    """Return the wire bytes of *record*.

    ``record size`` is written last, once the extra list length is known.
    """
    if record.version != RECORD_VERSION:
        raise UnsupportedVersionError(
            f"Can only encode record version {RECORD_VERSION}, got {record.version}"
        )
    extras = tuple(record.extras)
    total = HEADER_SIZE + encoded_size(extras)
    if total > MAX_RECORD_SIZE:
        raise CapacityExceededError(
            f"Record is {total} bytes, the size field holds at most {MAX_RECORD_SIZE}"
        )

    w = ByteWriter()
    w.fixed(record.application, 4)
    w.u16(0)  # record size, patched below
    w.u16(record.version)
    w.u16(TargetKind(record.kind))
    w.pascal_string(
        record.volume.name.encode(encoding), VOLUME_NAME_CAPACITY, "Volume name"
    )
    w.u32(to_mac_timestamp(record.volume.created))
    w.fixed(record.volume.signature, 2)
    w.u16(DriveType(record.volume.drive_type))
    w.u32(record.target.parent_id)
    w.pascal_string(
        record.target.name.encode(encoding), TARGET_NAME_CAPACITY, "Target name"
    )
    w.u32(record.target.file_id)
    w.u32(to_mac_timestamp(record.target.created))
    w.fixed(record.target.file_type, 4)
    w.fixed(record.target.creator, 4)
    w.i16(record.levels_from)
    w.i16(record.levels_to)
    w.u32(record.volume_attributes)
    w.u16(record.volume_fs_id)
    w.write(b"\x00" * RESERVED_SIZE)
    write_extras(w, extras)

    w.pack_into(">H", OFF_RECORD_SIZE, w.tell())
    logger.debug("Encoded alias record: %d bytes, %d extras", w.tell(), len(extras))
    return w.getvalue()


# ---------------------------------------------------------------------------
# Decode
# ---------------------------------------------------------------------------
def _decode_name(raw: bytes, encoding: str) -> str:
    if encoding == NAME_ENCODING:
        return decode_text(raw)
    return raw.decode(encoding)


def decode(data: bytes, *, encoding: str = NAME_ENCODING) -> AliasRecord:
    """Parse *data* into an :class:`AliasRecord`.

    Bytes past the declared record size are ignored; bytes between the end
    marker and the declared size are a :class:`FormatError`.
    """
    head = ByteReader(data)
    application = head.read(4)
    record_size = head.u16()
    if len(data) < record_size:
        raise TruncatedInputError(
            f"Record declares {record_size} bytes but only {len(data)} present"
        )
    if record_size < HEADER_SIZE + END_MARKER_SIZE:
        raise FormatError(
            f"Record size {record_size} is smaller than the minimum "
            f"{HEADER_SIZE + END_MARKER_SIZE}"
        )

    r = ByteReader(data, pos=head.tell(), end=record_size)
    version = r.u16()
    if version != RECORD_VERSION:
        raise UnsupportedVersionError(
            f"Unsupported alias record version {version} (expected {RECORD_VERSION})"
        )
    raw_kind = r.u16()
    try:
        kind = TargetKind(raw_kind)
    except ValueError:
        raise FormatError(f"Invalid target kind {raw_kind}") from None

    volume_name = _decode_name(r.pascal_string(VOLUME_NAME_CAPACITY), encoding)
    volume_created = from_mac_timestamp(r.u32())
    signature = r.read(2)
    raw_drive = r.u16()
    try:
        drive_type = DriveType(raw_drive)
    except ValueError:
        raise FormatError(f"Invalid drive type {raw_drive}") from None
    parent_id = r.u32()

    target_name = _decode_name(r.pascal_string(TARGET_NAME_CAPACITY), encoding)
    file_id = r.u32()
    file_created = from_mac_timestamp(r.u32())
    file_type = r.read(4)
    creator = r.read(4)
    levels_from = r.i16()
    levels_to = r.i16()
    volume_attributes = r.u32()
    volume_fs_id = r.u16()
    r.skip(RESERVED_SIZE)

    extras = decode_extras(r)
    if r.remaining():
        raise FormatError(
            f"Record declares {record_size} bytes but its end marker finishes at "
            f"offset {r.tell()} ({r.remaining()} unused bytes)"
        )
    logger.debug("Decoded alias record: %d bytes, %d extras", record_size, len(extras))

    return AliasRecord(
        kind=kind,
        volume=Volume(
            name=volume_name,
            created=volume_created,
            signature=signature,
            drive_type=drive_type,
        ),
        target=Target(
            name=target_name,
            file_id=file_id,
            created=file_created,
            file_type=file_type,
            creator=creator,
            parent_id=parent_id,
        ),
        application=application,
        version=version,
        levels_from=levels_from,
        levels_to=levels_to,
        volume_attributes=volume_attributes,
        volume_fs_id=volume_fs_id,
        extras=extras,
    )
