"""Interpret decoded alias records into the structure consumers read."""

import posixpath
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from ._constants import (
    DRIVE_TYPES,
    FS_SIGNATURES,
    TAG_DIRECTORY_NAME,
    TAG_POSIX_MOUNT_POINT,
    TAG_POSIX_PATH,
    TARGET_KINDS,
    VOLUME_ATTRIBUTE_NAMES,
)
from ._types import Source
from ._util import format_fourcc
from .extras import ExtraField
from .record import AliasRecord, decode


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------
@dataclass(slots=True)
class TargetInfo:
    type: str = ""
    filename: str = ""
    id: int = 0
    created: datetime | None = None
    file_type: str = ""
    creator: str = ""
    path: str = ""


@dataclass(slots=True)
class VolumeInfo:
    name: str = ""
    created: datetime | None = None
    signature: str = ""
    signature_name: str = ""
    type: str = ""
    attributes: int = 0
    attribute_names: list[str] = field(default_factory=list)


@dataclass(slots=True)
class ParentInfo:
    id: int = 0
    name: str = ""


@dataclass(slots=True)
class AliasInfo:
    """Structured, display-oriented view of an alias record."""

    version: int = 0
    application: str = ""
    target: TargetInfo = field(default_factory=TargetInfo)
    volume: VolumeInfo = field(default_factory=VolumeInfo)
    parent: ParentInfo = field(default_factory=ParentInfo)
    levels_from: int = -1
    levels_to: int = -1
    fs_id: int = 0

    # Extra fields keyed by semantic name, or by tag number when unknown.
    # The first occurrence of a repeated tag wins; ``extras`` keeps them all.
    extra: dict[str | int, object] = field(default_factory=dict)
    extras: list[ExtraField] = field(default_factory=list)


def _attribute_names(val: int) -> list[str]:
    return [name for bit, name in VOLUME_ATTRIBUTE_NAMES.items() if val & (1 << bit)]


def _extra_value(extra: ExtraField) -> object:
    value = extra.value
    if isinstance(value, AliasRecord):
        return interpret(value)
    return value


# ---------------------------------------------------------------------------
# Interpreter
# ---------------------------------------------------------------------------
def interpret(record: AliasRecord) -> AliasInfo:
    """Turn a decoded :class:`AliasRecord` into an :class:`AliasInfo`.

    ``target.type`` and ``target.filename`` come from the fixed header only;
    the extra fields are informational.
    """
    extra: dict[str | int, object] = {}
    for e in record.extras:
        key = e.name if e.name is not None else e.tag
        if key not in extra:
            extra[key] = _extra_value(e)

    posix_path = record.extra(TAG_POSIX_PATH)
    mount_point = record.extra(TAG_POSIX_MOUNT_POINT)
    path = ""
    if posix_path is not None:
        path = posix_path.value
        if mount_point is not None and mount_point.value not in ("", "/"):
            path = posixpath.join(mount_point.value, path.lstrip("/")).rstrip("/")

    dir_name = record.extra(TAG_DIRECTORY_NAME)

    return AliasInfo(
        version=record.version,
        application=format_fourcc(record.application),
        target=TargetInfo(
            type=TARGET_KINDS[record.kind],
            filename=record.target.name,
            id=record.target.file_id,
            created=record.target.created,
            file_type=format_fourcc(record.target.file_type),
            creator=format_fourcc(record.target.creator),
            path=path,
        ),
        volume=VolumeInfo(
            name=record.volume.name,
            created=record.volume.created,
            signature=format_fourcc(record.volume.signature),
            signature_name=FS_SIGNATURES.get(record.volume.signature, "?"),
            type=DRIVE_TYPES[record.volume.drive_type],
            attributes=record.volume_attributes,
            attribute_names=_attribute_names(record.volume_attributes),
        ),
        parent=ParentInfo(
            id=record.target.parent_id,
            name=dir_name.value if dir_name is not None else "",
        ),
        levels_from=record.levels_from,
        levels_to=record.levels_to,
        fs_id=record.volume_fs_id,
        extra=extra,
        extras=list(record.extras),
    )


def parse_alias(source: Source) -> AliasInfo:
    """Decode and interpret an alias record.

    Args:
        source: A file path (str or Path) or the raw record bytes.
    """
    data = Path(source).read_bytes() if isinstance(source, (str, Path)) else source
    return interpret(decode(data))


# ---------------------------------------------------------------------------
# Human-readable formatter
# ---------------------------------------------------------------------------
def _date_str(val: datetime | None) -> str:
    if val is None:
        return "0 (unset)"
    return val.strftime("%Y-%m-%d %H:%M:%S UTC")


def _extra_str(value: object) -> str:
    if isinstance(value, bytes):
        return value.hex() or "(empty)"
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, AliasInfo):
        return f"<alias of {value.target.filename!r} on {value.volume.name!r}>"
    if isinstance(value, tuple):
        return ", ".join(str(v) for v in value)
    return repr(value)


def format_alias(info: AliasInfo) -> str:
    """Return a human-readable string representation of *info*."""
    lines: list[str] = []

    lines.append("--- HEADER ---")
    lines.append(f"  Version:         {info.version}")
    lines.append(f"  Application:     {info.application or '(none)'}")
    lines.append(f"  Levels:          from={info.levels_from} to={info.levels_to}")

    lines.append("")
    lines.append("--- VOLUME ---")
    lines.append(f'  Name:            "{info.volume.name}"')
    lines.append(f"  Created:         {_date_str(info.volume.created)}")
    lines.append(
        f"  Signature:       {info.volume.signature} ({info.volume.signature_name})"
    )
    lines.append(f"  DriveType:       {info.volume.type}")
    lines.append(f"  Attributes:      0x{info.volume.attributes:08X}")
    for name in info.volume.attribute_names:
        lines.append(f"    - {name}")
    lines.append(f"  FilesystemID:    {info.fs_id}")

    lines.append("")
    lines.append("--- TARGET ---")
    lines.append(f"  Type:            {info.target.type}")
    lines.append(f'  Filename:        "{info.target.filename}"')
    lines.append(f"  FileID:          {info.target.id}")
    lines.append(f"  Created:         {_date_str(info.target.created)}")
    if info.target.file_type or info.target.creator:
        lines.append(f"  FileType:        {info.target.file_type or '(none)'}")
        lines.append(f"  Creator:         {info.target.creator or '(none)'}")
    lines.append(f"  ParentID:        {info.parent.id}")
    if info.parent.name:
        lines.append(f'  ParentName:      "{info.parent.name}"')

    if info.extras:
        lines.append("")
        lines.append("--- EXTRA FIELDS ---")
        for e in info.extras:
            label = e.name or "unknown"
            lines.append(f"  Tag {e.tag:>3} ({label}) length={len(e.payload)}")
            lines.append(f"    {_extra_str(_extra_value(e))}")

    lines.append("")
    lines.append("--- RESOLVED ---")
    lines.append(f"  TargetPath:      {info.target.path or '(empty)'}")

    return "\n".join(lines)
