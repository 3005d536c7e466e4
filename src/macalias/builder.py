"""Build alias records for live filesystem targets."""

import dataclasses
import logging
import os
import posixpath
import stat
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from ._constants import (
    DEFAULT_FS_SIGNATURE,
    DEFAULT_VOLUME_ATTRIBUTES,
    ROOT_PARENT_ID,
    ROOT_VOLUME_NAME,
    TAG_ABSOLUTE_PATH,
    TAG_DIRECTORY_IDS,
    TAG_DIRECTORY_NAME,
    TAG_POSIX_MOUNT_POINT,
    TAG_POSIX_PATH,
    TAG_UNICODE_FILENAME,
    TAG_UNICODE_VOLUME_NAME,
)
from ._types import FourCC, Timestamp
from ._util import fourcc, from_mac_timestamp, to_mac_timestamp, unix_to_datetime
from .errors import FilesystemQueryError, UnsupportedTargetError
from .extras import ExtraField
from .record import AliasRecord, DriveType, Target, TargetKind, Volume, encode

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Target descriptor
# ---------------------------------------------------------------------------
@dataclass(slots=True)
class TargetDescriptor:
    """Everything the assembler needs to know about a resolved target.

    ``directory_ids`` runs from the target's parent up towards the volume
    root, root excluded, which is the order the record stores them in.
    """

    path: str
    kind: TargetKind
    volume_name: str
    volume_path: str = "/"
    volume_created: Timestamp = None
    file_id: int = 0
    parent_id: int = 0
    parent_name: str = ""
    created: Timestamp = None
    directory_ids: list[int] = field(default_factory=list)
    volume_signature: FourCC = DEFAULT_FS_SIGNATURE
    drive_type: DriveType = DriveType.FIXED
    volume_attributes: int = DEFAULT_VOLUME_ATTRIBUTES
    file_type: FourCC | None = None
    creator: FourCC | None = None


# ---------------------------------------------------------------------------
# Filesystem queries
# ---------------------------------------------------------------------------
def _stat(path: str) -> os.stat_result:
    try:
        return os.stat(path)
    except OSError as exc:
        raise FilesystemQueryError(
            exc.errno, exc.strerror or str(exc), exc.filename or path
        ) from exc


def _birth_time(st: os.stat_result) -> datetime:
    # st_birthtime exists on macOS and the BSDs; elsewhere ctime is the
    # closest thing we get.
    return unix_to_datetime(getattr(st, "st_birthtime", st.st_ctime))


def _file_id(st: os.stat_result) -> int:
    return st.st_ino & 0xFFFFFFFF


def find_mount_point(path: str) -> str:
    """Walk up from *path* until the device number changes."""
    path = os.path.abspath(path)
    dev = _stat(path).st_dev
    while True:
        parent = os.path.dirname(path)
        if parent == path:
            return path
        if _stat(parent).st_dev != dev:
            return path
        path = parent


def _alias_mount_point(alias_path: str) -> str:
    """Mount point of the directory that will hold the alias.

    The alias usually does not exist yet, so the lookup starts from its
    nearest existing ancestor.
    """
    parent = os.path.dirname(os.path.abspath(alias_path))
    while not os.path.exists(parent):
        parent = os.path.dirname(parent)
    return find_mount_point(parent)


def _volume_name(mount_point: str) -> str:
    name = os.path.basename(mount_point.rstrip("/"))
    return name or ROOT_VOLUME_NAME


def stat_target(path: str | Path) -> TargetDescriptor:
    """Query the filesystem for *path* and describe it for the assembler.

    Raises:
        FilesystemQueryError: the target or one of its ancestors cannot be
            stat'ed.
        UnsupportedTargetError: the target is not a regular file or directory.
    """
    abspath = os.path.abspath(os.fspath(path))
    st = _stat(abspath)
    if stat.S_ISDIR(st.st_mode):
        kind = TargetKind.DIRECTORY
    elif stat.S_ISREG(st.st_mode):
        kind = TargetKind.FILE
    else:
        raise UnsupportedTargetError(
            f"{abspath} is neither a regular file nor a directory"
        )

    volume_path = find_mount_point(abspath)
    volume_st = _stat(volume_path)
    logger.debug("Target %s lives on volume mounted at %s", abspath, volume_path)

    if abspath == volume_path:
        parent_id = ROOT_PARENT_ID
        parent_name = ""
        directory_ids = []
    else:
        parent = os.path.dirname(abspath)
        parent_id = _file_id(_stat(parent))
        parent_name = os.path.basename(parent) if parent != volume_path else ""
        directory_ids = []
        while parent != volume_path:
            directory_ids.append(_file_id(_stat(parent)))
            parent = os.path.dirname(parent)

    return TargetDescriptor(
        path=abspath,
        kind=kind,
        volume_name=_volume_name(volume_path),
        volume_path=volume_path,
        volume_created=_birth_time(volume_st),
        file_id=_file_id(st),
        parent_id=parent_id,
        parent_name=parent_name,
        created=_birth_time(st),
        directory_ids=directory_ids,
        drive_type=DriveType.FIXED if volume_path == "/" else DriveType.OTHER,
    )


# ---------------------------------------------------------------------------
# Assembly helpers
# ---------------------------------------------------------------------------
def _split(path: str) -> list[str]:
    return [p for p in path.split("/") if p]


def _relative_to_volume(path: str, volume_path: str) -> str:
    """POSIX path of *path* below *volume_path*, with a leading slash."""
    if volume_path == "/":
        return path
    rel = posixpath.relpath(path, volume_path)
    return "/" if rel == "." else "/" + rel


def _hfs_path(volume_name: str, rel_path: str) -> str:
    """Colon-separated HFS path.  Colons inside names become slashes."""
    parts = [p.replace(":", "/") for p in _split(rel_path)]
    return ":".join([volume_name, *parts])


def _levels(alias_path: str | None, target_path: str, volume_path: str) -> tuple[int, int]:
    """Depths from alias and target down from their nearest shared directory.

    ``(-1, -1)`` when there is no alias location or it is on another volume.
    The volume test is textual; on the boot volume (``/``) every absolute
    path passes, so :func:`create` checks the alias's device first.
    """
    if alias_path is None:
        return -1, -1
    alias_path = os.path.abspath(alias_path)
    if volume_path != "/" and not (
        alias_path == volume_path or alias_path.startswith(volume_path.rstrip("/") + "/")
    ):
        return -1, -1
    alias_parts = _split(alias_path)
    target_parts = _split(target_path)
    common = 0
    # The last component is the item itself, never a shared directory.
    for a, t in zip(alias_parts[:-1], target_parts[:-1]):
        if a != t:
            break
        common += 1
    return len(alias_parts) - common, len(target_parts) - common


# ---------------------------------------------------------------------------
# Assembler
# ---------------------------------------------------------------------------
def build_alias_record(
    descriptor: TargetDescriptor,
    *,
    alias_path: str | Path | None = None,
    application: FourCC | None = None,
) -> AliasRecord:
    """Assemble an :class:`AliasRecord` for *descriptor*.

    Args:
        descriptor:  Resolved target (see :func:`stat_target`).
        alias_path:  Where the alias itself will live; used for the
                     common-ancestor depth fields.  Only compared with
                     ``descriptor.volume_path`` as a path prefix, so an
                     alias on another mount below ``/`` is not detected.
        application: Four-char creator signature for the record (default
                     all zeros).
    """
    kind = TargetKind(descriptor.kind)
    name = posixpath.basename(descriptor.path.rstrip("/")) or descriptor.volume_name
    rel_path = _relative_to_volume(descriptor.path, descriptor.volume_path)
    levels_from, levels_to = _levels(
        os.fspath(alias_path) if alias_path is not None else None,
        descriptor.path,
        descriptor.volume_path,
    )

    extras = []
    if descriptor.parent_name:
        extras.append(ExtraField.from_value(TAG_DIRECTORY_NAME, descriptor.parent_name))
    if descriptor.directory_ids:
        extras.append(ExtraField.from_value(TAG_DIRECTORY_IDS, descriptor.directory_ids))
    extras.append(
        ExtraField.from_value(
            TAG_ABSOLUTE_PATH, _hfs_path(descriptor.volume_name, rel_path)
        )
    )
    extras.append(ExtraField.from_value(TAG_UNICODE_FILENAME, name))
    extras.append(ExtraField.from_value(TAG_UNICODE_VOLUME_NAME, descriptor.volume_name))
    extras.append(ExtraField.from_value(TAG_POSIX_PATH, rel_path))
    extras.append(ExtraField.from_value(TAG_POSIX_MOUNT_POINT, descriptor.volume_path))

    # Round-trip dates through Mac seconds so the record holds exactly what
    # will be encoded.
    volume = Volume(
        name=descriptor.volume_name,
        created=from_mac_timestamp(to_mac_timestamp(descriptor.volume_created)),
        signature=fourcc(descriptor.volume_signature, 2),
        drive_type=DriveType(descriptor.drive_type),
    )
    target = Target(
        name=name,
        file_id=descriptor.file_id,
        created=from_mac_timestamp(to_mac_timestamp(descriptor.created)),
        file_type=fourcc(descriptor.file_type if kind == TargetKind.FILE else None),
        creator=fourcc(descriptor.creator if kind == TargetKind.FILE else None),
        parent_id=descriptor.parent_id,
    )
    return AliasRecord(
        kind=kind,
        volume=volume,
        target=target,
        application=fourcc(application),
        levels_from=levels_from,
        levels_to=levels_to,
        volume_attributes=descriptor.volume_attributes,
        extras=tuple(extras),
    )


def create(
    target: str | Path | TargetDescriptor,
    *,
    alias_path: str | Path | None = None,
    application: FourCC | None = None,
    **overrides: Any,
) -> bytes:
    """Return the raw bytes of an alias record pointing at *target*.

    Args:
        target:      A filesystem path (resolved with :func:`stat_target`) or
                     an already resolved :class:`TargetDescriptor`.
        alias_path:  Location of the alias, for the depth fields.  When
                     *target* is a path and the alias lives on another
                     mount, the depths are left at ``-1``.
        application: Four-char application signature.
        **overrides: :class:`TargetDescriptor` fields to replace after the
                     lookup (e.g. ``volume_name``, ``file_type``).
    """
    if isinstance(target, TargetDescriptor):
        descriptor = target
    else:
        descriptor = stat_target(target)
        if alias_path is not None:
            alias_mount = _alias_mount_point(os.fspath(alias_path))
            if alias_mount != descriptor.volume_path:
                logger.debug(
                    "Alias volume %s differs from target volume %s, depths unset",
                    alias_mount,
                    descriptor.volume_path,
                )
                alias_path = None
    if overrides:
        descriptor = dataclasses.replace(descriptor, **overrides)
    record = build_alias_record(
        descriptor, alias_path=alias_path, application=application
    )
    return encode(record)


def write_alias(path: str | Path, target: str | Path | TargetDescriptor, **kwargs: Any) -> int:
    """Build an alias record for *target* and write it to *path*.

    Accepts the same keyword arguments as :func:`create`.
    Returns the number of bytes written.
    """
    kwargs.setdefault("alias_path", path)
    data = create(target, **kwargs)
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(data)
    return len(data)
