"""macalias -- create and parse classic Mac OS alias records."""

__version__ = "0.1.0"

from .builder import (
    TargetDescriptor,
    build_alias_record,
    create,
    stat_target,
    write_alias,
)
from .errors import (
    AliasError,
    CapacityExceededError,
    FilesystemQueryError,
    FormatError,
    TruncatedInputError,
    UnsupportedTargetError,
    UnsupportedVersionError,
)
from .extras import (
    ExtraField,
    decode_extras,
    encode_extras,
    extra_tag_name,
    extra_tag_number,
    register_extra_tag,
)
from .parser import AliasInfo, format_alias, interpret, parse_alias
from .record import AliasRecord, DriveType, Target, TargetKind, Volume, decode, encode

__all__ = [
    "create",
    "write_alias",
    "stat_target",
    "build_alias_record",
    "TargetDescriptor",
    "encode",
    "decode",
    "interpret",
    "parse_alias",
    "format_alias",
    "AliasRecord",
    "AliasInfo",
    "Volume",
    "Target",
    "TargetKind",
    "DriveType",
    "ExtraField",
    "encode_extras",
    "decode_extras",
    "register_extra_tag",
    "extra_tag_name",
    "extra_tag_number",
    "AliasError",
    "FormatError",
    "TruncatedInputError",
    "UnsupportedVersionError",
    "CapacityExceededError",
    "UnsupportedTargetError",
    "FilesystemQueryError",
    "__version__",
]
