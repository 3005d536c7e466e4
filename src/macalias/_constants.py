"""Alias Record constants and lookup tables shared by builder and parser."""

# ---------------------------------------------------------------------------
# Record layout
# ---------------------------------------------------------------------------
RECORD_VERSION = 2
HEADER_SIZE = 150  # fixed part, extra list starts here
END_TAG = 0xFFFF
END_MARKER_SIZE = 4  # tag + zero length
MAX_RECORD_SIZE = 0xFFFF

VOLUME_NAME_CAPACITY = 27  # 28-byte slot minus length prefix
TARGET_NAME_CAPACITY = 63  # 64-byte slot minus length prefix
RESERVED_SIZE = 10

OFF_RECORD_SIZE = 4  # patched once the extra list length is known

# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------
# Names in the fixed slots were MacRoman on classic systems.  Modern encoders
# write UTF-8, which is what we emit; decoding falls back to MacRoman when the
# bytes are not valid UTF-8.
NAME_ENCODING = "utf-8"
LEGACY_ENCODING = "mac_roman"

# ---------------------------------------------------------------------------
# Time
# ---------------------------------------------------------------------------
# Seconds from 1904-01-01T00:00:00Z (Mac epoch) to 1970-01-01T00:00:00Z.
MAC_EPOCH_OFFSET = 2082844800

# ---------------------------------------------------------------------------
# Target kind / drive type
# ---------------------------------------------------------------------------
KIND_FILE = 0
KIND_DIRECTORY = 1

TARGET_KINDS = {KIND_FILE: "file", KIND_DIRECTORY: "directory"}

DRIVE_TYPES = {
    0: "Fixed HD",
    1: "Network Disk",
    2: "400KB Floppy",
    3: "800KB Floppy",
    4: "1.4MB Floppy",
    5: "Other Ejectable Media",
}

# ---------------------------------------------------------------------------
# Volume signatures / attributes
# ---------------------------------------------------------------------------
FS_SIGNATURES = {
    b"RW": "MFS",
    b"BD": "HFS",
    b"H+": "HFS+",
    b"HX": "HFSX",
}
DEFAULT_FS_SIGNATURE = b"H+"

VOLUME_ATTRIBUTE_NAMES = {
    7: "HardwareLock",
    8: "Unmounted",
    9: "SparedBlocks",
    10: "NoCacheRequired",
    11: "BootVolumeInconsistent",
    12: "CatalogNodeIDsReused",
    13: "Journaled",
    15: "SoftwareLock",
}
# Unmounted, NoCacheRequired, BootVolumeInconsistent, plus bit 1
DEFAULT_VOLUME_ATTRIBUTES = 0x0D02

# Name reported for the root mount point when the host gives us nothing better
ROOT_VOLUME_NAME = "Macintosh HD"

# HFS directory ID of the root's parent
ROOT_PARENT_ID = 1

# ---------------------------------------------------------------------------
# Extra field tags (classic Alias Manager numbering)
# ---------------------------------------------------------------------------
TAG_DIRECTORY_NAME = 0
TAG_DIRECTORY_IDS = 1
TAG_ABSOLUTE_PATH = 2
TAG_APPLESHARE_ZONE = 3
TAG_APPLESHARE_SERVER = 4
TAG_APPLESHARE_USER = 5
TAG_DRIVER_NAME = 6
TAG_NETWORK_MOUNT_INFO = 9
TAG_DIALUP_INFO = 10
TAG_UNICODE_FILENAME = 14
TAG_UNICODE_VOLUME_NAME = 15
TAG_VOLUME_CREATED_HIRES = 16
TAG_TARGET_CREATED_HIRES = 17
TAG_POSIX_PATH = 18
TAG_POSIX_MOUNT_POINT = 19
TAG_RECURSIVE_ALIAS = 20
TAG_USER_HOME_PREFIX_LENGTH = 21
