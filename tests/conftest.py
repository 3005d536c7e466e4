"""Shared fixtures for macalias tests."""

import base64
from datetime import UTC, datetime

import pytest

from macalias.extras import ExtraField
from macalias.record import AliasRecord, DriveType, Target, TargetKind, Volume

# Record for /Volumes/Test Title/.background/TestBkg.tiff as produced by a
# reference encoder (298 bytes).
GOLDEN_B64 = (
    "AAAAAAEqAAIAAApUZXN0IFRpdGxlAAAAAAAAAAAAAAAAAAAAAADO615USCsABQAAABMMVGVz"
    "dEJrZy50aWZmAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"
    "AAAAAAAAAAAAFM7rXlgAAAAAAAAAAP////8AAA0CAAAAAAAAAAAAAAAAAAAACy5iYWNrZ3Jv"
    "dW5kAAABAAQAAAATAAIAJFRlc3QgVGl0bGU6LmJhY2tncm91bmQ6AFRlc3RCa2cudGlmZgAP"
    "ABYACgBUAGUAcwB0ACAAVABpAHQAbABlABIAGS8uYmFja2dyb3VuZC9UZXN0QmtnLnRpZmYA"
    "ABMAEy9Wb2x1bWVzL1Rlc3QgVGl0bGUA//8AAA=="
)


@pytest.fixture
def golden_bytes():
    """The 298-byte reference record."""
    return base64.b64decode(GOLDEN_B64)


@pytest.fixture
def golden_record():
    """The structured form of ``golden_bytes``."""
    return AliasRecord(
        kind=TargetKind.FILE,
        volume=Volume(
            name="Test Title",
            created=datetime.fromtimestamp(1388686804, tz=UTC),
            signature=b"H+",
            drive_type=DriveType.OTHER,
        ),
        target=Target(
            name="TestBkg.tiff",
            file_id=20,
            created=datetime.fromtimestamp(1388686808, tz=UTC),
            parent_id=19,
        ),
        volume_attributes=0x0D02,
        extras=(
            ExtraField(0, b".background"),
            ExtraField(1, b"\x00\x00\x00\x13"),
            ExtraField(2, b"Test Title:.background:\x00TestBkg.tiff"),
            ExtraField(15, b"\x00\x0a" + "Test Title".encode("utf-16-be")),
            ExtraField(18, b"/.background/TestBkg.tiff"),
            ExtraField(19, b"/Volumes/Test Title"),
        ),
    )


@pytest.fixture
def minimal_record():
    """A record with no extras and every optional field at its default."""
    return AliasRecord(
        kind=TargetKind.FILE,
        volume=Volume(name="Boot"),
        target=Target(name="app"),
    )


@pytest.fixture
def target_file(tmp_path):
    """A regular file inside a dedicated directory."""
    folder = tmp_path / "Documents"
    folder.mkdir()
    path = folder / "index.spec.mjs"
    path.write_text("export default {};\n")
    return path
