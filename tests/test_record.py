"""Tests for the fixed header codec in macalias.record."""

import dataclasses
import struct

import pytest

from macalias._util import MAC_EPOCH
from macalias.errors import (
    CapacityExceededError,
    FormatError,
    TruncatedInputError,
    UnsupportedVersionError,
)
from macalias.extras import ExtraField
from macalias.record import AliasRecord, DriveType, Target, TargetKind, Volume, decode, encode


class TestGoldenRecord:
    """Byte-exact agreement with a reference encoder."""

    def test_encode_matches_reference(self, golden_record, golden_bytes):
        assert encode(golden_record) == golden_bytes

    def test_decode_matches_reference(self, golden_record, golden_bytes):
        assert decode(golden_bytes) == golden_record

    def test_extras_order_preserved(self, golden_bytes):
        record = decode(golden_bytes)
        assert [e.tag for e in record.extras] == [0, 1, 2, 15, 18, 19]


class TestHeaderLayout:
    """Fields land at the documented offsets."""

    def test_record_size_field(self, golden_record):
        data = encode(golden_record)
        assert struct.unpack_from(">H", data, 4)[0] == len(data)

    def test_version_and_kind(self, minimal_record):
        data = encode(minimal_record)
        assert struct.unpack_from(">HH", data, 6) == (2, 0)

    def test_directory_kind(self, minimal_record):
        data = encode(dataclasses.replace(minimal_record, kind=TargetKind.DIRECTORY))
        assert struct.unpack_from(">H", data, 8)[0] == 1

    def test_volume_name_slot(self, minimal_record):
        data = encode(minimal_record)
        assert data[10] == 4
        assert data[11:15] == b"Boot"
        assert data[15:38] == b"\x00" * 23

    def test_target_name_slot(self, minimal_record):
        data = encode(minimal_record)
        assert data[50] == 3
        assert data[51:54] == b"app"
        assert data[54:114] == b"\x00" * 60

    def test_default_signature_and_levels(self, minimal_record):
        data = encode(minimal_record)
        assert data[42:44] == b"H+"
        assert struct.unpack_from(">hh", data, 130) == (-1, -1)

    def test_identity_fields(self):
        record = AliasRecord(
            kind=TargetKind.FILE,
            volume=Volume(name="Boot", drive_type=DriveType.FLOPPY_800K),
            target=Target(
                name="app",
                file_id=543,
                file_type=b"APPL",
                creator=b"AQt7",
                parent_id=542,
            ),
            application=b"ABCD",
            levels_from=1,
            levels_to=1,
            volume_attributes=0x8000,
            volume_fs_id=7,
        )
        data = encode(record)
        assert data[0:4] == b"ABCD"
        assert struct.unpack_from(">H", data, 44)[0] == 3
        assert struct.unpack_from(">I", data, 46)[0] == 542
        assert struct.unpack_from(">I", data, 114)[0] == 543
        assert data[122:126] == b"APPL"
        assert data[126:130] == b"AQt7"
        assert struct.unpack_from(">hh", data, 130) == (1, 1)
        assert struct.unpack_from(">I", data, 134)[0] == 0x8000
        assert struct.unpack_from(">H", data, 138)[0] == 7

    def test_reserved_zero_and_end_marker(self, minimal_record):
        data = encode(minimal_record)
        assert data[140:150] == b"\x00" * 10
        assert data[150:] == b"\xff\xff\x00\x00"
        assert len(data) == 154


class TestEncodeErrors:
    """Encoding is strict on capacity and version."""

    def test_volume_name_at_capacity(self, minimal_record):
        rec = dataclasses.replace(minimal_record, volume=Volume(name="v" * 27))
        assert decode(encode(rec)).volume.name == "v" * 27

    def test_volume_name_too_long(self, minimal_record):
        rec = dataclasses.replace(minimal_record, volume=Volume(name="v" * 28))
        with pytest.raises(CapacityExceededError, match="Volume name"):
            encode(rec)

    def test_target_name_at_capacity(self, minimal_record):
        rec = dataclasses.replace(minimal_record, target=Target(name="t" * 63))
        assert decode(encode(rec)).target.name == "t" * 63

    def test_target_name_too_long(self, minimal_record):
        rec = dataclasses.replace(minimal_record, target=Target(name="t" * 64))
        with pytest.raises(CapacityExceededError, match="Target name"):
            encode(rec)

    def test_capacity_counts_encoded_bytes(self, minimal_record):
        # 32 characters, 64 bytes in UTF-8
        rec = dataclasses.replace(minimal_record, target=Target(name="é" * 32))
        with pytest.raises(CapacityExceededError):
            encode(rec)

    def test_capacity_error_is_value_error(self, minimal_record):
        rec = dataclasses.replace(minimal_record, target=Target(name="t" * 64))
        with pytest.raises(ValueError):
            encode(rec)

    def test_other_version_rejected(self, minimal_record):
        with pytest.raises(UnsupportedVersionError):
            encode(dataclasses.replace(minimal_record, version=3))

    def test_oversized_record(self, minimal_record):
        rec = dataclasses.replace(
            minimal_record, extras=(ExtraField(5, b"x" * 0xFFF0),)
        )
        with pytest.raises(CapacityExceededError, match="size field"):
            encode(rec)

    def test_long_application_signature(self, minimal_record):
        with pytest.raises(CapacityExceededError):
            encode(dataclasses.replace(minimal_record, application=b"TOOLONG"))


class TestDecodeErrors:
    """Decoding is strict on structure."""

    @pytest.mark.parametrize("cut", range(0, 298, 7))
    def test_truncated_anywhere(self, golden_bytes, cut):
        with pytest.raises(TruncatedInputError):
            decode(golden_bytes[:cut])

    def test_truncated_every_offset(self, golden_bytes):
        for cut in range(len(golden_bytes)):
            with pytest.raises(TruncatedInputError):
                decode(golden_bytes[:cut])

    def test_one_byte_short(self, golden_bytes):
        with pytest.raises(TruncatedInputError, match="declares 298"):
            decode(golden_bytes[:-1])

    def test_trailing_bytes_ignored(self, golden_bytes, golden_record):
        assert decode(golden_bytes + b"\x00" * 32) == golden_record

    @pytest.mark.parametrize("version", [0, 1, 3, 0xFFFF])
    def test_unsupported_version(self, golden_bytes, version):
        bad = bytearray(golden_bytes)
        struct.pack_into(">H", bad, 6, version)
        with pytest.raises(UnsupportedVersionError, match=str(version)):
            decode(bytes(bad))

    def test_invalid_kind(self, golden_bytes):
        bad = bytearray(golden_bytes)
        struct.pack_into(">H", bad, 8, 2)
        with pytest.raises(FormatError, match="target kind"):
            decode(bytes(bad))

    def test_invalid_drive_type(self, golden_bytes):
        bad = bytearray(golden_bytes)
        struct.pack_into(">H", bad, 44, 9)
        with pytest.raises(FormatError, match="drive type"):
            decode(bytes(bad))

    def test_volume_name_length_over_slot(self, golden_bytes):
        bad = bytearray(golden_bytes)
        bad[10] = 28
        with pytest.raises(FormatError, match="capacity"):
            decode(bytes(bad))

    def test_record_size_below_minimum(self, golden_bytes):
        bad = bytearray(golden_bytes)
        struct.pack_into(">H", bad, 4, 100)
        with pytest.raises(FormatError, match="minimum"):
            decode(bytes(bad))

    def test_extra_overruns_record_size(self, golden_bytes):
        bad = bytearray(golden_bytes)
        struct.pack_into(">H", bad, 152, 0x0200)  # first extra's length
        with pytest.raises(FormatError, match="overruns") as excinfo:
            decode(bytes(bad))
        assert not isinstance(excinfo.value, TruncatedInputError)

    def test_record_size_cuts_extra_list(self, golden_bytes):
        bad = bytearray(golden_bytes)
        struct.pack_into(">H", bad, 4, 160)
        with pytest.raises(FormatError):
            decode(bytes(bad))

    def test_end_marker_with_length(self, minimal_record):
        data = bytearray(encode(minimal_record))
        data[150:154] = b"\xff\xff\x00\x02"
        data += b"\x00\x00"
        struct.pack_into(">H", data, 4, len(data))
        with pytest.raises(FormatError, match="non-zero length"):
            decode(bytes(data))

    def test_unused_bytes_inside_record_size(self, minimal_record):
        data = bytearray(encode(minimal_record)) + b"JUNK"
        struct.pack_into(">H", data, 4, 158)
        with pytest.raises(FormatError, match="4 unused bytes") as excinfo:
            decode(bytes(data))
        assert not isinstance(excinfo.value, TruncatedInputError)

    def test_missing_end_marker(self, minimal_record):
        data = bytearray(encode(minimal_record))
        data[150:154] = b"\x00\x05\x00\x00"  # empty tag 5 instead of the marker
        with pytest.raises(FormatError, match="end marker"):
            decode(bytes(data))


class TestDecodeNames:
    """Fixed slot names."""

    def test_padding_bytes_ignored(self, minimal_record):
        data = bytearray(encode(minimal_record))
        data[20:30] = b"GARBAGE!!!"
        assert decode(bytes(data)).volume.name == "Boot"

    def test_mac_roman_name(self, minimal_record):
        data = bytearray(encode(minimal_record))
        data[50] = 4
        data[51:55] = b"caf\x8e"
        assert decode(bytes(data)).target.name == "café"

    def test_explicit_encoding(self, minimal_record):
        rec = dataclasses.replace(minimal_record, target=Target(name="café"))
        data = encode(rec, encoding="mac_roman")
        assert data[50] == 4
        assert decode(data, encoding="mac_roman").target.name == "café"

    def test_unset_dates(self, minimal_record):
        record = decode(encode(minimal_record))
        assert record.volume.created is None
        assert record.target.created is None

    def test_mac_epoch_reads_as_unset(self, minimal_record):
        rec = dataclasses.replace(
            minimal_record, target=Target(name="app", created=MAC_EPOCH)
        )
        data = encode(rec)
        assert data[118:122] == b"\x00\x00\x00\x00"
        assert decode(data).target.created is None


class TestRecordAccessors:
    """Lookup helpers on AliasRecord."""

    def test_extra_first_match(self, minimal_record):
        rec = dataclasses.replace(
            minimal_record,
            extras=(ExtraField(0, b"one"), ExtraField(0, b"two")),
        )
        assert rec.extra(0).payload == b"one"
        assert [e.payload for e in rec.extras_for(0)] == [b"one", b"two"]
        assert rec.extra(18) is None
