"""Tests for the HEX, ELF and BIN image parsers."""

from __future__ import annotations

import pytest

from flashmap.core import FormatError, OverlapError
from flashmap.load import parse_bin, parse_elf, parse_hex, parse_image

EOF_RECORD = ":00000001FF\n"


def hex_record(address: int, data: bytes, record_type: int = 0) -> str:
    body = bytes([len(data), (address >> 8) & 0xFF, address & 0xFF, record_type]) + data
    checksum = (-sum(body)) & 0xFF
    return ":" + (body + bytes([checksum])).hex().upper() + "\n"


def extended_linear(upper: int) -> str:
    return hex_record(0, bytes([(upper >> 8) & 0xFF, upper & 0xFF]), 4)


def test_parse_hex_merges_contiguous_records() -> None:
    text = (
        hex_record(0x1000, bytes(range(16)))
        + hex_record(0x1010, bytes(range(16, 32)))
        + hex_record(0x2000, b"\xAA\xBB")
        + EOF_RECORD
    )

    image = parse_hex("app.hex", text)

    assert image.key == "app.hex"
    assert image.filename == "app.hex"
    assert image.ranges.spans() == [(0x1000, 0x1020), (0x2000, 0x2002)]
    assert image.ranges.read(0x1000, 32) == bytes(range(32))
    assert image.size == 34
    assert not image.is_mcuboot


def test_parse_hex_extended_linear_address() -> None:
    text = extended_linear(0x1000) + hex_record(0x1014, b"\x01\x02\x03\x04") + EOF_RECORD

    image = parse_hex("uicr.hex", text.encode("ascii"))

    assert image.ranges.spans() == [(0x10001014, 0x10001018)]


def test_parse_hex_detects_mcuboot_start() -> None:
    image = parse_hex("signed.hex", hex_record(0xC000, b"\x3d\xb8\xf3\x96") + EOF_RECORD)

    assert image.is_mcuboot


def test_parse_hex_bad_checksum_reports_offset() -> None:
    first = hex_record(0x0000, b"\x01\x02")
    broken = hex_record(0x0002, b"\x03\x04")[:-3] + "00\n"
    text = first + broken + EOF_RECORD

    with pytest.raises(FormatError) as excinfo:
        parse_hex("broken.hex", text)

    assert excinfo.value.line == 2
    assert excinfo.value.offset == len(first)


def test_parse_hex_garbage_line() -> None:
    text = hex_record(0x0000, b"\x01") + "not a record\n" + EOF_RECORD

    with pytest.raises(FormatError) as excinfo:
        parse_hex("garbage.hex", text)

    assert excinfo.value.line == 2


def test_parse_hex_non_ascii_reports_offset() -> None:
    data = hex_record(0x0000, b"\x01").encode("ascii") + b"\xff\xfe"

    with pytest.raises(FormatError) as excinfo:
        parse_hex("binary.hex", data)

    assert excinfo.value.offset == len(hex_record(0x0000, b"\x01"))


def test_parse_hex_self_overlap_is_rejected() -> None:
    text = hex_record(0x0000, b"\x01\x02\x03\x04") + hex_record(0x0002, b"\x05") + EOF_RECORD

    with pytest.raises(OverlapError) as excinfo:
        parse_hex("twice.hex", text)

    assert excinfo.value.address == 0x0002


def test_parse_hex_overflow_past_address_space() -> None:
    text = extended_linear(0xFFFF) + hex_record(0xFFF8, bytes(16)) + EOF_RECORD

    with pytest.raises(FormatError):
        parse_hex("overflow.hex", text)


def test_parse_bin_places_data_at_base() -> None:
    image = parse_bin("boot.bin", b"\x01\x02\x03", base_address=0xF8000)

    assert image.ranges.spans() == [(0xF8000, 0xF8003)]


def test_parse_bin_rejects_empty_file() -> None:
    with pytest.raises(FormatError) as excinfo:
        parse_bin("empty.bin", b"")

    assert excinfo.value.offset == 0


def test_parse_elf_rejects_non_elf_data() -> None:
    with pytest.raises(FormatError) as excinfo:
        parse_elf("firmware.elf", b"MZ\x00\x00 not an elf")

    assert excinfo.value.offset == 0


def test_parse_image_dispatches_on_suffix() -> None:
    hex_image = parse_image("APP.HEX", (hex_record(0x0, b"\x01") + EOF_RECORD).encode())
    bin_image = parse_image("app.bin", b"\x01\x02")

    assert hex_image.ranges.spans() == [(0x0, 0x1)]
    assert bin_image.ranges.spans() == [(0x0, 0x2)]

    with pytest.raises(FormatError):
        parse_image("app.elf", b"\x00" * 16)
