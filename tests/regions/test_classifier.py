"""Tests for region classification of a combined image."""

from __future__ import annotations

from flashmap.core import AddressRangeSet, ByteRange, DeviceInfo
from flashmap.image import CombinedImage
from flashmap.regions import Region, RegionColor, RegionName, classify, region_name_at

DEVICE = DeviceInfo(
    rom_size=0x100000,
    page_size=0x1000,
    uicr_base_address=0x10001000,
    bootloader_address=0xF8000,
    softdevice_size=0x26000,
)


def combine(*images: tuple) -> CombinedImage:
    """Each image is ``(key, [(start, end), ...])``, later images win."""
    merged = AddressRangeSet()
    for key, blocks in images:
        ranges = AddressRangeSet(ByteRange(start, bytes(end - start)) for start, end in blocks)
        merged, _ = merged.union(ranges.tagged(key))
    return CombinedImage(merged)


def spans(regions) -> list:
    return [(r.name, r.start, r.end) for r in regions]


def test_empty_image_yields_no_regions() -> None:
    assert classify(CombinedImage(), DEVICE) == ()
    assert classify(CombinedImage(), None) == ()


def test_classification_by_start_address() -> None:
    combined = combine(
        ("sd.hex", [(0x0, 0x1000)]),
        ("app.hex", [(0x26000, 0x27000)]),
        ("bl.hex", [(0xF8000, 0xF9000)]),
    )

    regions = classify(combined, DEVICE)

    assert spans(regions) == [
        (RegionName.SOFTDEVICE, 0x0, 0x1000),
        (RegionName.APPLICATION, 0x26000, 0x27000),
        (RegionName.BOOTLOADER, 0xF8000, 0xF9000),
    ]
    assert regions[0].sources == frozenset({"sd.hex"})
    assert regions[0].color is RegionColor.SOFTDEVICE


def test_uicr_data_is_excluded() -> None:
    combined = combine(
        ("app.hex", [(0x26000, 0x26100)]),
        ("uicr.hex", [(0x10001014, 0x10001018)]),
    )

    regions = classify(combined, DEVICE)

    assert spans(regions) == [(RegionName.APPLICATION, 0x26000, 0x26100)]


def test_range_crossing_softdevice_boundary_is_split() -> None:
    combined = combine(("merged.hex", [(0x25000, 0x27000)]))

    regions = classify(combined, DEVICE)

    assert spans(regions) == [
        (RegionName.SOFTDEVICE, 0x25000, 0x26000),
        (RegionName.APPLICATION, 0x26000, 0x27000),
    ]


def test_data_past_rom_is_none_without_bootloader() -> None:
    device = DeviceInfo(rom_size=0x100000, page_size=0x1000, uicr_base_address=0x10001000)
    combined = combine(("big.hex", [(0xFF000, 0x101000)]))

    regions = classify(combined, device)

    assert spans(regions) == [
        (RegionName.APPLICATION, 0xFF000, 0x100000),
        (RegionName.NONE, 0x100000, 0x101000),
    ]


def test_bootloader_data_past_rom_stays_bootloader() -> None:
    combined = combine(("big.hex", [(0xFF000, 0x101000)]))

    regions = classify(combined, DEVICE)

    assert spans(regions) == [(RegionName.BOOTLOADER, 0xFF000, 0x101000)]


def test_data_above_rom_with_bootloader_is_bootloader() -> None:
    device = DeviceInfo(
        rom_size=0x8000,
        page_size=0x1000,
        uicr_base_address=0x10001000,
        bootloader_address=0x7000,
    )
    combined = combine(("far.hex", [(0x9000, 0x9010)]))

    regions = classify(combined, device)

    assert spans(regions) == [(RegionName.BOOTLOADER, 0x9000, 0x9010)]
    assert region_name_at(0x6FFF, device) is RegionName.APPLICATION


def test_contiguous_data_from_two_files_is_one_region() -> None:
    combined = combine(
        ("a.hex", [(0x30000, 0x31000)]),
        ("b.hex", [(0x31000, 0x32000)]),
    )

    regions = classify(combined, DEVICE)

    assert regions == (
        Region(RegionName.APPLICATION, 0x30000, 0x2000, frozenset({"a.hex", "b.hex"})),
    )


def test_gaps_split_regions() -> None:
    combined = combine(("app.hex", [(0x30000, 0x31000), (0x40000, 0x41000)]))

    regions = classify(combined, DEVICE)

    assert spans(regions) == [
        (RegionName.APPLICATION, 0x30000, 0x31000),
        (RegionName.APPLICATION, 0x40000, 0x41000),
    ]


def test_without_device_everything_is_none() -> None:
    combined = combine(
        ("a.hex", [(0x0, 0x1000)]),
        ("b.hex", [(0x1000, 0x2000), (0xF8000, 0xF9000)]),
    )

    regions = classify(combined, None)

    assert spans(regions) == [
        (RegionName.NONE, 0x0, 0x2000),
        (RegionName.NONE, 0xF8000, 0xF9000),
    ]
    assert regions[0].sources == frozenset({"a.hex", "b.hex"})


def test_without_bootloader_application_runs_to_rom_end() -> None:
    device = DeviceInfo(rom_size=0x80000, page_size=0x1000, uicr_base_address=0x10001000)

    assert region_name_at(0x0, device) is RegionName.APPLICATION
    assert region_name_at(0x7FFFF, device) is RegionName.APPLICATION
    assert region_name_at(0x80000, device) is RegionName.NONE


def test_classified_regions_are_disjoint() -> None:
    combined = combine(
        ("sd.hex", [(0x0, 0x26000)]),
        ("app.hex", [(0x20000, 0x30000), (0x30100, 0x30200)]),
        ("bl.hex", [(0xF7000, 0xF9000), (0xFE000, 0x100010)]),
    )

    regions = classify(combined, DEVICE)

    for index, region in enumerate(regions):
        for other in regions[index + 1 :]:
            assert not region.intersects(other)
