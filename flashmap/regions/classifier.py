from __future__ import annotations

from typing import Iterable, Iterator, List, Optional, Tuple

from redlog import field, get_logger

from ..core.device import DeviceInfo
from ..image.base import CombinedImage
from .base import Region, RegionName

log = get_logger("flashmap.classify")


def classify(
    combined: CombinedImage, device: Optional[DeviceInfo] = None
) -> Tuple[Region, ...]:
    """partition the combined image into named regions, sorted by start.

    Data wholly inside the UICR page is skipped. Covered bytes are split at
    the SoftDevice, bootloader and ROM boundaries, each piece is named by
    its start address, and contiguous pieces with the same name become one
    region. Without a device every piece is NONE.
    """
    boundaries = _boundaries(device)
    regions: List[Region] = []
    for rng in combined:
        if device is not None and device.in_uicr(rng.start, rng.end):
            log.dbg(f"skipping uicr data at 0x{rng.start:08x}")
            continue
        for start, end in _split(rng.start, rng.end, boundaries):
            _append(regions, region_name_at(start, device), start, end, rng.sources)

    log.dbg(
        "classified",
        field("ranges", len(combined)),
        field("regions", len(regions)),
    )
    return tuple(regions)


def region_name_at(address: int, device: Optional[DeviceInfo]) -> RegionName:
    if device is None:
        return RegionName.NONE
    if device.softdevice_size is not None and address < device.softdevice_size:
        return RegionName.SOFTDEVICE

    app_limit = device.rom_size
    if device.bootloader_address is not None:
        # bootloader data reaching past rom stays bootloader
        if address >= device.bootloader_address:
            return RegionName.BOOTLOADER
        app_limit = device.bootloader_address

    if address < app_limit:
        return RegionName.APPLICATION
    return RegionName.NONE


def _boundaries(device: Optional[DeviceInfo]) -> List[int]:
    if device is None:
        return []
    points = {device.rom_size}
    if device.softdevice_size is not None:
        points.add(device.softdevice_size)
    if device.bootloader_address is not None:
        points.add(device.bootloader_address)
    return sorted(points)


def _split(start: int, end: int, boundaries: Iterable[int]) -> Iterator[Tuple[int, int]]:
    current = start
    for point in boundaries:
        if current < point < end:
            yield current, point
            current = point
    yield current, end


def _append(
    regions: List[Region],
    name: RegionName,
    start: int,
    end: int,
    sources: Iterable[str],
) -> None:
    if regions:
        last = regions[-1]
        if last.name is name and last.end == start:
            regions[-1] = last.widened(last.start, end, sources)
            return
    regions.append(Region(name=name, start=start, size=end - start, sources=frozenset(sources)))
