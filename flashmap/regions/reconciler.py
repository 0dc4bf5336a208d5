from __future__ import annotations

from typing import Iterable, List, Optional, Tuple

from redlog import field, get_logger

from ..core.device import DeviceInfo
from .base import Region, RegionName

log = get_logger("flashmap.reconcile")


def _sorted(regions: Iterable[Region]) -> Tuple[Region, ...]:
    return tuple(sorted(regions, key=lambda r: r.start))


def _sources_of(regions: Iterable[Region]) -> frozenset:
    merged: frozenset = frozenset()
    for region in regions:
        merged |= region.sources
    return merged


def merge_application_regions(regions: Iterable[Region]) -> Tuple[Region, ...]:
    """present application fragments below the bootloader as one region.

    Fragments at or above the bootloader belong to another image and are
    left alone. Without a bootloader region nothing changes.
    """
    ordered = _sorted(regions)
    bootloader = next((r for r in ordered if r.name is RegionName.BOOTLOADER), None)
    if bootloader is None:
        return ordered

    apps = [r for r in ordered if r.name is RegionName.APPLICATION]
    below = [r for r in apps if r.start < bootloader.start]
    if not below:
        return ordered

    app_start = min(r.start for r in apps)
    app_end = max(r.end for r in below)
    absorbed = [
        r
        for r in ordered
        if r.name is RegionName.NONE and app_start <= r.start and r.end <= app_end
    ]
    folded = below + absorbed
    merged = Region(
        name=RegionName.APPLICATION,
        start=app_start,
        size=app_end - app_start,
        sources=_sources_of(folded),
    )
    if len(below) > 1 or absorbed:
        log.dbg(
            "merged application fragments",
            field("fragments", len(below)),
            field("start", f"0x{app_start:08x}"),
            field("end", f"0x{app_end:08x}"),
        )
    return _sorted([r for r in ordered if r not in folded] + [merged])


def merge_bootloader_region(
    regions: Iterable[Region], device: Optional[DeviceInfo]
) -> Tuple[Region, ...]:
    """fold bootloader fragments and the unclassified gaps after them into one.

    Folding starts at the lowest bootloader region and covers the unbroken
    run of BOOTLOADER regions and NONE gaps ending below the ROM size. The
    first region of any other kind ends the run, so the widened bootloader
    never covers it.
    """
    ordered = _sorted(regions)
    if device is None:
        return ordered

    first = next((i for i, r in enumerate(ordered) if r.name is RegionName.BOOTLOADER), None)
    if first is None:
        return ordered

    folded: List[Region] = []
    for region in ordered[first:]:
        if region.name is RegionName.BOOTLOADER or _is_gap(region, device):
            folded.append(region)
            continue
        break
    if len(folded) == 1:
        return ordered

    bootloader = folded[0]
    bl_end = max(r.end for r in folded)
    merged = bootloader.widened(bootloader.start, bl_end, _sources_of(folded))
    log.dbg(
        "merged bootloader",
        field("regions", len(folded)),
        field("start", f"0x{bootloader.start:08x}"),
        field("end", f"0x{bl_end:08x}"),
    )
    return _sorted([r for r in ordered if r not in folded] + [merged])


def _is_gap(region: Region, device: DeviceInfo) -> bool:
    return region.name is RegionName.NONE and region.end < device.rom_size


def reconcile(
    regions: Iterable[Region], device: Optional[DeviceInfo]
) -> Tuple[Region, ...]:
    merged: List[Region] = list(merge_application_regions(regions))
    return merge_bootloader_region(merged, device)
