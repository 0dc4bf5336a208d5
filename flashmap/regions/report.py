from __future__ import annotations

from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

from ..core.device import DeviceInfo
from ..core.ranges import OverlapFinding
from ..image.base import CombinedImage
from .base import Region, RegionName

DETECTABLE_REGION_NAMES = (
    RegionName.APPLICATION,
    RegionName.SOFTDEVICE,
    RegionName.BOOTLOADER,
)


def format_range(start: int, end: int) -> str:
    return f"{start:08X}-{end:08X}"


def overlap_warning(findings: Sequence[OverlapFinding]) -> Optional[str]:
    if not findings:
        return None
    spans = ", ".join(format_range(f.start, f.end) for f in findings)
    return f"Some of the HEX files have overlapping data ({spans})."


def outside_writable(
    combined: CombinedImage, device: Optional[DeviceInfo]
) -> List[Tuple[int, int]]:
    """covered spans that reach past ROM or past the UICR page"""
    if device is None:
        return []
    return [
        (start, end)
        for start, end in combined.spans()
        if device.is_outside_writable(start, end)
    ]


def outside_writable_warning(
    combined: CombinedImage, device: Optional[DeviceInfo]
) -> Optional[str]:
    blocks = outside_writable(combined, device)
    if not blocks:
        return None
    spans = ", ".join(format_range(start, end) for start, end in blocks)
    return f"There is data outside the user-writable areas ({spans})."


def collect_warnings(
    combined: CombinedImage,
    findings: Sequence[OverlapFinding],
    device: Optional[DeviceInfo],
) -> Tuple[str, ...]:
    warnings = (
        overlap_warning(findings),
        outside_writable_warning(combined, device),
    )
    return tuple(w for w in warnings if w is not None)


def detected_region_names(regions: Iterable[Region]) -> FrozenSet[RegionName]:
    return frozenset(r.name for r in regions if r.name in DETECTABLE_REGION_NAMES)
