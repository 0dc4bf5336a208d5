from .base import Region, RegionColor, RegionName
from .classifier import classify, region_name_at
from .reconciler import merge_application_regions, merge_bootloader_region, reconcile
from .report import (
    collect_warnings,
    detected_region_names,
    format_range,
    outside_writable,
    outside_writable_warning,
    overlap_warning,
)

__all__ = [
    "Region",
    "RegionColor",
    "RegionName",
    "classify",
    "region_name_at",
    "merge_application_regions",
    "merge_bootloader_region",
    "reconcile",
    "collect_warnings",
    "detected_region_names",
    "format_range",
    "outside_writable",
    "outside_writable_warning",
    "overlap_warning",
]
