from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from .core import (
    AddressRangeSet,
    ByteRange,
    DeviceInfo,
    DuplicateKeyError,
    FlashmapError,
    FormatError,
    OverlapError,
    OverlapFinding,
    Precedence,
)
from .image import CombinedImage, ImageStore, RecentFiles, SparseImage
from .load import parse_bin, parse_elf, parse_hex, parse_image, read_image
from .regions import Region, RegionColor, RegionName, classify, reconcile
from .session import Layout, LayoutConfig, Workspace, build_layout


def open_workspace(
    *paths: Union[str, Path],
    device: Optional[DeviceInfo] = None,
    config: Optional[LayoutConfig] = None,
) -> Workspace:
    workspace = Workspace(device=device, config=config)
    for path in paths:
        workspace.open(path)
    return workspace


__all__ = [
    "AddressRangeSet",
    "ByteRange",
    "CombinedImage",
    "DeviceInfo",
    "DuplicateKeyError",
    "FlashmapError",
    "FormatError",
    "ImageStore",
    "Layout",
    "LayoutConfig",
    "OverlapError",
    "OverlapFinding",
    "Precedence",
    "RecentFiles",
    "Region",
    "RegionColor",
    "RegionName",
    "SparseImage",
    "Workspace",
    "build_layout",
    "classify",
    "open_workspace",
    "parse_bin",
    "parse_elf",
    "parse_hex",
    "parse_image",
    "read_image",
    "reconcile",
]
