from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional, Tuple, Union

from redlog import field as log_field
from redlog import get_logger

from .core.device import DeviceInfo
from .core.ranges import OverlapFinding
from .image.base import MCUBOOT_FW_START_ADDRESS, CombinedImage, SparseImage
from .image.recent import MAX_RECENT_FILES, RecentFiles
from .image.store import ImageStore
from .load import parse_image, read_image
from .regions.base import Region, RegionName
from .regions.classifier import classify
from .regions.reconciler import reconcile
from .regions.report import collect_warnings, detected_region_names


@dataclass
class LayoutConfig:
    mcuboot_start_address: int = MCUBOOT_FW_START_ADDRESS
    reconcile: bool = True
    max_recent_files: int = MAX_RECENT_FILES


@dataclass(frozen=True)
class Layout:
    """Everything the address map view needs from one pipeline run."""

    combined: CombinedImage
    findings: Tuple[OverlapFinding, ...] = ()
    regions: Tuple[Region, ...] = ()
    warnings: Tuple[str, ...] = ()
    detected_region_names: FrozenSet[RegionName] = field(default_factory=frozenset)
    mcuboot_key: Optional[str] = None

    @property
    def total_size(self) -> int:
        return self.combined.total_size

    def __repr__(self) -> str:
        return (
            f"Layout(regions={len(self.regions)}, overlaps={len(self.findings)}, "
            f"bytes={self.total_size})"
        )


def build_layout(
    store: ImageStore,
    device: Optional[DeviceInfo] = None,
    config: Optional[LayoutConfig] = None,
) -> Layout:
    """Run combine, classify, reconcile and report over the store."""
    config = config or LayoutConfig()
    combined, findings = store.combined()
    regions = classify(combined, device)
    if config.reconcile:
        regions = reconcile(regions, device)
    return Layout(
        combined=combined,
        findings=findings,
        regions=regions,
        warnings=collect_warnings(combined, findings, device),
        detected_region_names=detected_region_names(regions),
        mcuboot_key=store.mcuboot_key(config.mcuboot_start_address),
    )


class Workspace:
    """Loaded images plus the current device, recomputed after every change."""

    def __init__(
        self,
        device: Optional[DeviceInfo] = None,
        config: Optional[LayoutConfig] = None,
    ):
        self.config = config or LayoutConfig()
        self.device = device
        self.store = ImageStore()
        self.recent = RecentFiles(limit=self.config.max_recent_files)
        self._layout: Optional[Layout] = None
        self.log = get_logger("flashmap.workspace")

    def __repr__(self) -> str:
        return f"Workspace(images={len(self.store)}, device={self.device!r})"

    @property
    def layout(self) -> Layout:
        if self._layout is None:
            self._layout = build_layout(self.store, self.device, self.config)
            for warning in self._layout.warnings:
                self.log.warn(warning)
        return self._layout

    def _changed(self) -> Layout:
        self._layout = None
        return self.layout

    def set_device(self, device: Optional[DeviceInfo]) -> Layout:
        self.device = device
        self.log.dbg("device changed", log_field("device", repr(device)))
        return self._changed()

    def add(self, image: SparseImage) -> Layout:
        self.store.add_image(image)
        return self._changed()

    def reload(self, image: SparseImage) -> Layout:
        self.store.replace_image(image)
        return self._changed()

    def remove(self, key: str) -> Layout:
        self.store.remove_image(key)
        return self._changed()

    def close_all(self) -> Layout:
        self.store.clear()
        return self._changed()

    def open(self, path: Union[str, Path]) -> Layout:
        """Read and add one file; already loaded paths are left as they are."""
        image_path = Path(path)
        key = str(image_path)
        if key in self.store:
            self.log.dbg(f"already loaded: {key}")
            return self.layout

        try:
            modified = datetime.fromtimestamp(image_path.stat().st_mtime)
            data = image_path.read_bytes()
        except OSError as exc:
            self.log.err(f"could not open image file: {exc}")
            self.recent = self.recent.remove(key)
            raise

        # readable files are remembered even when parsing fails
        self.recent = self.recent.add(key)
        self.log.info(
            "opened image",
            log_field("path", key),
            log_field("modified", modified.isoformat()),
        )
        return self.add(parse_image(key, data, modified))

    def stale_files(self) -> List[str]:
        mtimes: Dict[str, datetime] = {}
        for key in self.store.keys():
            try:
                mtimes[key] = datetime.fromtimestamp(Path(key).stat().st_mtime)
            except OSError as exc:
                self.log.err(f"could not stat image file: {exc}")
        return self.store.stale_keys(mtimes)

    def refresh(self) -> Layout:
        """Reload every file that changed on disk since it was loaded.

        All stale files are parsed before any is swapped in, so a file that
        fails to load leaves the store and layout as they were.
        """
        reloaded = []
        for key in self.stale_files():
            self.log.info(f"reloading: {key}")
            reloaded.append(read_image(key))
        for image in reloaded:
            self.store.replace_image(image)
        return self._changed()
