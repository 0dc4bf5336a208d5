from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from redlog import field, get_logger

from ..core.errors import DuplicateKeyError
from ..core.ranges import AddressRangeSet, OverlapFinding, Precedence
from .base import MCUBOOT_FW_START_ADDRESS, CombinedImage, SparseImage


class ImageStore:
    """Loaded sparse images keyed by source path, in insertion order.

    The most recently added image wins bytes that overlap older images.
    """

    def __init__(self) -> None:
        self._images: Dict[str, SparseImage] = {}
        self._combined_cache: Optional[Tuple[CombinedImage, Tuple[OverlapFinding, ...]]] = None
        self.log = get_logger("flashmap.store")

    def __contains__(self, key: object) -> bool:
        return key in self._images

    def __len__(self) -> int:
        return len(self._images)

    def __iter__(self) -> Iterator[SparseImage]:
        return iter(list(self._images.values()))

    def keys(self) -> List[str]:
        return list(self._images)

    def get(self, key: str) -> Optional[SparseImage]:
        return self._images.get(key)

    def add_image(self, image: SparseImage) -> None:
        if image.key in self._images:
            raise DuplicateKeyError(f"image already loaded: {image.key}")
        self._images[image.key] = image
        self._combined_cache = None
        self.log.dbg(
            "added image",
            field("key", image.key),
            field("ranges", len(image.ranges)),
            field("bytes", image.size),
        )

    def remove_image(self, key: str) -> None:
        if key not in self._images:
            self.log.dbg(f"remove ignored, image not loaded: {key}")
            return
        del self._images[key]
        self._combined_cache = None
        self.log.dbg("removed image", field("key", key))

    def replace_image(self, image: SparseImage) -> None:
        """Swap in a reloaded image; it becomes the most recently added."""
        self._images.pop(image.key, None)
        self._images[image.key] = image
        self._combined_cache = None
        self.log.dbg("replaced image", field("key", image.key))

    def clear(self) -> None:
        self._images.clear()
        self._combined_cache = None

    def combined(self) -> Tuple[CombinedImage, Tuple[OverlapFinding, ...]]:
        if self._combined_cache is not None:
            return self._combined_cache

        merged = AddressRangeSet()
        findings: List[OverlapFinding] = []
        for image in self._images.values():
            merged, findings = merged.union(
                image.ranges.tagged(image.key), Precedence.OTHER
            )

        self._combined_cache = (CombinedImage(merged), tuple(findings))
        self.log.dbg(
            "combined images",
            field("images", len(self._images)),
            field("ranges", len(merged)),
            field("overlaps", len(findings)),
        )
        return self._combined_cache

    def mcuboot_key(self, address: int = MCUBOOT_FW_START_ADDRESS) -> Optional[str]:
        """Key of the most recently added image with firmware at ``address``."""
        found = None
        for image in self._images.values():
            if image.starts_at(address):
                found = image.key
        return found

    def stale_keys(self, mtimes: Mapping[str, datetime]) -> List[str]:
        """Keys whose file changed on disk after the image was loaded."""
        stale = []
        for key, image in self._images.items():
            modified = mtimes.get(key)
            if modified is not None and image.loaded < modified:
                stale.append(key)
        return stale
