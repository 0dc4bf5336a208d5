from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import PurePath
from typing import List, Optional, Tuple

from ..core.ranges import AddressRangeSet, ByteRange

MCUBOOT_FW_START_ADDRESS = 0xC000


@dataclass(frozen=True)
class SparseImage:
    key: str
    ranges: AddressRangeSet
    modified: Optional[datetime] = None
    loaded: datetime = field(default_factory=datetime.now)

    @property
    def filename(self) -> str:
        return PurePath(self.key).name

    @property
    def size(self) -> int:
        return self.ranges.total_size

    def starts_at(self, address: int) -> bool:
        return any(rng.start == address for rng in self.ranges)

    @property
    def is_mcuboot(self) -> bool:
        """True when a block starts where MCUBoot expects the firmware."""
        return self.starts_at(MCUBOOT_FW_START_ADDRESS)

    def __repr__(self) -> str:
        return f"SparseImage(key={self.key!r}, ranges={len(self.ranges)}, bytes={self.size})"


@dataclass(frozen=True)
class CombinedImage:
    """Union of every loaded image, each range tagged with its sources."""

    ranges: AddressRangeSet = field(default_factory=AddressRangeSet)

    def __iter__(self):
        return iter(self.ranges)

    def __len__(self) -> int:
        return len(self.ranges)

    @property
    def total_size(self) -> int:
        return self.ranges.total_size

    def spans(self) -> List[Tuple[int, int]]:
        return self.ranges.spans()

    def find(self, address: int) -> Optional[ByteRange]:
        return self.ranges.find(address)

    def read(self, address: int, size: int) -> Optional[bytes]:
        return self.ranges.read(address, size)
