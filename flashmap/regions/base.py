from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Optional


class RegionName(Enum):
    APPLICATION = "Application"
    SOFTDEVICE = "SoftDevice"
    BOOTLOADER = "Bootloader"
    NONE = "None"

    @property
    def color(self) -> "RegionColor":
        return RegionColor[self.name]


class RegionColor(Enum):
    """display tags for the address map"""

    APPLICATION = "#4caf50"
    SOFTDEVICE = "#2196f3"
    BOOTLOADER = "#ff9800"
    NONE = "#c6c6c6"


@dataclass(frozen=True)
class Region:
    name: RegionName
    start: int
    size: int
    sources: FrozenSet[str] = field(default_factory=frozenset)
    color: Optional[RegionColor] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "sources", frozenset(self.sources))
        if self.color is None:
            object.__setattr__(self, "color", self.name.color)

    @property
    def end(self) -> int:
        return self.start + self.size

    def contains(self, address: int, size: int = 1) -> bool:
        if size <= 0:
            return False
        return self.start <= address and (address + size) <= self.end

    def intersects(self, other: "Region") -> bool:
        return self.start < other.end and other.start < self.end

    def widened(self, start: int, end: int, sources: Iterable[str] = ()) -> "Region":
        return Region(
            name=self.name,
            start=start,
            size=end - start,
            sources=self.sources | frozenset(sources),
            color=self.color,
        )

    def __repr__(self) -> str:
        return (
            f"Region({self.name.name}, 0x{self.start:08x}-0x{self.end:08x}, "
            f"sources={sorted(self.sources)})"
        )
