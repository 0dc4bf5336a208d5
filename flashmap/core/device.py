from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class DeviceInfo:
    """Memory layout reported by the connected target."""

    rom_size: int
    page_size: int
    uicr_base_address: int
    bootloader_address: Optional[int] = None
    softdevice_size: Optional[int] = None

    @property
    def uicr_end(self) -> int:
        return self.uicr_base_address + self.page_size

    def in_uicr(self, start: int, end: int) -> bool:
        """True when ``[start, end)`` lies entirely inside the UICR page."""
        return self.uicr_base_address <= start and end <= self.uicr_end

    def is_outside_writable(self, start: int, end: int) -> bool:
        if start < self.uicr_base_address:
            return end > self.rom_size
        return end > self.uicr_end

    def __repr__(self) -> str:
        bootloader = (
            f"0x{self.bootloader_address:x}"
            if self.bootloader_address is not None
            else None
        )
        return (
            f"DeviceInfo(rom_size=0x{self.rom_size:x}, page_size=0x{self.page_size:x}, "
            f"uicr=0x{self.uicr_base_address:x}, bootloader={bootloader})"
        )
