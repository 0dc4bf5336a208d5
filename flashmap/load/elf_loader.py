"""
elf loader - extracts loadable segments at their physical addresses using lief
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

import lief
from redlog import field, get_logger

from ..core.errors import FormatError
from ..core.ranges import ByteRange
from ..image.base import SparseImage
from .base import build_image

ELF_MAGIC = b"\x7fELF"

log = get_logger("flashmap.load.elf")


def parse_elf(
    key: str, data: bytes, modified: Optional[datetime] = None
) -> SparseImage:
    """parse an elf file into a sparse image of its PT_LOAD contents"""
    if data[:4] != ELF_MAGIC:
        log.err("missing elf magic", field("key", key))
        raise FormatError(f"{key} is not an elf file", offset=0)

    binary = lief.ELF.parse(list(data))
    if binary is None:
        log.err("lief failed to parse elf", field("key", key))
        raise FormatError(f"failed to parse elf file: {key}", offset=0)

    blocks: List[ByteRange] = []
    for seg in binary.segments:
        if seg.type != lief.ELF.Segment.TYPE.LOAD:
            continue
        # bss-only segments have nothing to flash
        content = bytes(seg.content)
        if not content:
            continue
        address = int(seg.physical_address)
        log.dbg(
            "load segment",
            field("paddr", f"0x{address:x}"),
            field("vaddr", f"0x{int(seg.virtual_address):x}"),
            field("size", len(content)),
        )
        blocks.append(ByteRange(address, content))

    return build_image(key, blocks, modified)
