from __future__ import annotations

from datetime import datetime
from typing import Iterable, Optional

from redlog import field, get_logger

from ..core.ranges import AddressRangeSet, ByteRange
from ..image.base import SparseImage

log = get_logger("flashmap.load")


def build_image(
    key: str, blocks: Iterable[ByteRange], modified: Optional[datetime] = None
) -> SparseImage:
    """Assemble parsed blocks into an image, logging every block."""
    ranges = AddressRangeSet(blocks)
    for rng in ranges:
        log.dbg(
            f"data block {rng.start:08X}-{rng.end:08X} ({rng.length:08X} bytes long)"
        )
    log.info(
        "parsed image",
        field("key", key),
        field("blocks", len(ranges)),
        field("bytes", ranges.total_size),
    )
    return SparseImage(key=key, ranges=ranges, modified=modified)
