from __future__ import annotations

from datetime import datetime
from typing import Optional

from redlog import field, get_logger

from ..core.errors import FormatError
from ..core.ranges import ByteRange
from ..image.base import SparseImage
from .base import build_image

log = get_logger("flashmap.load.bin")


def parse_bin(
    key: str,
    data: bytes,
    base_address: int = 0,
    modified: Optional[datetime] = None,
) -> SparseImage:
    """Place a raw binary image at ``base_address``."""
    if not data:
        log.err("binary image is empty", field("key", key))
        raise FormatError(f"binary image {key} is empty", offset=0)
    return build_image(key, [ByteRange(base_address, data)], modified)
