"""
intel hex loader - parses hex records into a sparse image using intelhex
"""

from __future__ import annotations

import io
from datetime import datetime
from typing import List, Optional, Union

from intelhex import AddressOverlapError, IntelHex, IntelHexError
from redlog import field, get_logger

from ..core.errors import FormatError, OverlapError
from ..core.ranges import ByteRange
from ..image.base import SparseImage
from .base import build_image

log = get_logger("flashmap.load.hex")


def parse_hex(
    key: str, data: Union[bytes, str], modified: Optional[datetime] = None
) -> SparseImage:
    """parse intel hex content into a sparse image"""
    raw = data.encode("latin-1") if isinstance(data, str) else bytes(data)

    try:
        text = raw.decode("ascii")
    except UnicodeDecodeError as exc:
        log.err("hex file is not ascii", field("key", key), field("offset", exc.start))
        raise FormatError(f"non-ascii byte in hex file {key}", offset=exc.start) from exc

    ih = IntelHex()
    try:
        ih.loadhex(io.StringIO(text, newline="\n"))
    except AddressOverlapError as exc:
        line = getattr(exc, "line", None)
        address = getattr(exc, "address", None)
        log.err(
            "hex file writes the same address twice",
            field("key", key),
            field("line", line),
        )
        raise OverlapError(
            f"hex file {key} overlaps itself at line {line} "
            f"(byte offset {_line_offset(raw, line)})",
            address=address,
        ) from exc
    except IntelHexError as exc:
        line = getattr(exc, "line", None)
        offset = _line_offset(raw, line)
        log.err(f"could not parse hex file: {exc}", field("key", key), field("line", line))
        raise FormatError(f"{key}: {exc}", offset=offset, line=line) from exc

    blocks: List[ByteRange] = [
        ByteRange(start, ih.gets(start, end - start)) for start, end in ih.segments()
    ]
    return build_image(key, blocks, modified)


def _line_offset(raw: bytes, line: Optional[int]) -> Optional[int]:
    """byte offset where 1-based ``line`` starts"""
    if line is None:
        return None
    offset = 0
    for _ in range(line - 1):
        newline = raw.find(b"\n", offset)
        if newline < 0:
            return len(raw)
        offset = newline + 1
    return offset
