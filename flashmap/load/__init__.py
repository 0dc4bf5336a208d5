"""
flashmap.load - format-specific image parsers
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path, PurePath
from typing import Optional, Union

from ..image.base import SparseImage
from .bin_loader import parse_bin
from .elf_loader import parse_elf
from .hex_loader import parse_hex

HEX_SUFFIXES = {".hex", ".ihex"}
ELF_SUFFIXES = {".elf", ".axf", ".out"}


def parse_image(
    key: str, data: bytes, modified: Optional[datetime] = None
) -> SparseImage:
    """Pick a parser from the suffix of ``key``."""
    suffix = PurePath(key).suffix.lower()
    if suffix in HEX_SUFFIXES:
        return parse_hex(key, data, modified)
    if suffix in ELF_SUFFIXES:
        return parse_elf(key, data, modified)
    return parse_bin(key, data, modified=modified)


def read_image(path: Union[str, Path]) -> SparseImage:
    """Read a file and parse it, recording its modification time."""
    image_path = Path(path)
    if not image_path.exists():
        raise FileNotFoundError(f"image file not found: {image_path}")
    modified = datetime.fromtimestamp(image_path.stat().st_mtime)
    return parse_image(str(image_path), image_path.read_bytes(), modified)


__all__ = [
    "HEX_SUFFIXES",
    "ELF_SUFFIXES",
    "parse_bin",
    "parse_elf",
    "parse_hex",
    "parse_image",
    "read_image",
]
