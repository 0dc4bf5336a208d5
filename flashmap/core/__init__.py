from .device import DeviceInfo
from .errors import DuplicateKeyError, FlashmapError, FormatError, OverlapError
from .ranges import (
    ADDRESS_SPACE_LIMIT,
    AddressRangeSet,
    ByteRange,
    OverlapFinding,
    Precedence,
)

__all__ = [
    "ADDRESS_SPACE_LIMIT",
    "AddressRangeSet",
    "ByteRange",
    "OverlapFinding",
    "Precedence",
    "DeviceInfo",
    "DuplicateKeyError",
    "FlashmapError",
    "FormatError",
    "OverlapError",
]
