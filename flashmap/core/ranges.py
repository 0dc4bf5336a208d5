from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, replace
from enum import Enum
from itertools import chain
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from .errors import FormatError, OverlapError

ADDRESS_SPACE_LIMIT = 1 << 32


@dataclass(frozen=True)
class ByteRange:
    start: int
    data: bytes
    sources: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", bytes(self.data))
        object.__setattr__(self, "sources", tuple(self.sources))
        if not self.data:
            raise FormatError(f"empty range at 0x{self.start:08x}")
        if self.start < 0 or self.end > ADDRESS_SPACE_LIMIT:
            raise FormatError(
                f"range 0x{self.start:x}-0x{self.end:x} exceeds the 32-bit address space"
            )

    @property
    def length(self) -> int:
        return len(self.data)

    @property
    def end(self) -> int:
        return self.start + len(self.data)

    def contains(self, address: int, size: int = 1) -> bool:
        if size <= 0:
            return False
        return self.start <= address and (address + size) <= self.end

    def intersects(self, other: "ByteRange") -> bool:
        return self.start < other.end and other.start < self.end

    def __repr__(self) -> str:
        return (
            f"ByteRange(0x{self.start:08x}-0x{self.end:08x}, "
            f"sources={list(self.sources)})"
        )


@dataclass(frozen=True)
class OverlapFinding:
    """bytes written by more than one source image"""

    start: int
    length: int
    sources: Tuple[str, ...]

    @property
    def end(self) -> int:
        return self.start + self.length


class Precedence(Enum):
    """which side of a union wins bytes covered by both"""

    SELF = "self"
    OTHER = "other"


class _Cursor:
    """forward-only lookup over sorted disjoint ranges"""

    def __init__(self, ranges: Sequence[ByteRange]):
        self._ranges = ranges
        self._index = 0

    def covering(self, address: int) -> Optional[ByteRange]:
        while (
            self._index < len(self._ranges)
            and self._ranges[self._index].end <= address
        ):
            self._index += 1
        if self._index < len(self._ranges):
            candidate = self._ranges[self._index]
            if candidate.start <= address:
                return candidate
        return None


def _merge_sources(first: Tuple[str, ...], second: Tuple[str, ...]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(first + second))


class AddressRangeSet:
    """sorted container of disjoint byte ranges"""

    def __init__(self, ranges: Iterable[ByteRange] = ()):
        ordered = sorted(ranges, key=lambda r: r.start)
        for prev, cur in zip(ordered, ordered[1:]):
            if cur.start < prev.end:
                raise OverlapError(
                    f"range at 0x{cur.start:08x} overlaps "
                    f"0x{prev.start:08x}-0x{prev.end:08x}",
                    address=cur.start,
                )
        self._ranges: Tuple[ByteRange, ...] = tuple(ordered)
        self._starts: List[int] = [r.start for r in ordered]

    @classmethod
    def _from_sorted(cls, ranges: Iterable[ByteRange]) -> "AddressRangeSet":
        instance = cls.__new__(cls)
        instance._ranges = tuple(ranges)
        instance._starts = [r.start for r in instance._ranges]
        return instance

    def __iter__(self) -> Iterator[ByteRange]:
        return iter(self._ranges)

    def __len__(self) -> int:
        return len(self._ranges)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AddressRangeSet):
            return NotImplemented
        return self._ranges == other._ranges

    def __hash__(self) -> int:
        return hash(self._ranges)

    def __repr__(self) -> str:
        return f"AddressRangeSet(ranges={len(self._ranges)}, bytes={self.total_size})"

    @property
    def ranges(self) -> Tuple[ByteRange, ...]:
        return self._ranges

    @property
    def total_size(self) -> int:
        return sum(r.length for r in self._ranges)

    @property
    def start(self) -> Optional[int]:
        return self._ranges[0].start if self._ranges else None

    @property
    def end(self) -> Optional[int]:
        return self._ranges[-1].end if self._ranges else None

    def insert(self, byte_range: ByteRange) -> "AddressRangeSet":
        """return a new set with ``byte_range`` added"""
        idx = bisect_right(self._starts, byte_range.start)
        neighbours = []
        if idx > 0:
            neighbours.append(self._ranges[idx - 1])
        if idx < len(self._ranges):
            neighbours.append(self._ranges[idx])
        for existing in neighbours:
            if existing.intersects(byte_range):
                address = max(existing.start, byte_range.start)
                raise OverlapError(
                    f"range 0x{byte_range.start:08x}-0x{byte_range.end:08x} overlaps "
                    f"0x{existing.start:08x}-0x{existing.end:08x}",
                    address=address,
                )
        return AddressRangeSet._from_sorted(
            self._ranges[:idx] + (byte_range,) + self._ranges[idx:]
        )

    def find(self, address: int) -> Optional[ByteRange]:
        idx = bisect_right(self._starts, address) - 1
        if idx >= 0 and self._ranges[idx].contains(address):
            return self._ranges[idx]
        return None

    def read(self, address: int, size: int) -> Optional[bytes]:
        """read ``size`` bytes, or None if any byte is not covered"""
        if size <= 0:
            return None
        idx = bisect_right(self._starts, address) - 1
        if idx < 0:
            return None
        end = address + size
        current = address
        out = bytearray()
        for rng in self._ranges[idx:]:
            if rng.end <= current:
                continue
            if rng.start > current:
                return None
            chunk_end = min(rng.end, end)
            out += rng.data[current - rng.start : chunk_end - rng.start]
            current = chunk_end
            if current >= end:
                return bytes(out)
        return None

    def contains(self, address: int, size: int = 1) -> bool:
        return self.read(address, size) is not None

    def spans(self) -> List[Tuple[int, int]]:
        """maximal contiguous ``(start, end)`` runs of covered bytes"""
        spans: List[Tuple[int, int]] = []
        for rng in self._ranges:
            if spans and spans[-1][1] == rng.start:
                spans[-1] = (spans[-1][0], rng.end)
            else:
                spans.append((rng.start, rng.end))
        return spans

    def tagged(self, key: str) -> "AddressRangeSet":
        return AddressRangeSet._from_sorted(
            replace(rng, sources=(key,)) for rng in self._ranges
        )

    def overlaps(self) -> List[OverlapFinding]:
        findings: List[OverlapFinding] = []
        for rng in self._ranges:
            if len(rng.sources) < 2:
                continue
            last = findings[-1] if findings else None
            if last and last.end == rng.start and last.sources == rng.sources:
                findings[-1] = OverlapFinding(
                    last.start, last.length + rng.length, last.sources
                )
            else:
                findings.append(OverlapFinding(rng.start, rng.length, rng.sources))
        return findings

    def union(
        self, other: "AddressRangeSet", precedence: Precedence = Precedence.OTHER
    ) -> Tuple["AddressRangeSet", List[OverlapFinding]]:
        """combine two sets, splitting ranges at every intersection boundary.

        Bytes covered by both sides take the payload of the winning side and
        the sources of both, receiver first. Adjacent pieces with identical
        sources are coalesced. Returns the combined set and the overlap
        findings derived from it.
        """
        points = sorted(
            {p for rng in chain(self._ranges, other._ranges) for p in (rng.start, rng.end)}
        )
        mine = _Cursor(self._ranges)
        theirs = _Cursor(other._ranges)

        # [start, payload, sources] accumulators
        pieces: List[list] = []
        for lo, hi in zip(points, points[1:]):
            a = mine.covering(lo)
            b = theirs.covering(lo)
            if a is None and b is None:
                continue
            if a is not None and b is not None:
                winner = b if precedence is Precedence.OTHER else a
                sources = _merge_sources(a.sources, b.sources)
            else:
                winner = a if a is not None else b
                sources = winner.sources
            chunk = winner.data[lo - winner.start : hi - winner.start]

            if pieces:
                last = pieces[-1]
                if last[0] + len(last[1]) == lo and last[2] == sources:
                    last[1] += chunk
                    continue
            pieces.append([lo, bytearray(chunk), sources])

        combined = AddressRangeSet._from_sorted(
            ByteRange(start, bytes(payload), sources) for start, payload, sources in pieces
        )
        return combined, combined.overlaps()
