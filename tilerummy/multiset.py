from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Sequence

from .tiles import MAX_NUMBER, MIN_NUMBER, Color, Tile

_VALUES = MAX_NUMBER - MIN_NUMBER + 1
WILDCARD_SLOT = len(Color.ordered()) * _VALUES
MULTISET_SIZE = WILDCARD_SLOT + 1


def slot_of(tile: Tile) -> int:
    if tile.is_wildcard:
        return WILDCARD_SLOT
    return tile.color.rank * _VALUES + (tile.number - MIN_NUMBER)


@dataclass
class TileMultiset:
    """Counts of concrete (color, number) pairs, plus one bucket for wildcards.

    A wildcard counts as a wildcard whatever it has been resolved to.
    """

    counts: List[int]

    def __post_init__(self) -> None:
        if len(self.counts) != MULTISET_SIZE:
            raise ValueError(f"multiset length must be {MULTISET_SIZE}")
        if any(c < 0 for c in self.counts):
            raise ValueError("multiset counts must be non-negative")

    @classmethod
    def empty(cls) -> "TileMultiset":
        return cls([0] * MULTISET_SIZE)

    @classmethod
    def from_tiles(cls, tiles: Iterable[Tile]) -> "TileMultiset":
        counts = [0] * MULTISET_SIZE
        for tile in tiles:
            counts[slot_of(tile)] += 1
        return cls(counts)

    @classmethod
    def from_board(cls, board: Iterable[Sequence[Tile]]) -> "TileMultiset":
        return cls.from_tiles(tile for tiles in board for tile in tiles)

    def add(self, other: "TileMultiset") -> "TileMultiset":
        return TileMultiset([a + b for a, b in zip(self.counts, other.counts)])

    def sub(self, other: "TileMultiset") -> "TileMultiset":
        if any(a < b for a, b in zip(self.counts, other.counts)):
            raise ValueError("cannot subtract: negative counts")
        return TileMultiset([a - b for a, b in zip(self.counts, other.counts)])

    def wildcards(self) -> int:
        return self.counts[WILDCARD_SLOT]

    def total(self) -> int:
        return sum(self.counts)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, TileMultiset) and self.counts == other.counts
