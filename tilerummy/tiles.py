from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Iterator, List, Tuple

MIN_NUMBER = 1
MAX_NUMBER = 13
WILDCARD_NUMBER = 251

_TILE_PATTERN = re.compile(r"^(?:(?P<number>\d+)(?P<color>[A-Z])|W(?:\((?P<rnumber>\d+)(?P<rcolor>[A-Z])\))?)$")


class Color(str, Enum):
    BLACK = "H"
    BLUE = "B"
    ORANGE = "O"
    RED = "R"

    @property
    def rank(self) -> int:
        return _COLOR_RANKS[self]

    @classmethod
    def ordered(cls) -> Tuple["Color", ...]:
        return _COLOR_ORDER

    @classmethod
    def from_letter(cls, letter: str) -> "Color":
        try:
            return cls(letter.upper())
        except ValueError:
            raise ValueError(f"unknown color {letter!r}") from None


_COLOR_ORDER = (Color.BLACK, Color.BLUE, Color.ORANGE, Color.RED)
_COLOR_RANKS = {color: rank for rank, color in enumerate(_COLOR_ORDER)}


@dataclass(frozen=True, eq=False)
class Tile:
    """A numbered, colored tile.

    Equality and hashing only look at ``number`` and ``color``: a wildcard
    resolved to red 7 compares equal to a genuine red 7. Tiles sort by color
    rank, then number, so a fresh wildcard (red, 251) sorts last.
    """

    number: int
    color: Color
    is_wildcard: bool = False

    def sort_key(self) -> Tuple[int, int]:
        return (self.color.rank, self.number)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tile):
            return NotImplemented
        return self.number == other.number and self.color == other.color

    def __hash__(self) -> int:
        return hash((self.number, self.color))

    def __lt__(self, other: "Tile") -> bool:
        return self.sort_key() < other.sort_key()

    def is_resolved(self) -> bool:
        return MIN_NUMBER <= self.number <= MAX_NUMBER

    def concrete(self) -> "Tile":
        return replace(self, is_wildcard=False)

    def __str__(self) -> str:
        if self.is_wildcard:
            if not self.is_resolved():
                return "W"
            return f"W({self.number}{self.color.value})"
        return f"{self.number}{self.color.value}"

    def __repr__(self) -> str:
        return f"Tile({self})"


def wildcard() -> Tile:
    return Tile(WILDCARD_NUMBER, Color.RED, True)


def resolved_wildcard(number: int, color: Color) -> Tile:
    return Tile(number, color, True)


def parse_tile(text: str) -> Tile:
    match = _TILE_PATTERN.match(text.strip().upper())
    if match is None:
        raise ValueError(f"invalid tile {text!r}")
    if match.group("number") is not None:
        number, letter, is_wildcard = match.group("number"), match.group("color"), False
    elif match.group("rnumber") is not None:
        number, letter, is_wildcard = match.group("rnumber"), match.group("rcolor"), True
    else:
        return wildcard()
    value = int(number)
    if not MIN_NUMBER <= value <= MAX_NUMBER:
        raise ValueError(f"tile number out of range in {text!r}")
    return Tile(value, Color.from_letter(letter), is_wildcard)


def parse_tiles(text: str) -> List[Tile]:
    return [parse_tile(token) for token in re.split(r"[\s,]+", text.strip()) if token]


def format_tiles(tiles: Iterable[Tile]) -> str:
    return " ".join(str(tile) for tile in tiles)


def iter_full_deck(copies: int, num_wildcards: int) -> Iterator[Tile]:
    for _ in range(copies):
        for color in Color.ordered():
            for number in range(MIN_NUMBER, MAX_NUMBER + 1):
                yield Tile(number, color)
    for _ in range(num_wildcards):
        yield wildcard()
