from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from .tiles import MAX_NUMBER, MIN_NUMBER, Color, Tile

MIN_MELD_SIZE = 3


class TilesType(str, Enum):
    PURE_COLOR = "PURE_COLOR"
    MIXED_COLOR = "MIXED_COLOR"


@dataclass(frozen=True)
class TileSetInfo:
    tiles_type: TilesType
    start: int
    end: int
    color: Optional[Color] = None

    @classmethod
    def default(cls) -> "TileSetInfo":
        return cls(TilesType.MIXED_COLOR, MIN_NUMBER, MAX_NUMBER, None)


def wildcard_count(tiles: Iterable[Tile]) -> int:
    return sum(1 for tile in tiles if tile.is_wildcard)


def concrete_tiles(tiles: Iterable[Tile]) -> List[Tile]:
    return [tile for tile in tiles if not tile.is_wildcard]


def get_colors_count(tiles: Iterable[Tile]) -> int:
    return len({tile.color for tile in tiles if not tile.is_wildcard})


def get_tiles_type(tiles: Sequence[Tile]) -> TilesType:
    if get_colors_count(tiles) == 1:
        return TilesType.PURE_COLOR
    return TilesType.MIXED_COLOR


def get_range(tiles: Iterable[Tile]) -> Tuple[int, int]:
    numbers = [tile.number for tile in tiles if not tile.is_wildcard]
    if not numbers:
        return MIN_NUMBER, MAX_NUMBER
    return min(numbers), max(numbers)


def tile_set_info(tiles: Sequence[Tile]) -> TileSetInfo:
    tiles_type = get_tiles_type(tiles)
    start, end = get_range(tiles)
    color = None
    if tiles_type == TilesType.PURE_COLOR:
        color = concrete_tiles(tiles)[0].color
    return TileSetInfo(tiles_type, start, end, color)


def _numbers_in_range(tiles: Sequence[Tile]) -> bool:
    return all(MIN_NUMBER <= tile.number <= MAX_NUMBER for tile in tiles)


def is_valid_run(tiles: Sequence[Tile]) -> bool:
    if len(tiles) < MIN_MELD_SIZE or not _numbers_in_range(tiles):
        return False
    if len({tile.color for tile in tiles}) != 1:
        return False
    numbers = sorted(tile.number for tile in tiles)
    value = numbers[0]
    for number in numbers:
        if number != value:
            return False
        value += 1
    return True


def is_valid_group(tiles: Sequence[Tile]) -> bool:
    if len(tiles) < MIN_MELD_SIZE or not _numbers_in_range(tiles):
        return False
    if len({tile.number for tile in tiles}) != 1:
        return False
    colors = {tile.color for tile in tiles}
    return len(colors) >= MIN_MELD_SIZE and len(colors) == len(tiles)


def is_valid_meld(tiles: Sequence[Tile]) -> bool:
    return is_valid_run(tiles) or is_valid_group(tiles)


def is_valid_pure_color_tiles(tiles_set: Iterable[Sequence[Tile]]) -> bool:
    return all(is_valid_run(tiles) for tiles in tiles_set)


def is_valid_mixed_color_tiles(tiles_set: Iterable[Sequence[Tile]]) -> bool:
    return all(is_valid_group(tiles) for tiles in tiles_set)


def meld_reason(tiles: Sequence[Tile]) -> Tuple[bool, str]:
    """Explain why ``tiles`` is or is not a meld, in the ``(ok, reason)`` form."""
    if len(tiles) < MIN_MELD_SIZE:
        return False, "meld too short"
    if not _numbers_in_range(tiles):
        return False, "unresolved wildcard"
    if is_valid_meld(tiles):
        return True, ""
    if get_tiles_type(tiles) == TilesType.PURE_COLOR:
        return False, "run must be consecutive"
    return False, "group must share one number with distinct colors"
