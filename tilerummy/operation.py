from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Sequence, Tuple

from .tiles import Tile

NEW_MELD = -1


class Command(str, Enum):
    ADD = "ADD"
    PUT = "PUT"
    DRAW = "DRAW"
    REPLACE = "REPLACE"


@dataclass(frozen=True)
class GameOperation:
    command: Command
    index: int
    tiles: Tuple[Tile, ...] = field(default_factory=tuple)
    replace_tiles: Optional[Tuple[Tile, ...]] = None

    @staticmethod
    def put(tiles: Sequence[Tile]) -> "GameOperation":
        return GameOperation(Command.PUT, NEW_MELD, tuple(tiles))

    @staticmethod
    def add(index: int, tiles: Sequence[Tile]) -> "GameOperation":
        return GameOperation(Command.ADD, index, tuple(tiles))

    @staticmethod
    def draw(tiles: Sequence[Tile]) -> "GameOperation":
        return GameOperation(Command.DRAW, 0, tuple(tiles))

    @staticmethod
    def replace(index: int, tiles: Sequence[Tile], replace_tiles: Sequence[Tile]) -> "GameOperation":
        return GameOperation(Command.REPLACE, index, tuple(tiles), tuple(replace_tiles))
