from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from itertools import product
from typing import Dict, List, Optional, Sequence, Tuple

from .meld import (
    TileSetInfo,
    TilesType,
    concrete_tiles,
    get_range,
    get_tiles_type,
    is_valid_mixed_color_tiles,
    is_valid_pure_color_tiles,
    tile_set_info,
    wildcard_count,
)
from .operation import Command, GameOperation
from .rules import Ruleset
from .tiles import MAX_NUMBER, MIN_NUMBER, Color, Tile, format_tiles, resolved_wildcard, wildcard

logger = logging.getLogger(__name__)

Board = List[List[Tile]]


def _empty_board() -> Board:
    return [[]]


def _empty_info() -> List[TileSetInfo]:
    return [TileSetInfo.default()]


@dataclass
class Game:
    """Board of a single player: slot 0 is the hand, slots 1..N are melds.

    Every meld slot is kept sorted and has a cached ``TileSetInfo`` at the
    same index. The board is only mutated through ``operate`` and ``reset``.
    """

    ruleset: Ruleset = field(default_factory=Ruleset)
    board: Board = field(default_factory=_empty_board)
    tiles_set_info: List[TileSetInfo] = field(default_factory=_empty_info)

    @classmethod
    def from_board(cls, board: Sequence[Sequence[Tile]], ruleset: Optional[Ruleset] = None) -> "Game":
        game = cls(ruleset=ruleset or Ruleset())
        if board:
            game.board = [list(board[0])] + [sorted(tiles) for tiles in board[1:]]
            game.tiles_set_info = _empty_info() + [tile_set_info(tiles) for tiles in game.board[1:]]
        return game

    def validate_index(self, idx: int) -> bool:
        return 0 <= idx < len(self.board)

    def get_board(self) -> Board:
        return [list(tiles) for tiles in self.board]

    def get_tiles_set_info(self) -> List[TileSetInfo]:
        return list(self.tiles_set_info)

    def reset(self) -> None:
        self.board = _empty_board()
        self.tiles_set_info = _empty_info()

    # --- Operations -----------------------------------------------------------

    def is_legal_operation(self, operation: GameOperation) -> Tuple[bool, str]:
        if operation.command == Command.PUT:
            if not operation.tiles:
                return False, "cannot put an empty meld"
            return True, ""

        if not self.validate_index(operation.index):
            return False, f"slot {operation.index} does not exist"

        if operation.command == Command.REPLACE:
            if operation.index == 0:
                return False, "cannot replace wildcards in the hand"
            if operation.replace_tiles is None:
                return False, "replace needs replacement tiles"
            if any(tile.is_wildcard for tile in operation.replace_tiles):
                return False, "replacement tiles must not be wildcards"
            count = wildcard_count(self.board[operation.index])
            if count != len(operation.replace_tiles):
                return False, (
                    f"slot {operation.index} holds {count} wildcards, "
                    f"got {len(operation.replace_tiles)} replacement tiles"
                )
        return True, ""

    def operate(self, operation: GameOperation) -> None:
        legal, reason = self.is_legal_operation(operation)
        if not legal:
            raise ValueError(f"illegal operation: {reason}")

        logger.debug(
            "%s slot=%d tiles=[%s]", operation.command.value, operation.index, format_tiles(operation.tiles)
        )
        if operation.command == Command.PUT:
            self._push_tiles(sorted(operation.tiles))
        elif operation.command == Command.REPLACE:
            self._apply_replace(operation)
        else:
            self._apply_extend(operation.index, operation.tiles)

    def _apply_replace(self, operation: GameOperation) -> None:
        index = operation.index
        count = wildcard_count(self.board[index])
        self.board[index] = self.replace_wildcards(self.board[index], operation.replace_tiles or ())
        self._set_tiles_set_info(index)

        freed = list(operation.tiles) + [wildcard() for _ in range(count)]
        for tiles in self.wildcard_to_tiles(freed):
            if tiles:
                self._push_tiles(tiles)

    def _apply_extend(self, index: int, tiles: Sequence[Tile]) -> None:
        slot = sorted(self.board[index] + list(tiles))
        if index == 0:
            self.board[0] = slot
            return

        groups = self.wildcard_to_tiles(slot)
        self.board[index] = groups[0]
        self._set_tiles_set_info(index)
        for extra in groups[1:]:
            self._push_tiles(extra)

    def _push_tiles(self, tiles: List[Tile]) -> None:
        self.board.append(tiles)
        self.tiles_set_info.append(tile_set_info(tiles))

    def _set_tiles_set_info(self, index: int) -> None:
        self.tiles_set_info[index] = tile_set_info(self.board[index])

    @staticmethod
    def replace_wildcards(tiles: Sequence[Tile], replace_tiles: Sequence[Tile]) -> List[Tile]:
        replacements = iter(replace_tiles)
        result = []
        for tile in tiles:
            if tile.is_wildcard:
                replacement = next(replacements, None)
                if replacement is not None:
                    tile = replacement.concrete()
            result.append(tile)
        return sorted(result)

    # --- Splitting ------------------------------------------------------------

    def check_and_split(self, tiles: Sequence[Tile]) -> List[List[Tile]]:
        """Split an over-long tile set that encodes two melds.

        Sets shorter than ``split_threshold`` come back unchanged as the only
        element of the result. Empty halves are dropped.
        """
        tiles = sorted(tiles)
        if len(tiles) < self.ruleset.split_threshold:
            return [tiles]

        if get_tiles_type(tiles) == TilesType.PURE_COLOR:
            halves = self._split_pure_color_tiles(tiles)
        else:
            halves = self._split_mixed_color_tiles(tiles)
        result = [sorted(half) for half in halves if half]
        if len(result) > 1:
            logger.debug("split [%s] into %s", format_tiles(tiles), " | ".join(format_tiles(h) for h in result))
        return result

    @staticmethod
    def _split_pure_color_tiles(tiles: List[Tile]) -> List[List[Tile]]:
        last_repeat = 0
        for i in range(1, len(tiles)):
            if tiles[i] == tiles[i - 1]:
                last_repeat = i
        if last_repeat == 0:
            return [tiles]

        first = [tiles[0]]
        second = []
        for i in range(1, len(tiles)):
            if i >= last_repeat or tiles[i] == tiles[i - 1]:
                second.append(tiles[i])
            else:
                first.append(tiles[i])
        return [first, second]

    @staticmethod
    def _split_mixed_color_tiles(tiles: List[Tile]) -> List[List[Tile]]:
        by_color: Dict[Color, List[int]] = {color: [] for color in Color.ordered()}
        by_number: Dict[int, List[int]] = {}
        for i, tile in enumerate(tiles):
            by_color[tile.color].append(i)
            by_number.setdefault(tile.number, []).append(i)

        first: List[Tile] = []
        second: List[Tile] = []
        if max(len(indices) for indices in by_color.values()) <= 2:
            # several groups of the same number
            for color in Color.ordered():
                indices = by_color[color]
                if len(indices) > 1:
                    first.append(tiles[indices[0]])
                    second.append(tiles[indices[1]])
                elif indices and len(first) < len(second):
                    first.append(tiles[indices[0]])
                elif indices:
                    second.append(tiles[indices[0]])
            return [first, second]

        # one group plus tiles of other numbers
        number = max(by_number, key=lambda n: len(by_number[n]))
        first = [tiles[i] for i in by_number[number]]
        second = [tile for tile in tiles if tile.number != number]
        return [first, second]

    # --- Wildcard resolution --------------------------------------------------

    def wildcard_to_tiles(self, tiles: Sequence[Tile]) -> List[List[Tile]]:
        count = wildcard_count(tiles)
        if count == 0:
            return self.check_and_split(tiles)

        rest = concrete_tiles(tiles)
        if not rest or count > self.ruleset.max_wildcards_per_meld:
            logger.debug("leaving wildcards unresolved in [%s]", format_tiles(tiles))
            return [sorted(tiles)]

        if get_tiles_type(rest) == TilesType.PURE_COLOR:
            resolved = self._resolve_pure_color(rest, count)
        else:
            resolved = self._resolve_mixed_color(rest, count)

        if resolved is None:
            logger.debug("no wildcard placement for [%s]", format_tiles(tiles))
            return self.check_and_split(tiles)
        return resolved

    def _resolve_pure_color(self, rest: List[Tile], count: int) -> Optional[List[List[Tile]]]:
        color = rest[0].color
        low, high = get_range(rest)
        numbers = range(max(MIN_NUMBER, low - 1), min(MAX_NUMBER, high + 1) + 1)
        ranges = [numbers]
        if count == 2:
            ranges.append(range(max(MIN_NUMBER, low - 2), min(MAX_NUMBER, high + 2) + 1))

        for assignment in product(*ranges):
            trial = rest + [resolved_wildcard(number, color) for number in assignment]
            tiles_set = self.check_and_split(trial)
            if is_valid_pure_color_tiles(tiles_set):
                return tiles_set
        return None

    def _resolve_mixed_color(self, rest: List[Tile], count: int) -> Optional[List[List[Tile]]]:
        number = Counter(tile.number for tile in rest).most_common(1)[0][0]
        for assignment in product(Color.ordered(), repeat=count):
            trial = rest + [resolved_wildcard(number, color) for color in assignment]
            tiles_set = self.check_and_split(trial)
            if is_valid_mixed_color_tiles(tiles_set):
                return tiles_set
        return None
