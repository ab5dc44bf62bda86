from __future__ import annotations

import logging
from itertools import combinations, combinations_with_replacement
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .game import Game
from .meld import (
    MIN_MELD_SIZE,
    TilesType,
    concrete_tiles,
    is_valid_meld,
    meld_reason,
    tile_set_info,
    wildcard_count,
)
from .multiset import TileMultiset
from .rules import Ruleset
from .tiles import MAX_NUMBER, MIN_NUMBER, Color, Tile, format_tiles, resolved_wildcard, wildcard

logger = logging.getLogger(__name__)

Meld = List[Tile]


def _bucket(tiles: Sequence[Tile]) -> Dict[Tile, List[Tile]]:
    # concrete tiles are taken before wildcards resolved to the same value
    buckets: Dict[Tile, List[Tile]] = {}
    for tile in sorted(tiles, key=lambda t: t.is_wildcard):
        buckets.setdefault(tile, []).append(tile)
    return buckets


def _leftover(buckets: Dict[Tile, List[Tile]]) -> List[Tile]:
    return sorted(tile for bucket in buckets.values() for tile in bucket)


def get_available_pure_color_tiles_sets(tiles: Sequence[Tile]) -> Tuple[List[Meld], List[Tile]]:
    """Greedily take every run formable from ``tiles``.

    Each pass takes one copy of every maximal streak of consecutive numbers
    per color; passes repeat until a pass finds nothing, so duplicate copies
    can form a second run. Returns the runs and the tiles left over.
    """
    buckets = _bucket(tiles)
    sets: List[Meld] = []
    found = True
    while found:
        found = False
        for color in Color.ordered():
            streak: List[Tile] = []
            for number in range(MIN_NUMBER, MAX_NUMBER + 2):
                key = Tile(number, color)
                if buckets.get(key):
                    streak.append(key)
                    continue
                if len(streak) >= MIN_MELD_SIZE:
                    sets.append([buckets[k].pop(0) for k in streak])
                    found = True
                streak = []
    return sets, _leftover(buckets)


def get_available_mixed_colors_tiles_sets(tiles: Sequence[Tile]) -> Tuple[List[Meld], List[Tile]]:
    """Greedily take every group (one tile per color, same number) from ``tiles``."""
    buckets = _bucket(tiles)
    sets: List[Meld] = []
    for number in range(MIN_NUMBER, MAX_NUMBER + 1):
        while True:
            keys = [Tile(number, color) for color in Color.ordered() if buckets.get(Tile(number, color))]
            if len(keys) < MIN_MELD_SIZE:
                break
            sets.append([buckets[k].pop(0) for k in keys])
    return sets, _leftover(buckets)


def _extract(tiles: Sequence[Tile]) -> Tuple[List[Meld], List[Tile]]:
    runs, rest = get_available_pure_color_tiles_sets(tiles)
    groups, rest = get_available_mixed_colors_tiles_sets(rest)
    return runs + groups, rest


def _pool_key(pool: Sequence[Tile]) -> str:
    tiles = ",".join(str(tile) for tile in sorted(concrete_tiles(pool)))
    return f"{tiles}|{wildcard_count(pool)}"


def _remove_tiles(pool: Sequence[Tile], meld: Sequence[Tile]) -> List[Tile]:
    remaining = list(pool)
    for tile in meld:
        if tile.is_wildcard:
            idx = next(i for i, t in enumerate(remaining) if t.is_wildcard)
        else:
            idx = next(i for i, t in enumerate(remaining) if not t.is_wildcard and t == tile)
        del remaining[idx]
    return remaining


def _by_cost(melds: List[Meld]) -> List[Meld]:
    return sorted(melds, key=lambda m: (wildcard_count(m), -len(m)))


def _group_candidates(anchor: Tile, present: Set[Tile], budget: int) -> List[Meld]:
    others = [color for color in Color.ordered() if color != anchor.color]
    found: List[Meld] = []
    for size in range(MIN_MELD_SIZE, len(others) + 2):
        for combo in combinations(others, size - 1):
            tiles = [Tile(anchor.number, color) for color in combo]
            missing = [tile for tile in tiles if tile not in present]
            if len(missing) > budget:
                continue
            meld = [anchor] + [
                resolved_wildcard(tile.number, tile.color) if tile in missing else tile for tile in tiles
            ]
            found.append(sorted(meld))
    return _by_cost(found)


def _run_candidates(anchor: Tile, present: Set[Tile], budget: int) -> List[Meld]:
    color, number = anchor.color, anchor.number
    longest = MAX_NUMBER - MIN_NUMBER + 1
    found: List[Meld] = []
    for start in range(max(MIN_NUMBER, number - longest + 1), number + 1):
        for end in range(max(start + MIN_MELD_SIZE - 1, number), MAX_NUMBER + 1):
            numbers = range(start, end + 1)
            missing = [n for n in numbers if Tile(n, color) not in present]
            if len(missing) > budget:
                break
            found.append(
                [resolved_wildcard(n, color) if n in missing else Tile(n, color) for n in numbers]
            )
    return _by_cost(found)


class Solver:
    """Decide whether a board can be rearranged into valid melds.

    The solver works on a snapshot of the board taken at construction and
    never mutates the game it came from. ``solve`` returns the first
    partition found, or ``None`` when the search finds none.
    """

    def __init__(self, game: Game) -> None:
        self.ruleset = game.ruleset
        self.board = game.get_board()

    @classmethod
    def new_with_board(cls, board: Sequence[Sequence[Tile]], ruleset: Optional[Ruleset] = None) -> "Solver":
        return cls(Game.from_board(board, ruleset))

    def solve(self) -> Optional[List[Meld]]:
        hand = self.board[0] if self.board else []
        table = [list(tiles) for tiles in self.board[1:] if tiles]

        extracted, leftover = self.pick_available(hand)
        melds = table + extracted
        relevant, completed = self.pick_relevant_tiles(melds, leftover)
        pool = [tile for tiles in relevant for tile in tiles] + leftover
        logger.debug(
            "extracted %d melds, leftover [%s], %d relevant / %d completed melds",
            len(extracted),
            format_tiles(leftover),
            len(relevant),
            len(completed),
        )

        if not pool:
            return self._checked(melds)

        memo: Set[str] = set()
        solution = self.search(pool, [], memo)
        logger.debug("search over %d tiles finished, %d pools memoized", len(pool), len(memo))
        if solution is None:
            return None
        return self._checked(solution + completed)

    def _checked(self, partition: List[Meld]) -> Optional[List[Meld]]:
        ok, reason = self.is_valid_partition(partition)
        if not ok:
            logger.error("discarding partition: %s", reason)
            return None
        return partition

    def is_valid_partition(self, partition: Sequence[Sequence[Tile]]) -> Tuple[bool, str]:
        if TileMultiset.from_board(partition) != TileMultiset.from_board(self.board):
            return False, "partition tiles must match board tiles"
        for meld in partition:
            ok, reason = meld_reason(meld)
            if not ok:
                return False, f"invalid meld [{format_tiles(meld)}]: {reason}"
            if wildcard_count(meld) > self.ruleset.max_wildcards_per_meld:
                return False, f"too many wildcards in [{format_tiles(meld)}]"
        return True, ""

    # --- Pre-processing -------------------------------------------------------

    def pick_available(self, hand: Sequence[Tile]) -> Tuple[List[Meld], List[Tile]]:
        """Take every meld the hand already forms.

        Hand wildcards are tried at every (color, number); the placement that
        yields the most melds wins, then the one leaving the fewest tiles.
        Wildcards not used by any meld come back as fresh wildcards.
        """
        count = wildcard_count(hand)
        concrete = sorted(concrete_tiles(hand))
        best_sets, best_leftover = _extract(concrete)
        best_leftover = best_leftover + [wildcard() for _ in range(count)]
        if not 0 < count <= self.ruleset.max_wildcards_per_meld:
            return best_sets, best_leftover

        best_key = (len(best_sets), -len(best_leftover))
        options = [
            resolved_wildcard(number, color)
            for color in Color.ordered()
            for number in range(MIN_NUMBER, MAX_NUMBER + 1)
        ]
        for assignment in combinations_with_replacement(options, count):
            sets, leftover = _extract(concrete + list(assignment))
            leftover = [wildcard() if tile.is_wildcard else tile for tile in leftover]
            key = (len(sets), -len(leftover))
            if key > best_key:
                best_key, best_sets, best_leftover = key, sets, leftover
        return best_sets, best_leftover

    def pick_relevant_tiles(
        self, melds: Sequence[Meld], leftover: Sequence[Tile]
    ) -> Tuple[List[Meld], List[Meld]]:
        loose = concrete_tiles(leftover)
        loose_wildcard = wildcard_count(leftover) > 0
        relevant: List[Meld] = []
        completed: List[Meld] = []
        for meld in melds:
            if (
                loose_wildcard
                or len(meld) >= self.ruleset.oversized_meld_size
                or wildcard_count(meld) > 0
                or not is_valid_meld(meld)
                or self._overlaps(meld, loose)
            ):
                relevant.append(meld)
            else:
                completed.append(meld)
        return relevant, completed

    @staticmethod
    def _overlaps(meld: Sequence[Tile], loose: Sequence[Tile]) -> bool:
        info = tile_set_info(meld)
        if info.tiles_type == TilesType.MIXED_COLOR:
            return any(tile.number == info.start for tile in loose)
        for tile in loose:
            if info.start <= tile.number <= info.end:
                return True
            if tile.color == info.color and info.start - 1 <= tile.number <= info.end + 1:
                return True
        return False

    # --- Search ---------------------------------------------------------------

    def search(self, pool: List[Tile], partial: List[Meld], memo: Set[str]) -> Optional[List[Meld]]:
        if not pool:
            return partial

        key = _pool_key(pool)
        if key in memo:
            return None
        if len(pool) < MIN_MELD_SIZE:
            memo.add(key)
            return None

        for family in (get_available_mixed_colors_tiles_sets, get_available_pure_color_tiles_sets):
            sets, rest = family(pool)
            if not rest and all(wildcard_count(s) <= self.ruleset.max_wildcards_per_meld for s in sets):
                return partial + sets

        for candidate in self._candidates(pool):
            result = self.search(_remove_tiles(pool, candidate), partial + [candidate], memo)
            if result is not None:
                return result

        memo.add(key)
        return None

    def _candidates(self, pool: Sequence[Tile]) -> List[Meld]:
        # every partition has a meld holding the smallest concrete tile
        concrete = sorted(concrete_tiles(pool))
        if not concrete:
            return []
        budget = min(wildcard_count(pool), self.ruleset.max_wildcards_per_meld)
        anchor = concrete[0]
        present = set(concrete)
        return _group_candidates(anchor, present, budget) + _run_candidates(anchor, present, budget)
