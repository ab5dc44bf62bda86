import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tilerummy.game import Game
from tilerummy.meld import is_valid_meld, is_valid_run, wildcard_count
from tilerummy.multiset import TileMultiset
from tilerummy.operation import GameOperation
from tilerummy.solver import (
    Solver,
    get_available_mixed_colors_tiles_sets,
    get_available_pure_color_tiles_sets,
)
from tilerummy.tiles import format_tiles, parse_tiles, wildcard


def _board(hand: str, *melds: str):
    return [parse_tiles(hand)] + [parse_tiles(meld) for meld in melds]


def _shape(partition):
    return sorted(format_tiles(sorted(meld)) for meld in partition)


def test_hand_group_with_unusable_leftover_is_unsolvable():
    solver = Solver.new_with_board(_board("1R 1B 1O 4B 5H 6O"))
    assert solver.solve() is None


def test_hand_splits_into_runs_and_group():
    solver = Solver.new_with_board(_board("10R 11R 12R 1B 1R 1O 4O 5O 6O"))
    partition = solver.solve()

    assert partition is not None
    assert _shape(partition) == ["10R 11R 12R", "1B 1O 1R", "4O 5O 6O"]


def test_put_then_solve_uses_game_snapshot():
    game = Game()
    game.operate(GameOperation.put(parse_tiles("10R 11R 12R")))
    before = game.get_board()

    partition = Solver(game).solve()

    assert partition is not None
    assert _shape(partition) == ["10R 11R 12R"]
    assert game.get_board() == before


def test_empty_board_is_trivially_solved():
    assert Solver(Game()).solve() == []


def test_oversized_run_is_rearranged_for_leftover():
    solver = Solver.new_with_board(_board("4B 4O", "1R 2R 3R 4R"))
    partition = solver.solve()

    assert partition is not None
    assert _shape(partition) == ["1R 2R 3R", "4B 4O 4R"]


def test_leftover_extends_adjacent_run():
    partition = Solver.new_with_board(_board("4R", "1R 2R 3R")).solve()
    assert partition is not None
    assert _shape(partition) == ["1R 2R 3R 4R"]


def test_invalid_table_meld_is_repaired_or_rejected():
    assert Solver.new_with_board(_board("", "1R 2R 4R")).solve() is None

    partition = Solver.new_with_board(_board("3R", "1R 2R 4R")).solve()
    assert partition is not None
    assert _shape(partition) == ["1R 2R 3R 4R"]


def test_hand_wildcard_completes_run():
    partition = Solver.new_with_board(_board("5B 6B W")).solve()

    assert partition is not None
    assert len(partition) == 1
    assert is_valid_run(partition[0])
    assert wildcard_count(partition[0]) == 1


def test_table_wildcard_is_moved_to_free_its_slot():
    partition = Solver.new_with_board(_board("10H", "9H W(10H) 11H")).solve()

    assert partition is not None
    assert all(is_valid_meld(meld) for meld in partition)
    assert sum(wildcard_count(meld) for meld in partition) == 1
    assert sum(len(meld) for meld in partition) == 4


def test_loose_wildcard_joins_table_run():
    partition = Solver.new_with_board(_board("W", "1R 2R 3R")).solve()

    assert partition is not None
    assert len(partition) == 1
    assert len(partition[0]) == 4
    assert is_valid_run(partition[0])


def test_lone_wildcard_is_unsolvable():
    assert Solver.new_with_board([[wildcard()]]).solve() is None


def test_completed_melds_are_kept_out_of_search():
    solver = Solver.new_with_board(_board(""))
    melds = [parse_tiles("1R 2R 3R"), parse_tiles("7H 7B 7O"), parse_tiles("5B W(6B) 7B")]
    relevant, completed = solver.pick_relevant_tiles(melds, parse_tiles("7R"))

    assert [format_tiles(m) for m in relevant] == ["7H 7B 7O", "5B W(6B) 7B"]
    assert [format_tiles(m) for m in completed] == ["1R 2R 3R"]


def test_pick_available_returns_melds_and_leftover():
    solver = Solver.new_with_board(_board(""))
    sets, leftover = solver.pick_available(parse_tiles("1R 2R 3R 9H 9B 9O 5O"))

    assert _shape(sets) == ["1R 2R 3R", "9H 9B 9O"]
    assert format_tiles(leftover) == "5O"


def test_greedy_run_extraction_takes_one_copy_per_pass():
    sets, leftover = get_available_pure_color_tiles_sets(parse_tiles("1R 2R 3R 3R 4R 5R"))
    assert [format_tiles(s) for s in sets] == ["1R 2R 3R 4R 5R"]
    assert format_tiles(leftover) == "3R"

    sets, leftover = get_available_pure_color_tiles_sets(parse_tiles("1R 1R 2R 2R 3R 3R"))
    assert [format_tiles(s) for s in sets] == ["1R 2R 3R", "1R 2R 3R"]
    assert leftover == []


def test_greedy_group_extraction():
    sets, leftover = get_available_mixed_colors_tiles_sets(parse_tiles("7H 7B 7O 7R 7B 7O W"))
    assert [format_tiles(s) for s in sets] == ["7H 7B 7O 7R"]
    assert format_tiles(leftover) == "7B 7O W"


BOARDS = [
    _board("10R 11R 12R 1B 1R 1O 4O 5O 6O"),
    _board("4B 4O", "1R 2R 3R 4R"),
    _board("10H", "9H W(10H) 11H"),
    _board("W", "1R 2R 3R"),
    _board("5B 6B W"),
    _board("7R 8R", "7H 7B 7O", "9R 10R 11R"),
    _board("3O 3H 3R", "1O 2O 3O 4O 5O", "3B 4B 5B"),
    _board("13H 13B W W", "11O 12O 13O"),
]

UNSOLVABLE = [
    _board("1R 1B 1O 4B 5H 6O"),
    _board("2R 2B", "5H 6H 7H"),
    _board("3O 3H", "1O 2O 3O 4O 5O", "3B 4B 5B"),
]


@pytest.mark.parametrize("board", BOARDS)
def test_partition_preserves_tiles_and_is_sound(board):
    solver = Solver.new_with_board(board)
    partition = solver.solve()

    assert partition is not None
    assert TileMultiset.from_board(partition) == TileMultiset.from_board(board)
    assert all(is_valid_meld(meld) for meld in partition)
    assert solver.is_valid_partition(partition) == (True, "")


@pytest.mark.parametrize("board", BOARDS + UNSOLVABLE)
def test_verdict_is_repeatable(board):
    verdicts = {Solver.new_with_board(board).solve() is None for _ in range(3)}
    assert len(verdicts) == 1


def test_is_valid_partition_reports_mismatch():
    solver = Solver.new_with_board(_board("1R 2R 3R"))
    ok, reason = solver.is_valid_partition([parse_tiles("1R 2R 3R 4R")])
    assert not ok
    assert "match" in reason


def test_group_that_strands_a_run_tail_is_unsolvable():
    # 3H needs 3B for a group, which leaves 4B 5B short
    solver = Solver.new_with_board(_board("3O 3H", "1O 2O 3O 4O 5O", "3B 4B 5B"))
    assert solver.solve() is None
