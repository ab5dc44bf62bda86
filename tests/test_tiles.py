import pathlib
import sys

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from tilerummy.multiset import TileMultiset
from tilerummy.rules import Ruleset
from tilerummy.tiles import (
    WILDCARD_NUMBER,
    Color,
    Tile,
    format_tiles,
    iter_full_deck,
    parse_tile,
    parse_tiles,
    resolved_wildcard,
    wildcard,
)


def test_equality_ignores_wildcard_flag():
    assert Tile(1, Color.RED, True) == Tile(1, Color.RED, False)
    assert hash(Tile(1, Color.RED, True)) == hash(Tile(1, Color.RED))
    assert Tile(1, Color.RED) != Tile(1, Color.BLUE)


def test_ordering_by_color_rank_then_number():
    tiles = [Tile(5, Color.RED), Tile(7, Color.BLACK), Tile(1, Color.BLUE), Tile(2, Color.ORANGE)]
    assert format_tiles(sorted(tiles)) == "7H 1B 2O 5R"
    assert [color.rank for color in Color.ordered()] == [0, 1, 2, 3]


def test_fresh_wildcard_sorts_after_red_tiles():
    tiles = sorted([wildcard(), Tile(13, Color.RED), Tile(1, Color.BLACK)])
    assert tiles[-1].is_wildcard
    assert tiles[-1].number == WILDCARD_NUMBER
    assert not tiles[-1].is_resolved()


def test_parse_tiles_reads_notation():
    tiles = parse_tiles("10r, 5H W w(7o)")
    assert tiles == [Tile(10, Color.RED), Tile(5, Color.BLACK), wildcard(), Tile(7, Color.ORANGE)]
    assert [tile.is_wildcard for tile in tiles] == [False, False, True, True]
    assert format_tiles(tiles) == "10R 5H W W(7O)"


@pytest.mark.parametrize("text", ["14R", "0B", "5X", "R5", ""])
def test_parse_tile_rejects_bad_notation(text):
    with pytest.raises(ValueError):
        parse_tile(text)


def test_resolved_wildcard_keeps_flag():
    tile = resolved_wildcard(7, Color.ORANGE)
    assert tile.is_wildcard
    assert tile.is_resolved()
    assert not tile.concrete().is_wildcard
    assert tile.concrete() == tile


def test_full_deck_matches_ruleset():
    rules = Ruleset()
    deck = list(iter_full_deck(rules.copies_per_tiletype, rules.num_wildcards))
    assert len(deck) == rules.deck_size() == 106
    assert sum(1 for tile in deck if tile.is_wildcard) == 2
    assert deck.count(Tile(13, Color.BLUE)) == 2


def test_multiset_counts_wildcards_separately():
    first = TileMultiset.from_tiles([Tile(3, Color.RED), resolved_wildcard(3, Color.RED)])
    second = TileMultiset.from_tiles([Tile(3, Color.RED), wildcard()])
    assert first == second
    assert first.wildcards() == 1
    assert first.total() == 2
    assert first.sub(TileMultiset.from_tiles([wildcard()])) == TileMultiset.from_tiles([Tile(3, Color.RED)])
    assert TileMultiset.empty().add(first) == first
    with pytest.raises(ValueError):
        TileMultiset.empty().sub(first)
