import random
import unittest

from game import (
    Direction,
    MergeEvent,
    Tile,
    ValidationError,
    apply_move_result,
    compute_move,
    empty_positions,
    is_game_over,
    legal_directions,
    score_gained,
)


def make_tiles(rows):
    """Builds tiles from a grid of values (0 = empty); ids are 'r{row}c{col}'."""
    tiles = []
    for r, row in enumerate(rows):
        for c, value in enumerate(row):
            if value:
                tiles.append(Tile(id=f"r{r}c{c}", value=value, row=r, col=c))
    return tiles


def as_grid(tiles, size):
    grid = [[0] * size for _ in range(size)]
    for t in tiles:
        grid[t.row][t.col] = t.value
    return grid


def random_tiles(rng, size, fill=0.6):
    tiles = []
    for r in range(size):
        for c in range(size):
            if rng.random() < fill:
                tiles.append(Tile(id=f"t{r}_{c}", value=rng.choice([2, 2, 4, 4, 8, 16]), row=r, col=c))
    return tiles


class TestComputeMove(unittest.TestCase):
    def test_given_equal_pair_when_left_then_single_merge_with_first_tile_surviving(self):
        tiles = make_tiles([[2, 2, 0, 0]] + [[0] * 4] * 3)
        res = compute_move(tiles, 4, Direction.LEFT)
        self.assertEqual(res.merges, (MergeEvent("r0c0", "r0c1", 4),))
        self.assertEqual(res.targets, {"r0c0": (0, 0), "r0c1": (0, 0)})
        self.assertTrue(res.moved)

    def test_given_three_equal_tiles_when_left_then_only_first_two_merge(self):
        tiles = make_tiles([[2, 2, 2, 0]] + [[0] * 4] * 3)
        res = compute_move(tiles, 4, Direction.LEFT)
        self.assertEqual(len(res.merges), 1)
        self.assertEqual(res.merges[0], MergeEvent("r0c0", "r0c1", 4))
        self.assertEqual(res.targets["r0c2"], (0, 1))
        self.assertTrue(res.moved)
        after = apply_move_result(tiles, res)
        self.assertEqual(as_grid(after, 4)[0], [4, 2, 0, 0])

    def test_given_three_equal_tiles_when_right_then_rightmost_pair_merges(self):
        tiles = make_tiles([[2, 2, 2, 0]] + [[0] * 4] * 3)
        res = compute_move(tiles, 4, Direction.RIGHT)
        self.assertEqual(res.merges, (MergeEvent("r0c2", "r0c1", 4),))
        self.assertEqual(res.targets["r0c2"], (0, 3))
        self.assertEqual(res.targets["r0c1"], (0, 3))
        self.assertEqual(res.targets["r0c0"], (0, 2))
        self.assertEqual(as_grid(apply_move_result(tiles, res), 4)[0], [0, 0, 2, 4])

    def test_given_four_equal_tiles_when_left_then_two_independent_merges(self):
        tiles = make_tiles([[2, 2, 2, 2]] + [[0] * 4] * 3)
        res = compute_move(tiles, 4, Direction.LEFT)
        self.assertEqual(res.merges, (MergeEvent("r0c0", "r0c1", 4), MergeEvent("r0c2", "r0c3", 4)))
        self.assertEqual(res.targets["r0c2"], (0, 1))
        self.assertEqual(score_gained(res), 8)

    def test_given_merge_result_equal_to_next_tile_when_left_then_no_chain_merge(self):
        tiles = make_tiles([[4, 4, 8, 0]] + [[0] * 4] * 3)
        res = compute_move(tiles, 4, Direction.LEFT)
        self.assertEqual(len(res.merges), 1)
        self.assertEqual(as_grid(apply_move_result(tiles, res), 4)[0], [8, 8, 0, 0])

    def test_given_mismatched_pair_when_left_then_nothing_moves(self):
        tiles = make_tiles([[2, 4, 0, 0]] + [[0] * 4] * 3)
        res = compute_move(tiles, 4, Direction.LEFT)
        self.assertEqual(res.merges, ())
        self.assertEqual(res.targets, {"r0c0": (0, 0), "r0c1": (0, 1)})
        self.assertFalse(res.moved)

    def test_given_gap_between_equal_tiles_when_left_then_they_merge(self):
        tiles = make_tiles([[0, 2, 0, 2]] + [[0] * 4] * 3)
        res = compute_move(tiles, 4, Direction.LEFT)
        self.assertEqual(res.merges, (MergeEvent("r0c1", "r0c3", 4),))
        self.assertEqual(res.targets["r0c1"], (0, 0))

    def test_given_column_when_up_and_down_then_rows_compact_toward_edges(self):
        tiles = make_tiles([
            [2, 0, 0, 0],
            [0, 0, 0, 0],
            [2, 0, 0, 0],
            [4, 0, 0, 0],
        ])
        up = compute_move(tiles, 4, Direction.UP)
        self.assertEqual(up.merges, (MergeEvent("r0c0", "r2c0", 4),))
        self.assertEqual(up.targets["r3c0"], (1, 0))
        down = compute_move(tiles, 4, Direction.DOWN)
        # 4 at the bottom blocks nothing; the two 2s below it in sweep order merge
        self.assertEqual(down.merges, (MergeEvent("r2c0", "r0c0", 4),))
        self.assertEqual(down.targets, {"r3c0": (3, 0), "r2c0": (2, 0), "r0c0": (2, 0)})
        self.assertTrue(down.moved)

    def test_given_packed_board_without_pairs_when_moving_toward_edge_then_no_op(self):
        tiles = make_tiles([
            [2, 4, 8, 16],
            [4, 8, 16, 32],
            [0, 0, 0, 0],
            [0, 0, 0, 0],
        ])
        res = compute_move(tiles, 4, Direction.LEFT)
        self.assertFalse(res.moved)
        self.assertEqual(res.targets, {t.id: t.pos for t in tiles})
        # Repeated calls return the same no-op result
        for _ in range(3):
            self.assertEqual(compute_move(tiles, 4, Direction.LEFT), res)

    def test_given_any_board_when_moving_then_every_tile_has_a_target_inside_the_grid(self):
        rng = random.Random(7)
        for size in (2, 4, 7):
            tiles = random_tiles(rng, size)
            for d in Direction:
                res = compute_move(tiles, size, d)
                self.assertEqual(set(res.targets), {t.id for t in tiles})
                for r, c in res.targets.values():
                    self.assertTrue(0 <= r < size and 0 <= c < size)
                after = apply_move_result(tiles, res)
                self.assertEqual(len({t.pos for t in after}), len(after))
                self.assertEqual(len(after), len(tiles) - len(res.merges))

    def test_given_same_input_when_computed_twice_then_results_equal(self):
        tiles = random_tiles(random.Random(3), 5)
        for d in Direction:
            self.assertEqual(compute_move(tiles, 5, d), compute_move(list(reversed(tiles)), 5, d))

    def test_given_empty_board_when_moving_then_empty_result(self):
        res = compute_move([], 4, Direction.DOWN)
        self.assertEqual(res.targets, {})
        self.assertEqual(res.merges, ())
        self.assertFalse(res.moved)


class TestSymmetry(unittest.TestCase):
    @staticmethod
    def _mirror_cols(tiles, size):
        return [Tile(t.id, t.value, t.row, size - 1 - t.col) for t in tiles]

    @staticmethod
    def _mirror_rows(tiles, size):
        return [Tile(t.id, t.value, size - 1 - t.row, t.col) for t in tiles]

    @staticmethod
    def _transpose(tiles):
        return [Tile(t.id, t.value, t.col, t.row) for t in tiles]

    def test_given_random_boards_when_mirrored_then_left_right_agree(self):
        rng = random.Random(11)
        for size in (4, 5, 6):
            for _ in range(20):
                tiles = random_tiles(rng, size)
                right = compute_move(tiles, size, Direction.RIGHT)
                left = compute_move(self._mirror_cols(tiles, size), size, Direction.LEFT)
                mirrored_back = {tid: (r, size - 1 - c) for tid, (r, c) in left.targets.items()}
                self.assertEqual(right.targets, mirrored_back)
                self.assertEqual(set(right.merges), set(left.merges))
                self.assertEqual(right.moved, left.moved)

    def test_given_random_boards_when_mirrored_then_up_down_agree(self):
        rng = random.Random(12)
        for size in (4, 5):
            for _ in range(20):
                tiles = random_tiles(rng, size)
                down = compute_move(tiles, size, Direction.DOWN)
                up = compute_move(self._mirror_rows(tiles, size), size, Direction.UP)
                mirrored_back = {tid: (size - 1 - r, c) for tid, (r, c) in up.targets.items()}
                self.assertEqual(down.targets, mirrored_back)
                self.assertEqual(set(down.merges), set(up.merges))
                self.assertEqual(down.moved, up.moved)

    def test_given_random_boards_when_transposed_then_left_matches_up(self):
        rng = random.Random(13)
        for _ in range(20):
            tiles = random_tiles(rng, 4)
            left = compute_move(tiles, 4, Direction.LEFT)
            up = compute_move(self._transpose(tiles), 4, Direction.UP)
            self.assertEqual(left.targets, {tid: (c, r) for tid, (r, c) in up.targets.items()})
            self.assertEqual(set(left.merges), set(up.merges))

    def test_given_rows_shuffled_when_moving_horizontally_then_each_row_result_unchanged(self):
        rng = random.Random(21)
        size = 5
        tiles = random_tiles(rng, size, fill=0.7)
        perm = list(range(size))
        rng.shuffle(perm)
        shuffled = [Tile(t.id, t.value, perm[t.row], t.col) for t in tiles]
        for d in (Direction.LEFT, Direction.RIGHT):
            base = compute_move(tiles, size, d)
            moved = compute_move(shuffled, size, d)
            self.assertEqual({tid: c for tid, (_, c) in base.targets.items()},
                             {tid: c for tid, (_, c) in moved.targets.items()})
            self.assertEqual(set(base.merges), set(moved.merges))


class TestValidation(unittest.TestCase):
    def test_given_duplicate_coordinates_when_computing_then_validation_error(self):
        tiles = [Tile("a", 2, 0, 0), Tile("b", 4, 0, 0)]
        with self.assertRaises(ValidationError):
            compute_move(tiles, 4, Direction.LEFT)

    def test_given_out_of_range_tile_when_computing_then_validation_error(self):
        with self.assertRaises(ValidationError):
            compute_move([Tile("a", 2, 0, 4)], 4, Direction.LEFT)
        with self.assertRaises(ValidationError):
            compute_move([Tile("a", 2, -1, 0)], 4, Direction.LEFT)

    def test_given_non_integer_coordinates_when_computing_then_validation_error(self):
        for row, col in ((1.5, 0), (0, 2.0), (True, 0), ("1", 0)):
            with self.assertRaises(ValidationError):
                compute_move([Tile("a", 2, row, col)], 4, Direction.LEFT)

    def test_given_bad_board_size_when_computing_then_validation_error(self):
        for size in (0, 1, -3):
            with self.assertRaises(ValidationError):
                compute_move([], size, Direction.UP)

    def test_given_duplicate_ids_or_bad_values_when_computing_then_validation_error(self):
        with self.assertRaises(ValidationError):
            compute_move([Tile("a", 2, 0, 0), Tile("a", 2, 0, 1)], 4, Direction.LEFT)
        for value in (0, 1, 3, 6, -2):
            with self.assertRaises(ValidationError):
                compute_move([Tile("a", value, 0, 0)], 4, Direction.LEFT)

    def test_given_unknown_direction_when_computing_then_validation_error(self):
        with self.assertRaises(ValidationError):
            compute_move([], 4, "left")  # type: ignore[arg-type]
        self.assertTrue(issubclass(ValidationError, ValueError))


class TestBoardHelpers(unittest.TestCase):
    def test_given_board_when_listing_empty_positions_then_row_major(self):
        tiles = make_tiles([[2, 0], [0, 4]])
        self.assertEqual(empty_positions(tiles, 2), [(0, 1), (1, 0)])

    def test_given_locked_board_when_checking_then_game_over(self):
        locked = make_tiles([
            [2, 4, 2, 4],
            [4, 2, 4, 2],
            [2, 4, 2, 4],
            [4, 2, 4, 2],
        ])
        self.assertEqual(legal_directions(locked, 4), [])
        self.assertTrue(is_game_over(locked, 4))

    def test_given_board_with_one_pair_when_checking_then_only_pair_axis_is_legal(self):
        tiles = make_tiles([
            [2, 2, 4, 8],
            [4, 8, 16, 32],
            [8, 16, 32, 64],
            [16, 32, 64, 128],
        ])
        self.assertEqual(set(legal_directions(tiles, 4)), {Direction.LEFT, Direction.RIGHT})
        self.assertFalse(is_game_over(tiles, 4))

    def test_given_direction_names_and_keys_when_parsing_then_enum(self):
        self.assertIs(Direction.parse("LEFT"), Direction.LEFT)
        self.assertIs(Direction.parse(" up "), Direction.UP)
        self.assertIs(Direction.parse("d"), Direction.RIGHT)
        self.assertIs(Direction.parse("s"), Direction.DOWN)
        with self.assertRaises(ValueError):
            Direction.parse("sideways")
        self.assertTrue(Direction.LEFT.is_horizontal and Direction.LEFT.ascending)
        self.assertFalse(Direction.DOWN.is_horizontal or Direction.DOWN.ascending)


if __name__ == "__main__":
    unittest.main()
