"""Tests for GameMap terrain, occupancy, and spatial queries."""

from __future__ import annotations

import pytest

from vanguard.environment.map import GameMap
from vanguard.environment.tile_types import TerrainClass, TileTypeID
from vanguard.game import ranges
from vanguard.types import AgentId
from tests.helpers import make_map, make_open_map, make_wall_map


class TestBuilders:
    def test_from_rows_is_indexed_x_then_y(self) -> None:
        gm = GameMap.from_rows([[0, 1, 0], [0, 0, 2]])
        assert (gm.width, gm.height) == (3, 2)
        assert gm.tiles[1, 0] == TileTypeID.MOUNT
        assert gm.tiles[2, 1] == TileTypeID.WATER
        assert gm.is_obstacle(1, 0)
        assert not gm.is_obstacle(0, 1)

    def test_from_rows_rejects_ragged_rows(self) -> None:
        with pytest.raises(ValueError):
            GameMap.from_rows([[0, 0], [0]])

    def test_from_terrain_string_matches_row_major_feed(self) -> None:
        gm = GameMap.from_terrain_string("0,1,0,\n0,0,2", 3, 2)
        assert gm.tiles[1, 0] == TileTypeID.MOUNT
        assert gm.tiles[2, 1] == TileTypeID.WATER
        assert gm.terrain_at(0, 0) is TerrainClass.OPEN

    def test_short_terrain_feed_is_padded_with_open_ground(self) -> None:
        gm = GameMap.from_terrain_string("1,1", 2, 2)
        assert gm.is_obstacle(0, 0)
        assert not gm.is_obstacle(0, 1)

    def test_mismatched_tile_array_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            GameMap(3, 3, make_open_map(2, 2).tiles)


class TestTerrain:
    def test_out_of_bounds_is_obstacle(self) -> None:
        gm = make_open_map(3, 3)
        assert gm.is_obstacle(-1, 0)
        assert gm.is_obstacle(0, 3)
        assert not gm.is_valid_position(3, 0)

    def test_set_tile_invalidates_walkable_cache(self) -> None:
        gm = make_open_map(3, 3)
        assert gm.walkable[1, 1]
        assert gm.set_tile(1, 1, TileTypeID.WATER)
        assert gm.is_obstacle(1, 1)
        assert not gm.set_tile(5, 5, TileTypeID.WATER)


class TestOccupancy:
    def test_set_and_query_unit(self) -> None:
        gm = make_open_map(4, 4)
        assert gm.set_unit(1, 2, AgentId("u1"))
        assert gm.has_unit(1, 2)
        assert gm.unit_at(1, 2) == "u1"
        assert gm.unit_at(0, 0) is None

    def test_set_unit_refuses_obstacles_and_out_of_bounds(self) -> None:
        gm = make_wall_map()
        assert not gm.set_unit(1, 1, AgentId("u1"))
        assert not gm.set_unit(9, 9, AgentId("u1"))
        assert not gm.has_unit(1, 1)

    def test_remove_and_clear(self) -> None:
        gm = make_open_map(4, 4)
        gm.set_unit(0, 0, AgentId("a"))
        gm.set_unit(3, 3, AgentId("b"))
        gm.remove_unit(0, 0)
        assert not gm.has_unit(0, 0)
        assert gm.unit_at(3, 3) == "b"
        gm.clear_units()
        assert not gm.has_unit(3, 3)

    def test_moving_unit_reuses_its_occupant_slot(self) -> None:
        gm = make_open_map(4, 4)
        gm.set_unit(0, 3, AgentId("b"))
        gm.set_unit(0, 0, AgentId("a"))
        for x in range(1, 4):
            gm.remove_unit(x - 1, 0)
            assert gm.set_unit(x, 0, AgentId("a"))
        assert gm.unit_at(3, 0) == "a"
        assert int(gm.occupant.max()) == 1
        gm.set_unit(2, 2, AgentId("b"))
        assert gm.unit_at(2, 2) == "b"
        assert int(gm.occupant.max()) == 1

    def test_out_of_bounds_queries_do_not_raise(self) -> None:
        gm = make_open_map(2, 2)
        assert not gm.has_unit(-1, -1)
        assert gm.unit_at(5, 5) is None
        gm.remove_unit(5, 5)

    def test_units_do_not_block_paths(self) -> None:
        gm = make_map(["..."])
        gm.set_unit(1, 0, AgentId("blocker"))
        assert gm.get_real_distance(0, 0, 2, 0) == 2


class TestShortestPath:
    @pytest.mark.parametrize(
        ("start", "goal"),
        [((0, 0), (0, 0)), ((0, 0), (5, 0)), ((1, 1), (4, 7)), ((9, 9), (0, 3))],
    )
    def test_open_grid_distance_is_chebyshev(self, start, goal) -> None:
        gm = make_open_map(10, 10)
        result = gm.shortest_path_length(*start, *goal)
        assert result.reachable
        assert result.length == ranges.calculate_distance(*start, *goal)

    def test_wall_scenario(self) -> None:
        """5x5 with a wall at x=1, y=1..3: the detour costs one extra step."""
        gm = make_wall_map()
        assert gm.get_real_distance(0, 1, 2, 2) == 3
        assert not gm.has_line_of_sight(0, 1, 2, 2)

    def test_solid_wall_is_unreachable(self) -> None:
        gm = make_map(
            [
                "..#..",
                "..#..",
                "..#..",
            ]
        )
        result = gm.shortest_path(0, 0, 4, 0)
        assert not result.reachable
        assert result.length is None
        assert gm.get_real_distance(0, 0, 4, 0) == -1

    def test_obstacle_goal_is_unreachable(self) -> None:
        gm = make_wall_map()
        assert gm.get_real_distance(0, 0, 1, 1) == -1

    def test_start_cell_is_not_tested_for_obstacles(self) -> None:
        gm = make_wall_map()
        assert gm.get_real_distance(1, 1, 0, 0) == 1

    def test_invalid_endpoints_are_unreachable(self) -> None:
        gm = make_open_map(3, 3)
        assert gm.get_real_distance(-1, 0, 1, 1) == -1
        assert gm.get_real_distance(0, 0, 3, 3) == -1
        assert gm.find_path(0, 0, 3, 3) is None

    def test_find_path_includes_both_endpoints(self) -> None:
        gm = make_wall_map()
        path = gm.find_path(0, 1, 2, 2)
        assert path is not None
        assert path[0] == (0, 1)
        assert path[-1] == (2, 2)
        assert len(path) - 1 == 3
        for (ax, ay), (bx, by) in zip(path, path[1:]):
            assert ranges.calculate_distance(ax, ay, bx, by) == 1
            assert not gm.is_obstacle(bx, by)

    def test_find_path_is_deterministic(self) -> None:
        gm = make_open_map(8, 8)
        assert gm.find_path(0, 0, 6, 3) == gm.find_path(0, 0, 6, 3)

    def test_identical_endpoints(self) -> None:
        gm = make_open_map(3, 3)
        assert gm.find_path(1, 1, 1, 1) == [(1, 1)]
        assert gm.get_real_distance(1, 1, 1, 1) == 0


class TestLineOfSight:
    def test_same_cell_is_visible(self) -> None:
        gm = make_wall_map()
        assert gm.has_line_of_sight(2, 2, 2, 2)
        assert gm.has_line_of_sight(1, 1, 1, 1)

    def test_clear_line(self) -> None:
        gm = make_open_map(10, 10)
        assert gm.has_line_of_sight(0, 0, 9, 4)

    def test_target_on_obstacle_is_hidden(self) -> None:
        gm = make_map(["..#"])
        assert not gm.has_line_of_sight(0, 0, 2, 0)

    def test_start_on_obstacle_does_not_block(self) -> None:
        gm = make_map(["#.."])
        assert gm.has_line_of_sight(0, 0, 2, 0)

    def test_invalid_endpoint(self) -> None:
        gm = make_open_map(3, 3)
        assert not gm.has_line_of_sight(0, 0, 5, 5)


class TestReachablePositions:
    def test_open_grid_ring_sizes(self) -> None:
        gm = make_open_map(11, 11)
        assert len(gm.reachable_positions((5, 5), 1)) == 8
        assert len(gm.reachable_positions((5, 5), 2)) == 24

    def test_origin_is_excluded(self) -> None:
        gm = make_open_map(5, 5)
        assert (2, 2) not in gm.reachable_positions((2, 2), 2)

    def test_walls_shape_the_reachable_set(self) -> None:
        gm = make_wall_map()
        assert gm.reachable_positions((0, 2), 1) == {(0, 1), (0, 3)}
        assert gm.reachable_positions((0, 2), 2) == {
            (0, 1),
            (0, 3),
            (0, 0),
            (0, 4),
            (1, 0),
            (1, 4),
        }

    def test_matches_per_cell_path_distance(self) -> None:
        gm = make_map(
            [
                "......",
                ".##...",
                "...#..",
                ".#....",
                "......",
            ]
        )
        origin = (0, 0)
        reachable = gm.reachable_positions(origin, 3)
        for x in range(gm.width):
            for y in range(gm.height):
                distance = gm.get_real_distance(*origin, x, y)
                expected = 0 < distance <= 3
                assert ((x, y) in reachable) is expected, (x, y, distance)

    def test_zero_range_is_empty(self) -> None:
        gm = make_open_map(3, 3)
        assert gm.reachable_positions((1, 1), 0) == set()
