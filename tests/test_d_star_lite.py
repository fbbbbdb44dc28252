import dataclasses

import numpy as np
import pytest

from dstar_grid.pathfinding import DStarLite, Grid, Key, SnapshotRecorder

from .conftest import block, walk


def cells(path):
    return [v.pos for v in path]


def test_unwalkable_start_does_not_compute(grid, planner):
    start, goal = grid.get_vertex(0, 0), grid.get_vertex(4, 4)
    start.set_walkable(False)
    planner.find_path(start, goal)
    assert planner.find_next(start) is None
    assert goal.rhs_cost == 0
    assert goal.g_cost is None


def test_unwalkable_goal_does_not_compute(grid, planner):
    start, goal = grid.get_vertex(0, 0), grid.get_vertex(4, 4)
    goal.set_walkable(False)
    planner.find_path(start, goal)
    assert planner.find_next(start) is None


def test_start_equals_goal_does_not_compute(grid, planner):
    start = grid.get_vertex(0, 0)
    planner.find_path(start, start)
    assert planner.find_next(start) is None
    assert start.rhs_cost == 0
    assert len(planner.U) == 1


def test_first_step_is_diagonal(grid, planner):
    start = grid.get_vertex(0, 0)
    planner.find_path(start, grid.get_vertex(4, 4))
    assert planner.find_next(start) == grid.get_vertex(1, 1)
    assert grid.get_vertex(1, 1).g_cost == 3 * 14


def test_find_next_picks_lowest_g(grid, planner):
    grid.get_vertex(0, 0).set_g_cost(0)
    grid.get_vertex(1, 0).set_g_cost(1)
    grid.get_vertex(0, 1).set_g_cost(2)
    grid.get_vertex(1, 1).set_g_cost(3)
    assert planner.find_next(grid.get_vertex(0, 0)) == grid.get_vertex(1, 0)


def test_find_next_first_neighbor_wins_ties(grid, planner):
    grid.get_vertex(0, 0).set_g_cost(20)
    grid.get_vertex(1, 0).set_g_cost(5)
    grid.get_vertex(0, 1).set_g_cost(5)
    # (0, 1) is enumerated before (1, 0)
    assert planner.find_next(grid.get_vertex(0, 0)) == grid.get_vertex(0, 1)


def test_find_next_boxed_in_start(grid, planner):
    block(grid, (1, 0), (0, 1), (1, 1))
    start = grid.get_vertex(0, 0)
    planner.find_path(start, grid.get_vertex(4, 4))
    assert start.g_cost is None
    assert planner.find_next(start) is None


def test_open_grid_diagonal_path(grid, planner):
    start, goal = grid.get_vertex(0, 0), grid.get_vertex(4, 4)
    planner.find_path(start, goal)
    assert cells(walk(planner, start, goal)) == [(0, 0), (1, 1), (2, 2), (3, 3), (4, 4)]
    assert start.g_cost == 4 * 14


def test_vertical_wall_detour(grid, planner):
    block(grid, (2, 1), (2, 2), (2, 3), (2, 4))
    start, goal = grid.get_vertex(0, 2), grid.get_vertex(4, 2)
    planner.find_path(start, goal)
    assert cells(walk(planner, start, goal)) == [(0, 2), (1, 1), (2, 0), (3, 1), (4, 2)]
    assert start.g_cost == 4 * 14


def test_serpentine_path(grid, planner):
    block(grid, (1, 0), (1, 1), (1, 2), (1, 3), (3, 1), (3, 2), (3, 3), (3, 4))
    start, goal = grid.get_vertex(0, 0), grid.get_vertex(4, 4)
    planner.find_path(start, goal)
    assert cells(walk(planner, start, goal)) == [
        (0, 0), (0, 1), (0, 2), (0, 3), (1, 4), (2, 3), (2, 2),
        (2, 1), (3, 0), (4, 1), (4, 2), (4, 3), (4, 4),
    ]
    assert start.g_cost == 8 * 10 + 4 * 14


def test_wall_splits_grid(grid, planner):
    block(grid, *[(x, 2) for x in range(5)])
    start, goal = grid.get_vertex(0, 0), grid.get_vertex(4, 4)
    planner.find_path(start, goal)
    assert start.g_cost is None
    assert planner.find_next(start) is None


def test_monotonic_descent(grid, planner):
    block(grid, (1, 0), (1, 1), (1, 2), (1, 3), (3, 1), (3, 2), (3, 3), (3, 4))
    start, goal = grid.get_vertex(0, 0), grid.get_vertex(4, 4)
    planner.find_path(start, goal)
    path = walk(planner, start, goal)
    for v, u in zip(path, path[1:]):
        assert u.g_cost < v.g_cost


def test_moving_agent_keeps_costs(grid, planner):
    start, goal = grid.get_vertex(0, 0), grid.get_vertex(4, 4)
    planner.find_path(start, goal)
    moved = grid.get_vertex(1, 1)
    planner.update_agent_position(moved)
    assert planner.s_start == moved
    assert planner.k_m == 0
    assert cells(walk(planner, moved, goal)) == [(1, 1), (2, 2), (3, 3), (4, 4)]
    assert moved.g_cost == 3 * 14


def test_dynamic_obstacle_blocks_path(grid, planner):
    planner.find_path(grid.get_vertex(0, 0), grid.get_vertex(4, 4))
    planner.update_agent_position(grid.get_vertex(1, 1))
    for cell in [(3, 4), (4, 3), (3, 3)]:
        grid.get_vertex(*cell).set_walkable(False)
    for cell in [(3, 4), (4, 3), (3, 3)]:
        planner.change_vertex(grid.get_vertex(*cell))
    assert planner.find_next(grid.get_vertex(1, 1)) is None


def test_dynamic_obstacle_replans(grid, planner):
    planner.find_path(grid.get_vertex(0, 0), grid.get_vertex(4, 4))
    agent = grid.get_vertex(1, 1)
    planner.update_agent_position(agent)
    grid.get_vertex(2, 2).set_walkable(False)
    planner.change_vertex(grid.get_vertex(2, 2))

    assert planner.find_next(agent).pos in [(2, 1), (1, 2)]
    assert agent.g_cost == 10 + 38
    assert planner.k_m == 14


def test_far_obstacle_leaves_path_unchanged(grid, planner):
    planner.find_path(grid.get_vertex(0, 0), grid.get_vertex(4, 4))
    planner.update_agent_position(grid.get_vertex(1, 1))
    grid.get_vertex(4, 0).set_walkable(False)
    planner.change_vertex(grid.get_vertex(4, 0))
    assert planner.find_next(grid.get_vertex(1, 1)) == grid.get_vertex(2, 2)


def test_no_path_then_path(grid, planner):
    boxed = [(1, 0), (0, 1), (1, 1)]
    block(grid, *boxed)
    start = grid.get_vertex(0, 0)
    planner.find_path(start, grid.get_vertex(4, 4))
    assert start.g_cost is None

    for cell in boxed:
        grid.get_vertex(*cell).set_walkable(True)
    for cell in boxed:
        planner.change_vertex(grid.get_vertex(*cell))

    assert planner.find_next(start) == grid.get_vertex(1, 1)
    assert start.g_cost == 56


def test_toggle_and_restore_recovers_path(grid, planner):
    start, goal = grid.get_vertex(0, 0), grid.get_vertex(4, 4)
    planner.find_path(start, goal)
    before = cells(walk(planner, start, goal))

    cell = grid.get_vertex(2, 2)
    cell.set_walkable(False)
    planner.change_vertex(cell)
    assert start.g_cost == 62
    assert (2, 2) not in cells(walk(planner, start, goal))

    cell.set_walkable(True)
    planner.change_vertex(cell)
    assert cells(walk(planner, start, goal)) == before
    assert start.g_cost == 56


def test_change_vertex_without_session_is_noop(grid, planner):
    cell = grid.get_vertex(2, 2)
    cell.set_walkable(False)
    planner.update_agent_position(grid.get_vertex(0, 0))
    planner.change_vertex(cell)
    assert cell.rhs_cost is None
    assert planner.U.empty
    assert planner.k_m == 0


def test_km_accumulates_agent_moves(grid, planner):
    planner.find_path(grid.get_vertex(0, 0), grid.get_vertex(4, 4))
    seen = []
    planner.subscribe_km_changed(seen.append)

    planner.update_agent_position(grid.get_vertex(1, 1))
    planner.change_vertex(grid.get_vertex(4, 0))
    planner.change_vertex(grid.get_vertex(4, 0))
    planner.update_agent_position(grid.get_vertex(2, 1))
    planner.change_vertex(grid.get_vertex(4, 0))

    assert seen == [14, 14, 24]
    assert planner.s_last == grid.get_vertex(2, 1)


def test_find_path_resets_session(grid, planner):
    planner.find_path(grid.get_vertex(0, 0), grid.get_vertex(4, 4))
    planner.update_agent_position(grid.get_vertex(1, 1))
    planner.change_vertex(grid.get_vertex(4, 0))
    assert planner.k_m > 0

    start, goal = grid.get_vertex(4, 0), grid.get_vertex(0, 4)
    planner.find_path(start, goal)
    assert planner.k_m == 0
    assert planner.s_last == start
    assert grid.get_vertex(4, 4).rhs_cost != 0
    assert start.g_cost == 56


def test_calculate_key(grid, planner):
    start, goal = grid.get_vertex(0, 0), grid.get_vertex(4, 4)
    planner.find_path(start, start)
    v = grid.get_vertex(2, 1)
    assert planner.calculate_key(v) == Key.unreachable()
    v.set_g_cost(30)
    v.set_rhs_cost(20)
    assert planner.calculate_key(v) == Key(20 + 24, 20)


def test_compute_rhs(grid, planner):
    start, goal = grid.get_vertex(0, 0), grid.get_vertex(4, 4)
    planner.find_path(start, goal)
    assert planner.compute_rhs(goal) == 0
    grid.reset()
    assert planner.compute_rhs(grid.get_vertex(2, 2)) is None
    grid.get_vertex(2, 3).set_g_cost(5)
    grid.get_vertex(3, 3).set_g_cost(2)
    assert planner.compute_rhs(grid.get_vertex(2, 2)) == 15


def test_queue_holds_only_inconsistent_vertices(grid, planner):
    block(grid, (2, 1), (2, 2), (2, 3))
    planner.find_path(grid.get_vertex(0, 2), grid.get_vertex(4, 2))
    for v, _ in planner.U.items():
        assert v.g_cost != v.rhs_cost
    for v in grid:
        if v.g_cost != v.rhs_cost:
            assert v in planner.U


def test_snapshots_are_copies(grid, planner):
    updates, g_changes = [], []
    planner.subscribe_vertex_updated(updates.append)
    planner.subscribe_g_cost_changed(g_changes.append)
    start = grid.get_vertex(0, 0)
    planner.find_path(start, grid.get_vertex(4, 4))

    assert updates and g_changes
    first = g_changes[0]
    assert first.pos == (4, 4) and first.g_cost == 0
    with pytest.raises(dataclasses.FrozenInstanceError):
        first.g_cost = 1
    start_updates = [s for s in updates if s.pos == (0, 0)]
    assert start_updates[-1].h_cost == 0
    assert start_updates[-1].rhs_cost == 56


def test_unsubscribe_stops_notifications(grid, planner):
    seen = []
    unsubscribe = planner.subscribe_vertex_updated(seen.append)
    unsubscribe()
    planner.find_path(grid.get_vertex(0, 0), grid.get_vertex(4, 4))
    assert seen == []


def test_snapshot_recorder(grid, planner):
    recorder = SnapshotRecorder(planner)
    planner.find_path(grid.get_vertex(0, 0), grid.get_vertex(4, 4))
    count = len(recorder)
    assert count > 0
    assert recorder.next_snapshot() is not None
    assert len(recorder) == count - 1

    planner.find_path(grid.get_vertex(0, 0), grid.get_vertex(0, 0))
    assert len(recorder) == 0

    recorder.close()
    planner.find_path(grid.get_vertex(0, 0), grid.get_vertex(4, 4))
    assert recorder.next_snapshot() is None


def _random_walls(rng, width, height, density):
    return [
        (x, y)
        for x in range(width)
        for y in range(height)
        if rng.random() < density and (x, y) not in [(0, 0), (width - 1, height - 1)]
    ]


@pytest.mark.parametrize("seed", range(8))
def test_incremental_matches_fresh_search(seed):
    rng = np.random.default_rng(seed)
    width, height = 12, 9
    grid = Grid(width, height)
    planner = DStarLite(grid)
    start, goal = grid.get_vertex(0, 0), grid.get_vertex(width - 1, height - 1)
    planner.find_path(start, goal)

    walls = _random_walls(rng, width, height, 0.3)
    reopened = [cell for cell in walls if rng.random() < 0.4]

    agent = start
    for x, y in walls + reopened:
        v = grid.get_vertex(x, y)
        if v == agent:
            continue
        v.set_walkable(not v.is_walkable)
        planner.change_vertex(v)
        step = planner.find_next(agent)
        if step is not None and step != goal and rng.random() < 0.3:
            agent = step
            planner.update_agent_position(agent)
    incremental = agent.g_cost

    fresh_grid = Grid.from_occupancy(grid.occupancy_map())
    fresh = DStarLite(fresh_grid)
    fresh_agent = fresh_grid.get_vertex(*agent.pos)
    fresh.find_path(fresh_agent, fresh_grid.get_vertex(*goal.pos))

    assert incremental == fresh_agent.g_cost


@pytest.mark.parametrize("seed", range(4))
def test_batched_changes_match_single_changes(seed):
    rng = np.random.default_rng(100 + seed)
    walls = _random_walls(rng, 10, 10, 0.25)

    results = []
    for batched in (False, True):
        grid = Grid(10, 10)
        planner = DStarLite(grid)
        start, goal = grid.get_vertex(0, 0), grid.get_vertex(9, 9)
        planner.find_path(start, goal)
        changed = [grid.get_vertex(x, y) for (x, y) in walls]
        for v in changed:
            v.set_walkable(False)
        if batched:
            planner.change_vertices(changed)
        else:
            for v in changed:
                planner.change_vertex(v)
        results.append(start.g_cost)

    assert results[0] == results[1]


def test_repeated_update_vertex_is_quiet_on_grid(grid, planner):
    start = grid.get_vertex(0, 0)
    planner.find_path(start, grid.get_vertex(4, 4))
    planner.update_vertex(start)

    grid_events, planner_events = [], []
    grid.subscribe_vertex_changed(grid_events.append)
    planner.subscribe_vertex_updated(planner_events.append)
    planner.update_vertex(start)

    assert grid_events == []
    assert [s.pos for s in planner_events] == [(0, 0)]
