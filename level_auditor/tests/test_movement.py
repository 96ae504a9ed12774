import pytest

from level_auditor.level import LevelModel
from level_auditor.movement import (
    Direction,
    MovementSimulator,
    SearchState,
    SlideRejection,
    clamp_health,
    count_bits,
)


def corridor(width, **tiles):
    """Single-row level; ``tiles`` maps entity kinds to x positions."""

    def cells(name):
        return [(x, 0) for x in tiles.get(name, ())]

    return LevelModel(
        name="Corridor",
        width=width,
        depth=1,
        spawn=(0, 0),
        obstacles=frozenset(cells("obstacles")),
        locks=frozenset(cells("locks")),
        hazards=frozenset(cells("hazards")),
        keys=tuple(cells("keys")),
        required_pickups=tuple(cells("pickups")),
        heal_pickups=tuple(cells("hearts")),
    )


def test_direction_vectors_and_names():
    assert [direction.name for direction in Direction] == ["UP", "DOWN", "LEFT", "RIGHT"]
    assert Direction.UP.vector == (0, 1)
    assert Direction.from_name("left") is Direction.LEFT
    with pytest.raises(ValueError):
        Direction.from_name("diagonal")


def test_clamp_health_bounds_values():
    assert clamp_health(9, maximum=4) == 4
    assert clamp_health(0, maximum=4) == 1
    assert clamp_health(0, maximum=4, allow_zero=True) == 0
    assert clamp_health("oops", maximum=3) == 3
    assert count_bits(0b1011) == 3


def test_slide_runs_until_boundary():
    level = LevelModel(name="Open", width=5, depth=5, spawn=(2, 2))
    simulator = MovementSimulator(level)

    state, move = simulator.slide(SearchState(x=2, z=2, health=4), Direction.UP)

    assert state.position == (2, 4)
    assert move.start == (2, 2)
    assert move.end == (2, 4)
    assert move.cells == 2


def test_slide_stops_before_obstacle():
    level = corridor(6, obstacles=[4])
    state, _ = MovementSimulator(level).slide(SearchState(x=0, z=0, health=4), Direction.RIGHT)

    assert state.position == (3, 0)


def test_zero_distance_slide_is_invalid():
    level = corridor(3, obstacles=[1])
    simulator = MovementSimulator(level)
    start = SearchState(x=0, z=0, health=4)

    assert simulator.slide(start, Direction.RIGHT) is None
    assert simulator.slide(start, Direction.LEFT) is None
    assert simulator.simulate(start, Direction.UP) is SlideRejection.BLOCKED


def test_lock_blocks_without_key():
    level = corridor(5, locks=[2])
    state, _ = MovementSimulator(level).slide(SearchState(x=0, z=0, health=4), Direction.RIGHT)

    assert state.position == (1, 0)


def test_lock_consumes_one_held_key():
    level = corridor(6, locks=[2])
    start = SearchState(x=0, z=0, health=4, key_mask=0b1)
    state, move = MovementSimulator(level).slide(start, Direction.RIGHT)

    assert state.position == (5, 0)
    assert state.key_mask == 0
    assert move.keys_held == 0


def test_spent_key_tile_hands_out_key_again():
    level = corridor(6, keys=[5], locks=[2])
    start = SearchState(x=0, z=0, health=4, key_mask=0b1)
    state, move = MovementSimulator(level).slide(start, Direction.RIGHT)

    assert state.position == (5, 0)
    assert state.key_mask == 0b1
    assert move.keys_held == 1


def test_single_key_opens_only_one_lock():
    level = corridor(7, keys=[1], locks=[3, 5])
    state, _ = MovementSimulator(level).slide(SearchState(x=0, z=0, health=4), Direction.RIGHT)

    assert state.position == (4, 0)
    assert state.key_mask == 0
    assert state.keys_held == 0


def test_key_picked_up_mid_slide_opens_later_lock():
    level = corridor(5, keys=[1], locks=[3], pickups=[4])
    state, _ = MovementSimulator(level).slide(SearchState(x=0, z=0, health=4), Direction.RIGHT)

    assert state.position == (4, 0)
    assert state.pickup_mask == 0b1
    assert state.keys_held == 0


def test_lowest_held_key_is_spent():
    level = corridor(4, locks=[2])
    start = SearchState(x=3, z=0, health=4, key_mask=0b110)
    state, _ = MovementSimulator(level).slide(start, Direction.LEFT)

    assert state.position == (0, 0)
    assert state.key_mask == 0b100


def test_hazard_damages_on_entry():
    level = corridor(4, hazards=[1, 2])
    state, move = MovementSimulator(level).slide(SearchState(x=0, z=0, health=4), Direction.RIGHT)

    assert state.health == 2
    assert move.health_after == 2


def test_hazard_death_rejects_whole_slide():
    level = corridor(5, hazards=[1, 2], pickups=[3])
    simulator = MovementSimulator(level)
    start = SearchState(x=0, z=0, health=2)

    assert simulator.simulate(start, Direction.RIGHT) is SlideRejection.DEATH
    assert simulator.slide(start, Direction.RIGHT) is None


def test_heal_applies_before_hazard_on_same_tile():
    level = corridor(3, hearts=[1], hazards=[1])
    state, _ = MovementSimulator(level).slide(SearchState(x=0, z=0, health=1), Direction.RIGHT)

    assert state.health == 1
    assert state.heal_mask == 0b1


def test_hazard_applies_before_pickup_on_same_tile():
    level = corridor(3, hazards=[1], pickups=[1])
    simulator = MovementSimulator(level)

    assert simulator.slide(SearchState(x=0, z=0, health=1), Direction.RIGHT) is None
    state, _ = simulator.slide(SearchState(x=0, z=0, health=2), Direction.RIGHT)
    assert state.pickup_mask == 0b1


def test_heal_is_capped_at_max_health():
    level = corridor(3, hearts=[1])
    state, _ = MovementSimulator(level, max_health=4).slide(
        SearchState(x=0, z=0, health=4), Direction.RIGHT
    )

    assert state.health == 4
    assert state.heal_mask == 0b1
    assert state.hearts_collected == 1


def test_revisiting_collected_tiles_changes_nothing():
    level = corridor(4, hearts=[1], keys=[2], pickups=[3])
    simulator = MovementSimulator(level, max_health=4)
    start = SearchState(x=0, z=0, health=2)

    first, _ = simulator.slide(start, Direction.RIGHT)
    back, _ = simulator.slide(first, Direction.LEFT)
    again, _ = simulator.slide(back, Direction.RIGHT)

    assert first.health == 3
    assert again.health == first.health
    assert (again.pickup_mask, again.heal_mask, again.key_mask) == (
        first.pickup_mask,
        first.heal_mask,
        first.key_mask,
    )
    assert again == first


def test_state_identity_ignores_how_it_was_reached():
    a = SearchState(x=1, z=2, health=3, pickup_mask=1)
    b = SearchState(x=1, z=2, health=3, pickup_mask=1)

    assert a == b
    assert len({a, b}) == 1
    assert a != SearchState(x=1, z=2, health=2, pickup_mask=1)
