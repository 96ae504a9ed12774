"""Slide-until-blocked movement and the per-cell tile effects."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from .level import Coordinate, LevelModel


STARTING_HEALTH = 4
MAX_HEALTH = 4


def clamp_health(value: int, maximum: int = MAX_HEALTH, *, allow_zero: bool = False) -> int:
    minimum = 0 if allow_zero else 1
    try:
        level = int(value)
    except (TypeError, ValueError):
        level = maximum
    return max(minimum, min(maximum, level))


def count_bits(mask: int) -> int:
    return bin(mask).count("1")


class SlideRejection(Enum):
    """Why a slide produced no new state."""

    BLOCKED = "blocked"
    DEATH = "death"


class Direction(Enum):
    """Cardinal slide directions in world space (z grows upwards)."""

    UP = (0, 1)
    DOWN = (0, -1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def vector(self) -> Tuple[int, int]:
        return self.value

    @property
    def initial(self) -> str:
        return self.name[0]

    @staticmethod
    def from_name(name: str) -> "Direction":
        name = name.upper()
        try:
            return Direction[name]
        except KeyError as exc:
            raise ValueError(f"Unknown direction: {name}") from exc


@dataclass(frozen=True)
class SearchState:
    """One node of the search graph.

    Identity is the position, health and item masks only; how the state was
    reached is tracked by the search, not here.
    """

    x: int
    z: int
    health: int
    pickup_mask: int = 0
    heal_mask: int = 0
    key_mask: int = 0

    @property
    def position(self) -> Coordinate:
        return self.x, self.z

    @property
    def pickups_collected(self) -> int:
        return count_bits(self.pickup_mask)

    @property
    def hearts_collected(self) -> int:
        return count_bits(self.heal_mask)

    @property
    def keys_held(self) -> int:
        return count_bits(self.key_mask)


@dataclass(frozen=True)
class Move:
    """Single accepted slide, with the health and masks after it."""

    direction: Direction
    start: Coordinate
    end: Coordinate
    health_after: int
    pickup_mask: int
    heal_mask: int
    key_mask: int

    @property
    def pickups_collected(self) -> int:
        return count_bits(self.pickup_mask)

    @property
    def keys_held(self) -> int:
        return count_bits(self.key_mask)

    @property
    def cells(self) -> int:
        return abs(self.end[0] - self.start[0]) + abs(self.end[1] - self.start[1])


class MovementSimulator:
    """Apply one slide to a :class:`SearchState`.

    The slide keeps advancing while the next cell is inside the grid, is not
    an obstacle and is not a lock met without a held key. Every entered cell
    applies, in order: heal, key, lock, hazard, required pickup. Dying on a
    hazard rejects the whole slide.
    """

    def __init__(self, level: LevelModel, max_health: int = MAX_HEALTH):
        self.level = level
        self.max_health = max(1, int(max_health))

    def slide(
        self, state: SearchState, direction: Direction
    ) -> Optional[Tuple[SearchState, Move]]:
        """Return the state and move after the slide, or ``None`` if invalid."""
        outcome = self.simulate(state, direction)
        if isinstance(outcome, SlideRejection):
            return None
        return outcome

    def simulate(
        self, state: SearchState, direction: Direction
    ) -> Union[Tuple[SearchState, Move], SlideRejection]:
        level = self.level
        dx, dz = direction.vector
        x, z = state.x, state.z
        health = state.health
        pickup_mask = state.pickup_mask
        heal_mask = state.heal_mask
        key_mask = state.key_mask
        moved = False

        while not level.is_blocked((x + dx, z + dz), key_mask):
            x += dx
            z += dz
            moved = True
            cell = (x, z)

            heal = level.heal_index(cell)
            if heal is not None and not heal_mask & (1 << heal):
                heal_mask |= 1 << heal
                health = min(health + 1, self.max_health)

            key = level.key_index(cell)
            if key is not None and not key_mask & (1 << key):
                key_mask |= 1 << key

            if cell in level.locks:
                # Keys are interchangeable; spend the lowest held one.
                key_mask &= key_mask - 1

            if cell in level.hazards:
                health -= 1
                if health <= 0:
                    return SlideRejection.DEATH

            pickup = level.pickup_index(cell)
            if pickup is not None:
                pickup_mask |= 1 << pickup

        if not moved:
            return SlideRejection.BLOCKED

        new_state = SearchState(
            x=x,
            z=z,
            health=health,
            pickup_mask=pickup_mask,
            heal_mask=heal_mask,
            key_mask=key_mask,
        )
        move = Move(
            direction=direction,
            start=state.position,
            end=new_state.position,
            health_after=health,
            pickup_mask=pickup_mask,
            heal_mask=heal_mask,
            key_mask=key_mask,
        )
        return new_state, move
