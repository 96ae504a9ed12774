"""Breadth-first search for the shortest slide sequence that clears a level."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Deque, Dict, List, Mapping, Optional, Tuple, Union

from .level import (
    Coordinate,
    LevelDescription,
    LevelModel,
    build_level_model,
    parse_level_description,
)
from .movement import (
    MAX_HEALTH,
    STARTING_HEALTH,
    Direction,
    Move,
    MovementSimulator,
    SearchState,
    SlideRejection,
    clamp_health,
)


logger = logging.getLogger(__name__)

MAX_EXPANSIONS = 1_000_000

# Parent link for each visited state; ``None`` marks the spawn state.
ParentLinks = Dict[SearchState, Optional[Tuple[SearchState, Move]]]


class AuditOutcome(Enum):
    """Final verdict of an audit."""

    SOLVED = "SOLVED"
    NO_OBJECTIVE = "NO_OBJECTIVE"
    NO_PATH = "NO_PATH"
    SEARCH_EXHAUSTED = "SEARCH_EXHAUSTED"


@dataclass
class AuditSettings:
    starting_health: int = STARTING_HEALTH
    max_health: int = MAX_HEALTH
    max_expansions: int = MAX_EXPANSIONS

    def __post_init__(self) -> None:
        self.max_health = max(1, _as_int(self.max_health, MAX_HEALTH))
        self.starting_health = clamp_health(
            self.starting_health, maximum=self.max_health, allow_zero=True
        )
        self.max_expansions = max(1, _as_int(self.max_expansions, MAX_EXPANSIONS))


def _as_int(value: object, default: int) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return default


@dataclass
class PartialProgress:
    """Snapshot of the furthest-progressing state seen by the search."""

    moves: int
    position: Coordinate
    health: int
    pickups_collected: int
    path: List[Move] = field(default_factory=list)


@dataclass
class AuditResult:
    """Everything the search learned about one level."""

    outcome: AuditOutcome
    level: LevelModel
    states_explored: int = 0
    states_discovered: int = 0
    path: List[Move] = field(default_factory=list)
    final_health: Optional[int] = None
    hearts_collected: int = 0
    keys_collected: int = 0
    best_partial: Optional[PartialProgress] = None
    deaths: int = 0
    low_health_states: int = 0
    settings: AuditSettings = field(default_factory=AuditSettings)

    @property
    def solvable(self) -> bool:
        return self.outcome is AuditOutcome.SOLVED

    @property
    def minimum_moves(self) -> Optional[int]:
        return len(self.path) if self.solvable else None

    @property
    def required_pickups(self) -> int:
        return len(self.level.required_pickups)

    @property
    def warnings(self) -> Tuple[str, ...]:
        return self.level.warnings


def _rebuild_path(parents: ParentLinks, state: SearchState) -> List[Move]:
    moves: List[Move] = []
    link = parents[state]
    while link is not None:
        parent, move = link
        moves.append(move)
        link = parents[parent]
    moves.reverse()
    return moves


class LevelAuditor:
    """Find the minimum number of slides that collects every required pickup."""

    def __init__(self, settings: Optional[AuditSettings] = None):
        self.settings = settings or AuditSettings()

    def initial_state(self, level: LevelModel) -> SearchState:
        x, z = level.spawn
        return SearchState(x=x, z=z, health=self.settings.starting_health)

    def audit(
        self, level: Union[LevelModel, LevelDescription, Mapping]
    ) -> AuditResult:
        if not isinstance(level, (LevelModel, LevelDescription)):
            level = parse_level_description(level)
        if isinstance(level, LevelDescription):
            level = build_level_model(level)
        return self.find_optimal_path(level)

    def find_optimal_path(self, level: LevelModel) -> AuditResult:
        settings = self.settings
        start = self.initial_state(level)

        # A spawn with no health can make no move.
        if not level.required_pickups or start.health <= 0:
            outcome = (
                AuditOutcome.NO_PATH if level.required_pickups else AuditOutcome.NO_OBJECTIVE
            )
            return AuditResult(
                outcome=outcome,
                level=level,
                best_partial=PartialProgress(
                    moves=0,
                    position=start.position,
                    health=start.health,
                    pickups_collected=0,
                ),
                settings=settings,
            )

        simulator = MovementSimulator(level, settings.max_health)
        target_mask = level.full_pickup_mask
        parents: ParentLinks = {start: None}
        queue: Deque[Tuple[SearchState, int]] = deque([(start, 0)])

        expansions = 0
        deaths = 0
        low_health_states = 0
        best_state, best_moves = start, 0

        while queue and expansions < settings.max_expansions:
            state, moves = queue.popleft()
            expansions += 1

            # BFS dequeues in move order, so the first strict improvement is
            # also the shortest one.
            if state.pickups_collected > best_state.pickups_collected:
                best_state, best_moves = state, moves
            if state.health == 1:
                low_health_states += 1

            if state.pickup_mask == target_mask:
                path = _rebuild_path(parents, state)
                logger.debug(
                    "%s solved in %d moves after %d expansions",
                    level.name,
                    moves,
                    expansions,
                )
                return AuditResult(
                    outcome=AuditOutcome.SOLVED,
                    level=level,
                    states_explored=expansions,
                    states_discovered=len(parents),
                    path=path,
                    final_health=state.health,
                    hearts_collected=state.hearts_collected,
                    keys_collected=state.keys_held,
                    best_partial=self._snapshot(parents, state, moves),
                    deaths=deaths,
                    low_health_states=low_health_states,
                    settings=settings,
                )

            for direction in Direction:
                outcome = simulator.simulate(state, direction)
                if outcome is SlideRejection.DEATH:
                    deaths += 1
                    continue
                if isinstance(outcome, SlideRejection):
                    continue
                next_state, move = outcome
                if next_state in parents:
                    continue
                parents[next_state] = (state, move)
                queue.append((next_state, moves + 1))

        exhausted = bool(queue)
        logger.debug(
            "%s unsolved (%s) after %d expansions",
            level.name,
            "cap reached" if exhausted else "frontier empty",
            expansions,
        )
        return AuditResult(
            outcome=AuditOutcome.SEARCH_EXHAUSTED if exhausted else AuditOutcome.NO_PATH,
            level=level,
            states_explored=expansions,
            states_discovered=len(parents),
            best_partial=self._snapshot(parents, best_state, best_moves),
            deaths=deaths,
            low_health_states=low_health_states,
            settings=settings,
        )

    @staticmethod
    def _snapshot(parents: ParentLinks, state: SearchState, moves: int) -> PartialProgress:
        return PartialProgress(
            moves=moves,
            position=state.position,
            health=state.health,
            pickups_collected=state.pickups_collected,
            path=_rebuild_path(parents, state),
        )


def audit_level(
    level: Union[LevelModel, LevelDescription, Mapping],
    settings: Optional[AuditSettings] = None,
) -> AuditResult:
    return LevelAuditor(settings).audit(level)
