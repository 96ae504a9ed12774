"""Replay reference solutions shipped alongside level files."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from .level import LevelLoader, LevelModel
from .movement import Direction, Move, MovementSimulator, SearchState, SlideRejection
from .search import AuditSettings, LevelAuditor


@dataclass
class ReplayResult:
    """Outcome of playing a fixed move list from the spawn."""

    final_state: SearchState
    moves: List[Move] = field(default_factory=list)
    failed_at: Optional[int] = None
    failure: Optional[SlideRejection] = None
    completed: bool = False


def replay_moves(
    level: LevelModel,
    directions: Iterable[Union[Direction, str]],
    settings: Optional[AuditSettings] = None,
) -> ReplayResult:
    """Play ``directions`` in order, stopping at the first invalid slide."""

    auditor = LevelAuditor(settings)
    simulator = MovementSimulator(level, auditor.settings.max_health)
    state = auditor.initial_state(level)
    result = ReplayResult(final_state=state)
    for index, direction in enumerate(directions):
        if not isinstance(direction, Direction):
            direction = Direction.from_name(direction)
        outcome = simulator.simulate(state, direction)
        if isinstance(outcome, SlideRejection):
            result.failed_at = index
            result.failure = outcome
            break
        state, move = outcome
        result.moves.append(move)
    result.final_state = state
    result.completed = (
        result.failed_at is None
        and state.health > 0
        and bool(level.required_pickups)
        and state.pickup_mask == level.full_pickup_mask
    )
    return result


class SolutionValidator:
    """Validate that a solution file clears its level."""

    def __init__(
        self,
        level_loader: LevelLoader,
        solutions_root: Path,
        settings: Optional[AuditSettings] = None,
    ):
        self.level_loader = level_loader
        self.solutions_root = Path(solutions_root)
        self.settings = settings or AuditSettings()

    def load_solution(self, name: str) -> Dict:
        path = self.solutions_root / f"{name}.json"
        if not path.exists():
            raise FileNotFoundError(path)
        return json.loads(path.read_text())

    def replay(self, level: LevelModel, solution: Dict) -> ReplayResult:
        return replay_moves(level, solution.get("moves", []), self.settings)

    def validate(self, level_name: str, solution_name: Optional[str] = None) -> bool:
        level = self.level_loader.load(level_name)
        solution = self.load_solution(solution_name or level_name)
        replay = self.replay(level, solution)
        if not replay.completed:
            return False
        expected_minimum = solution.get("expected_minimum_moves")
        if expected_minimum is not None:
            result = LevelAuditor(self.settings).find_optimal_path(level)
            if result.minimum_moves != int(expected_minimum):
                return False
        return True
