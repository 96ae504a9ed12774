"""Turn an :class:`AuditResult` into payloads and readable text.

Nothing here re-runs the search; every figure comes from the result.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional

from .level import Coordinate
from .movement import Move
from .search import AuditOutcome, AuditResult, PartialProgress


def _position(position: Coordinate) -> Dict[str, int]:
    return {"x": position[0], "z": position[1]}


def move_payload(move: Move) -> Dict[str, object]:
    return {
        "direction": move.direction.name,
        "from": _position(move.start),
        "to": _position(move.end),
        "healthAfter": move.health_after,
        "pickupsCollectedCount": move.pickups_collected,
        "keysHeldCount": move.keys_held,
    }


def partial_payload(partial: Optional[PartialProgress]) -> Optional[Dict[str, object]]:
    if partial is None:
        return None
    return {
        "moves": partial.moves,
        "position": _position(partial.position),
        "health": partial.health,
        "pickupsCollected": partial.pickups_collected,
        "path": [move_payload(move) for move in partial.path],
    }


def build_report(result: AuditResult) -> Dict[str, object]:
    """Structured report exchanged with authoring and CI tooling."""

    if result.solvable:
        report: Dict[str, object] = {
            "solvable": True,
            "minimumMoves": result.minimum_moves,
            "path": [move_payload(move) for move in result.path],
            "finalHealth": result.final_health,
            "heartsCollected": result.hearts_collected,
            "keysCollected": result.keys_collected,
            "statesExplored": result.states_explored,
        }
    else:
        report = {
            "solvable": False,
            "reason": result.outcome.value,
            "statesExplored": result.states_explored,
            "bestPartial": partial_payload(result.best_partial),
        }
    report["warnings"] = list(result.warnings)
    return report


def path_summary(moves: Iterable[Move]) -> str:
    return " → ".join(move.direction.initial for move in moves)


def _describe_move(index: int, move: Move) -> str:
    return (
        f"{index:>3}. {move.direction.name:<5} | "
        f"({move.start[0]},{move.start[1]}) -> ({move.end[0]},{move.end[1]}) | "
        f"health {move.health_after} pickups {move.pickups_collected} "
        f"keys {move.keys_held}"
    )


def format_report(result: AuditResult) -> List[str]:
    """Readable lines describing the audit, for logs and the demo."""

    level = result.level
    settings = result.settings
    lines = [
        f"Level: {level.name} ({level.width}x{level.depth}), "
        f"spawn ({level.spawn[0]}, {level.spawn[1]})",
        f"Required pickups: {result.required_pickups}, keys: {len(level.keys)}, "
        f"locks: {len(level.locks)}, hazards: {len(level.hazards)}, "
        f"hearts: {len(level.heal_pickups)}",
        f"Starting health: {settings.starting_health}/{settings.max_health}",
    ]
    for warning in result.warnings:
        lines.append(f"Warning: {warning}")

    if result.solvable:
        lines.extend(
            [
                "Level is SOLVABLE",
                f"Minimum moves: {result.minimum_moves}",
                f"Final health: {result.final_health}/{settings.max_health}",
                f"Hearts collected: {result.hearts_collected}",
                f"Keys collected: {result.keys_collected}",
                f"States explored: {result.states_explored}",
                "Optimal path:",
            ]
        )
        lines.extend(
            _describe_move(index, move) for index, move in enumerate(result.path, 1)
        )
        lines.append(f"Summary: {path_summary(result.path)}")
        return lines

    lines.append("Level is UNSOLVABLE")
    lines.append(f"Reason: {result.outcome.value}")
    if result.outcome is AuditOutcome.NO_OBJECTIVE:
        return lines
    if result.outcome is AuditOutcome.SEARCH_EXHAUSTED:
        lines.append(
            f"Search stopped at the {settings.max_expansions} expansion cap; "
            "solvability is unknown"
        )
    lines.extend(
        [
            f"States explored: {result.states_explored}",
            f"States discovered: {result.states_discovered}",
            f"Slides ending in death: {result.deaths}",
            f"States reached at 1 health: {result.low_health_states}",
        ]
    )
    partial = result.best_partial
    if partial is not None:
        lines.extend(
            [
                f"Best partial progress: {partial.pickups_collected}/"
                f"{result.required_pickups} pickups",
                f"  Position: ({partial.position[0]}, {partial.position[1]})",
                f"  Moves used: {partial.moves}",
                f"  Health remaining: {partial.health}",
            ]
        )
        if partial.path:
            lines.append(f"  Path: {path_summary(partial.path)}")
    return lines
