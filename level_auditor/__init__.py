"""Level solvability auditor package."""

from .level import ElementType, LevelDescription, LevelLoader, LevelModel, MapElement, build_level_model
from .movement import Direction, Move, MovementSimulator, SearchState
from .report import build_report, format_report
from .search import AuditOutcome, AuditResult, AuditSettings, LevelAuditor, audit_level
from .solutions import SolutionValidator, replay_moves

__all__ = [
    "AuditOutcome",
    "AuditResult",
    "AuditSettings",
    "Direction",
    "ElementType",
    "LevelAuditor",
    "LevelDescription",
    "LevelLoader",
    "LevelModel",
    "MapElement",
    "Move",
    "MovementSimulator",
    "SearchState",
    "SolutionValidator",
    "audit_level",
    "build_level_model",
    "build_report",
    "format_report",
    "replay_moves",
]
