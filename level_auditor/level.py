"""Level description parsing and the immutable level model used by the search."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple


logger = logging.getLogger(__name__)

DEFAULT_GRID_SIZE = 21

Coordinate = Tuple[int, int]


class ElementType(Enum):
    """Kinds of map element the auditor understands."""

    OBSTACLE = "OBSTACLE"
    LOCK = "LOCK"
    HAZARD = "HAZARD"
    KEY = "KEY"
    REQUIRED_PICKUP = "REQUIRED_PICKUP"
    HEAL_PICKUP = "HEAL_PICKUP"

    @staticmethod
    def from_name(name: object) -> Optional["ElementType"]:
        if isinstance(name, ElementType):
            return name
        if not isinstance(name, str):
            return None
        key = name.strip().upper()
        key = ELEMENT_ALIASES.get(key, key)
        try:
            return ElementType[key]
        except KeyError:
            return None


# Names used by the level builder tool.
ELEMENT_ALIASES: Dict[str, str] = {
    "MOUNTAIN": "OBSTACLE",
    "SPIKE_TRAP": "HAZARD",
    "STAR_DUST": "REQUIRED_PICKUP",
    "HEART": "HEAL_PICKUP",
}

SPAWN_ELEMENT = "SPAWN_POSITION"


@dataclass
class MapElement:
    """Raw map element in authoring space, validated by the builder."""

    element_type: object
    coordinate: object


@dataclass
class LevelDescription:
    """Declarative level as produced by the authoring tools."""

    width: object = DEFAULT_GRID_SIZE
    depth: object = DEFAULT_GRID_SIZE
    spawn: object = None
    elements: List[MapElement] = field(default_factory=list)
    name: str = "Unknown"
    warnings: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class LevelModel:
    """Parsed level in world coordinates (origin bottom-left)."""

    name: str
    width: int
    depth: int
    spawn: Coordinate
    obstacles: FrozenSet[Coordinate] = frozenset()
    locks: FrozenSet[Coordinate] = frozenset()
    hazards: FrozenSet[Coordinate] = frozenset()
    keys: Tuple[Coordinate, ...] = ()
    required_pickups: Tuple[Coordinate, ...] = ()
    heal_pickups: Tuple[Coordinate, ...] = ()
    warnings: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Index lookups for the per-cell effect checks.
        object.__setattr__(self, "_key_index", _index(self.keys))
        object.__setattr__(self, "_pickup_index", _index(self.required_pickups))
        object.__setattr__(self, "_heal_index", _index(self.heal_pickups))

    @property
    def full_pickup_mask(self) -> int:
        return (1 << len(self.required_pickups)) - 1

    @property
    def metadata(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "dimensions": f"{self.width}x{self.depth}",
            "spawn": list(self.spawn),
            "required_pickups": len(self.required_pickups),
            "heal_pickups": len(self.heal_pickups),
            "keys": len(self.keys),
            "locks": len(self.locks),
            "hazards": len(self.hazards),
            "obstacles": len(self.obstacles),
        }

    def inside(self, position: Coordinate) -> bool:
        x, z = position
        return 0 <= x < self.width and 0 <= z < self.depth

    def is_blocked(self, position: Coordinate, key_mask: int) -> bool:
        """Whether a slide cannot enter ``position`` while holding ``key_mask``."""
        if not self.inside(position) or position in self.obstacles:
            return True
        return position in self.locks and key_mask == 0

    def key_index(self, position: Coordinate) -> Optional[int]:
        return self._key_index.get(position)

    def pickup_index(self, position: Coordinate) -> Optional[int]:
        return self._pickup_index.get(position)

    def heal_index(self, position: Coordinate) -> Optional[int]:
        return self._heal_index.get(position)


def _index(positions: Iterable[Coordinate]) -> Dict[Coordinate, int]:
    return {position: index for index, position in enumerate(positions)}


def builder_to_world(x: int, y: int, depth: int) -> Coordinate:
    """Convert top-left authoring coordinates into bottom-left world ones."""
    return x, depth - 1 - y


def _coerce_int(value: object) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def _parse_coordinate(raw: object) -> Optional[Coordinate]:
    if isinstance(raw, Mapping):
        x, y = raw.get("x"), raw.get("y")
    elif isinstance(raw, (list, tuple)) and len(raw) == 2:
        x, y = raw
    else:
        return None
    x, y = _coerce_int(x), _coerce_int(y)
    if x is None or y is None:
        return None
    return x, y


class LevelModelBuilder:
    """Classify raw map elements into a :class:`LevelModel`."""

    def __init__(self, description: LevelDescription):
        self.description = description
        self.warnings: List[str] = []

    def _warn(self, message: str) -> None:
        logger.warning("%s: %s", self.description.name, message)
        self.warnings.append(message)

    def _grid_size(self, value: object, label: str) -> int:
        size = _coerce_int(value)
        if size is None or size <= 0:
            self._warn(
                f"Invalid grid {label} {value!r}; using default {DEFAULT_GRID_SIZE}"
            )
            return DEFAULT_GRID_SIZE
        return size

    def build(self) -> LevelModel:
        description = self.description
        for message in description.warnings:
            self._warn(message)
        width = self._grid_size(description.width, "width")
        depth = self._grid_size(description.depth, "depth")

        obstacles: Set[Coordinate] = set()
        locks: Set[Coordinate] = set()
        hazards: Set[Coordinate] = set()
        collectibles: Dict[ElementType, List[Coordinate]] = {
            ElementType.KEY: [],
            ElementType.REQUIRED_PICKUP: [],
            ElementType.HEAL_PICKUP: [],
        }
        tile_sets = {
            ElementType.OBSTACLE: obstacles,
            ElementType.LOCK: locks,
            ElementType.HAZARD: hazards,
        }

        for index, element in enumerate(description.elements):
            element_type = ElementType.from_name(element.element_type)
            if element_type is None:
                self._warn(
                    f"Skipping element #{index}: unknown type {element.element_type!r}"
                )
                continue
            authored = _parse_coordinate(element.coordinate)
            if authored is None:
                self._warn(
                    f"Skipping {element_type.name} #{index}: "
                    f"invalid coordinate {element.coordinate!r}"
                )
                continue
            if not (0 <= authored[0] < width and 0 <= authored[1] < depth):
                self._warn(
                    f"Skipping {element_type.name} #{index}: "
                    f"{authored} is outside the {width}x{depth} grid"
                )
                continue
            position = builder_to_world(authored[0], authored[1], depth)
            if element_type in tile_sets:
                tile_sets[element_type].add(position)
                continue
            entries = collectibles[element_type]
            if position in entries:
                self._warn(
                    f"Skipping {element_type.name} #{index}: duplicate at {authored}"
                )
                continue
            entries.append(position)

        return LevelModel(
            name=description.name,
            width=width,
            depth=depth,
            spawn=self._spawn(width, depth),
            obstacles=frozenset(obstacles),
            locks=frozenset(locks),
            hazards=frozenset(hazards),
            keys=tuple(collectibles[ElementType.KEY]),
            required_pickups=tuple(collectibles[ElementType.REQUIRED_PICKUP]),
            heal_pickups=tuple(collectibles[ElementType.HEAL_PICKUP]),
            warnings=tuple(self.warnings),
        )

    def _spawn(self, width: int, depth: int) -> Coordinate:
        fallback = (width // 2, depth - 1 - depth // 2)
        authored = _parse_coordinate(self.description.spawn)
        if authored is None:
            self._warn(
                f"Invalid spawn {self.description.spawn!r}; using grid centre"
            )
            return fallback
        if not (0 <= authored[0] < width and 0 <= authored[1] < depth):
            self._warn(f"Spawn {authored} is outside the grid; using grid centre")
            return fallback
        return builder_to_world(authored[0], authored[1], depth)


def build_level_model(description: LevelDescription) -> LevelModel:
    return LevelModelBuilder(description).build()


def parse_level_description(data: object) -> LevelDescription:
    """Read either the interchange or the level-builder level layout.

    Structural problems are recorded on the description instead of raised,
    and the builder reports them alongside its own warnings.
    """

    problems: List[str] = []
    if not isinstance(data, Mapping):
        problems.append(f"Level data is not a mapping: {type(data).__name__}")
        data = {}

    width = data.get("gridWidth", data.get("mapWidth", DEFAULT_GRID_SIZE))
    depth = data.get(
        "gridDepth",
        data.get("mapDepth", data.get("mapHeight", DEFAULT_GRID_SIZE)),
    )
    spawn = data.get("spawn")
    elements: List[MapElement] = []
    raw_elements = data.get("mapElements", data.get("allMapElements"))
    if raw_elements is None:
        raw_elements = []
    elif not isinstance(raw_elements, (list, tuple)):
        problems.append(f"Ignoring map elements: expected a list, got {raw_elements!r}")
        raw_elements = []
    for raw in raw_elements:
        if not isinstance(raw, Mapping):
            elements.append(MapElement(element_type=None, coordinate=raw))
            continue
        element_type = raw.get("elementType", raw.get("element"))
        coordinate = raw.get("coordinate", raw.get("coordinates"))
        if element_type == SPAWN_ELEMENT:
            if spawn is None:
                spawn = coordinate
            continue
        elements.append(MapElement(element_type=element_type, coordinate=coordinate))
    return LevelDescription(
        width=width,
        depth=depth,
        spawn=spawn,
        elements=elements,
        name=str(data.get("levelName", data.get("name", "Unknown"))),
        warnings=problems,
    )


class LevelLoader:
    """Load level files stored as JSON."""

    def __init__(self, root: Path):
        self.root = Path(root)

    def load_file(self, path: Path) -> LevelDescription:
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(path)
        description = parse_level_description(json.loads(path.read_text()))
        if description.name == "Unknown":
            description.name = path.stem
        return description

    def load_description(self, name: str) -> LevelDescription:
        return self.load_file(self.root / f"{name}.json")

    def load(self, name: str) -> LevelModel:
        return build_level_model(self.load_description(name))
