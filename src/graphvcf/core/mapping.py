"""
Node-keyed mapping stores.

Both stores are built once per run by the loaders in :mod:`graphvcf.io.input`
and are read-only afterwards, so they can be shared between worker threads
without synchronization. :class:`MappingContext` bundles them and is passed
explicitly to the resolver instead of living in module-level caches.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

__all__ = [
    "ALREADY_LINEAR_DISTANCE",
    "AlignmentRecord",
    "AlignmentStore",
    "LoadReport",
    "MappingContext",
    "PathRecord",
    "ReferenceStore",
]

# Alignment distances above this value mean the reported position is already linear.
ALREADY_LINEAR_DISTANCE = 1_000_000_000


@dataclass(frozen=True)
class PathRecord:
    """Placement of a node on its path in the reference extraction table."""

    path_name: str
    start_offset: int
    sequence: str | None = None


@dataclass(frozen=True)
class AlignmentRecord:
    """Placement of a node reported by the alignment table."""

    path_name: str | None
    distance: int | None
    position: int | None

    def linear_position(self) -> int | None:
        """
        Linear coordinate of the node start.

        ``position`` is taken verbatim when ``distance`` exceeds
        :data:`ALREADY_LINEAR_DISTANCE`; otherwise the clamped
        ``distance + 1`` offset is added (distances below -1 add nothing).
        """
        if self.position is None:
            return None
        if self.distance is None:
            return self.position
        if self.distance > ALREADY_LINEAR_DISTANCE:
            return self.position
        return self.position + max(self.distance + 1, 0)


@dataclass
class LoadReport:
    """Row accounting for a table load."""

    rows: int = 0
    loaded: int = 0
    malformed: int = 0
    duplicates: int = 0
    header: bool = False


def _frozen(mapping: dict) -> Mapping:
    return MappingProxyType(dict(mapping))


@dataclass(frozen=True)
class ReferenceStore:
    """node -> (path, start offset, sequence) from the reference extraction table."""

    records: Mapping[int, PathRecord] = field(default_factory=dict)
    path_lengths: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", _frozen(self.records))
        object.__setattr__(self, "path_lengths", _frozen(self.path_lengths))

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.records

    def path_for(self, node_id: int) -> str | None:
        rec = self.records.get(node_id)
        return rec.path_name if rec else None

    def start_for(self, node_id: int) -> int | None:
        rec = self.records.get(node_id)
        return rec.start_offset if rec else None

    def sequence_for(self, node_id: int) -> str | None:
        rec = self.records.get(node_id)
        return rec.sequence if rec else None


@dataclass(frozen=True)
class AlignmentStore:
    """node -> (path, signed distance, position) from the alignment table."""

    records: Mapping[int, AlignmentRecord] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "records", _frozen(self.records))

    def __len__(self) -> int:
        return len(self.records)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self.records

    def path_for(self, node_id: int) -> str | None:
        rec = self.records.get(node_id)
        return rec.path_name if rec else None

    def position_for(self, node_id: int) -> int | None:
        rec = self.records.get(node_id)
        return rec.linear_position() if rec else None


@dataclass(frozen=True)
class MappingContext:
    """Everything resolved from the input tables for one run."""

    reference: ReferenceStore = field(default_factory=ReferenceStore)
    alignment: AlignmentStore = field(default_factory=AlignmentStore)

    @property
    def is_empty(self) -> bool:
        return not self.reference and not self.alignment
