"""
Dependency tree expansion.

Starting from a dataset id, direct dependency edges are fetched from the
repository and expanded recursively into a flat list of
:class:`DependencyRecord` objects.

Records are numbered in pre-order and appended in post-order: the sort id of
a record is its parent's sort id followed by ``sibling_index * 100``
(``"100"``, ``"200"``, ``"100100"`` ...), while a record only joins the
output list once all of its own dependencies have been appended. For a root
with dependencies A (which depends on C) and B the output is
``[C "100100", A "100", B "200"]``.

Sort ids are plain decimal concatenations, so lexicographic order follows
traversal order only while every node has fewer than ten direct
dependencies.

The builder refuses to walk a cycle and bounds both depth and tree size
with the limits from :class:`~datasetlineage.config.LineageSettings`.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from datasetlineage import logger
from .config.models import DEFAULT_MAX_DEPTH, DEFAULT_MAX_NODES, LineageSettings
from .exceptions import TraversalError, log_and_raise
from .repository.base import DatasetRepository, call_repository
from .repository.models import DependencyEdge

SIBLING_STEP = 100


@dataclass
class DependencyRecord:
    """One node of a dependency tree."""

    dataset_id: Optional[int]
    database_name: str = ""
    table_name: str = ""
    level_from_root: int = 1
    type: Optional[str] = None
    ref_obj_location: Optional[str] = None
    ref_obj_type: Optional[str] = None
    topology_sort_id: str = ""
    next_level_dependency_count: int = 0

    @property
    def is_leaf(self) -> bool:
        return self.next_level_dependency_count == 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def split_object_location(location: Optional[str]) -> Tuple[str, str]:
    """
    Extract ``(database, table)`` from an object location such as ``/db/table``.

    Only a location made of exactly three ``/`` separated segments yields
    names; anything else returns two empty strings. A trailing ``/`` is
    ignored.
    """
    if not location or not location.strip():
        return "", ""
    segments = location.split("/")
    while len(segments) > 1 and segments[-1] == "":
        segments.pop()
    if len(segments) != 3:
        return "", ""
    return segments[1], segments[2]


def count_leaf_dependencies(records: List[DependencyRecord]) -> int:
    """Number of records without further dependencies. The root is never a record."""
    return sum(1 for record in records if record.is_leaf)


def display_order(records: List[DependencyRecord]) -> List[DependencyRecord]:
    """Records sorted by topology sort id (pre-order)."""
    return sorted(records, key=lambda record: record.topology_sort_id)


@dataclass
class _TraversalState:
    path: List[int] = field(default_factory=list)
    on_path: Set[int] = field(default_factory=set)
    created: int = 0

    def enter(self, dataset_id: int) -> None:
        self.path.append(dataset_id)
        self.on_path.add(dataset_id)

    def leave(self) -> None:
        self.on_path.discard(self.path.pop())


class DependencyTreeBuilder:
    """
    Expands dependency edges into an ordered list of :class:`DependencyRecord`.

    Args:
        repository: Source of dependency edges
        max_depth: Deepest ``level_from_root`` allowed
        max_nodes: Largest number of records a single expansion may create
    """

    def __init__(
        self,
        repository: DatasetRepository,
        max_depth: Optional[int] = None,
        max_nodes: Optional[int] = None,
    ):
        self.repository = repository
        self.max_depth = max_depth if max_depth is not None else DEFAULT_MAX_DEPTH
        self.max_nodes = max_nodes if max_nodes is not None else DEFAULT_MAX_NODES

    @classmethod
    def from_settings(cls, repository: DatasetRepository, settings: LineageSettings) -> "DependencyTreeBuilder":
        return cls(repository, max_depth=settings.max_depth, max_nodes=settings.max_nodes)

    def expand(
        self,
        dataset_id: int,
        sort_prefix: str = "",
        level: int = 1,
        accumulator: Optional[List[DependencyRecord]] = None,
    ) -> int:
        """
        Expand the dependencies of *dataset_id* into *accumulator*.

        Args:
            dataset_id: Dataset whose dependencies are expanded
            sort_prefix: Topology sort id of *dataset_id* ("" for the root)
            level: ``level_from_root`` given to the direct dependencies
            accumulator: List receiving the records; a new list when None

        Returns:
            Number of direct dependencies of *dataset_id*

        Raises:
            TraversalError: On a cycle or when a configured limit is exceeded
            RepositoryError: When an edge lookup fails; nothing is returned
                for the partially expanded tree
        """
        if accumulator is None:
            accumulator = []
        state = _TraversalState()
        state.enter(dataset_id)
        return self._expand(dataset_id, sort_prefix, level, accumulator, state)

    def build(self, dataset_id: int) -> List[DependencyRecord]:
        """Expand the full tree rooted at *dataset_id*."""
        records: List[DependencyRecord] = []
        self.expand(dataset_id, "", 1, records)
        logger.debug(
            f"Dependency tree of dataset {dataset_id}: {len(records)} records, "
            f"{count_leaf_dependencies(records)} leaves"
        )
        return records

    def _expand(
        self,
        dataset_id: int,
        sort_prefix: str,
        level: int,
        accumulator: List[DependencyRecord],
        state: _TraversalState,
    ) -> int:
        edges: List[DependencyEdge] = call_repository(
            "lookup_dependency_edges", self.repository.lookup_dependency_edges, dataset_id
        )
        if not edges:
            return 0

        if level > self.max_depth:
            log_and_raise(TraversalError(
                f"Dependency tree deeper than {self.max_depth} levels",
                error_code="TRAVERSAL_002",
                context={"dataset_id": dataset_id, "max_depth": self.max_depth, "path": list(state.path)},
            ), logger)

        for index, edge in enumerate(edges, start=1):
            state.created += 1
            if state.created > self.max_nodes:
                log_and_raise(TraversalError(
                    f"Dependency tree larger than {self.max_nodes} records",
                    error_code="TRAVERSAL_003",
                    context={"dataset_id": dataset_id, "max_nodes": self.max_nodes},
                ), logger)

            database_name, table_name = split_object_location(edge.mapped_object_name)
            record = DependencyRecord(
                dataset_id=edge.mapped_dataset_id,
                database_name=database_name,
                table_name=table_name,
                level_from_root=level,
                type=edge.mapped_object_sub_type,
                ref_obj_location=edge.mapped_object_name,
                ref_obj_type=edge.mapped_object_type,
                topology_sort_id=f"{sort_prefix}{index * SIBLING_STEP}",
            )

            child_id = edge.mapped_dataset_id
            if child_id is not None:
                if child_id in state.on_path:
                    log_and_raise(TraversalError(
                        f"Cyclic dependency through dataset {child_id}",
                        error_code="TRAVERSAL_001",
                        context={"dataset_id": child_id, "path": list(state.path) + [child_id]},
                    ), logger)
                state.enter(child_id)
                try:
                    record.next_level_dependency_count = self._expand(
                        child_id, record.topology_sort_id, level + 1, accumulator, state
                    )
                finally:
                    state.leave()

            accumulator.append(record)

        return len(edges)


__all__ = [
    "SIBLING_STEP",
    "DependencyRecord",
    "DependencyTreeBuilder",
    "split_object_location",
    "count_leaf_dependencies",
    "display_order",
]
