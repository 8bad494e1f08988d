"""Repository interface consumed by the lineage core."""

from __future__ import annotations

from typing import Any, Callable, List, Optional, Protocol, Set, TypeVar, runtime_checkable

from datasetlineage import logger
from ..exceptions import DatasetLineageError, RepositoryError
from .models import CatalogRecord, DatasetEntry, DependencyEdge, DependentRecord

T = TypeVar("T")


@runtime_checkable
class DatasetRepository(Protocol):
    """
    Protocol for catalog access to enable dependency injection.

    Implementations may be backed by any storage engine. Result ordering
    must be stable between calls on an unchanged store: the order of
    :meth:`lookup_dependency_edges` decides sibling positions in a
    dependency tree, and the first row of :meth:`lookup_catalog_record`
    wins when several match.
    """

    def lookup_catalog_record(
        self, object_path: str, platform: Optional[str], cluster: str
    ) -> Optional[CatalogRecord]:
        """Case-insensitive match on ``/<db>/<table>`` and cluster, filtered by platform when given."""

    def lookup_dependency_edges(self, dataset_id: int) -> List[DependencyEdge]:
        """Direct dependency edges of a dataset in store order."""

    def lookup_direct_parents(self, urn: str) -> Set[str]:
        """Urns recorded as direct parents of *urn*."""

    def get_dataset_by_id(self, dataset_id: int) -> Optional[DatasetEntry]:
        """Dataset row by id."""

    def get_dataset_by_urn(self, urn: str) -> Optional[DatasetEntry]:
        """Dataset row by urn."""

    def list_datasets(self) -> List[DatasetEntry]:
        """Every dataset row in store order."""

    def lookup_dependents(self, dataset_id: int) -> List[DependentRecord]:
        """Datasets with an edge pointing at *dataset_id*."""

    def lookup_dependents_by_name(self, object_type: str, path: str) -> List[DependentRecord]:
        """Datasets with an edge pointing at *path*, or anything below it, of *object_type*."""


def call_repository(operation: str, func: Callable[..., T], *args: Any) -> T:
    """
    Invoke a repository method, converting backing-store failures into
    :class:`RepositoryError`.

    Errors from this package pass through untouched. Nothing is retried.
    """
    try:
        return func(*args)
    except DatasetLineageError:
        raise
    except Exception as exc:
        logger.error(f"Repository operation '{operation}' failed for {args}: {exc}")
        raise RepositoryError(
            f"Repository operation '{operation}' failed: {exc}",
            error_code="REPOSITORY_001",
            context={"operation": operation, "arguments": args},
        ) from exc


__all__ = ["DatasetRepository", "call_repository"]
