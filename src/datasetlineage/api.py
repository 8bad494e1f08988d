"""
Outward operations returning status-coded responses.

Expected "no data" outcomes never raise from here. They are reported
through ``return_code`` (``200`` or ``404``) and ``message`` in the
response, the way the catalog service has always answered its callers.
Backing-store failures (:class:`RepositoryError`) and aborted traversals
(:class:`TraversalError`) still propagate.

Example:
    >>> repository = InMemoryDatasetRepository.from_yaml("catalog.yaml")
    >>> response = get_lineage("hive:///tracking/page_view", repository=repository)
    >>> response.return_code
    200
    >>> response.report.leaf_level_dependency_count
    3
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from datasetlineage import logger
from . import catalog
from .ancestors import AncestorResolver
from .config.models import LineageSettings
from .exceptions import AncestorError, CatalogLookupError, UriError
from .repository.base import DatasetRepository
from .repository.models import DependentRecord
from .resolver import DependencyReport, LineageResolver

OK = 200
NOT_FOUND = 404

MISSING_URI_MESSAGE = "Wrong input format! Missing dataset uri"
NO_DEPENDENCY_MESSAGE = "Dependency information is not available."
NO_COMMON_PARENTS_MESSAGE = "No common parents found"


@dataclass
class LineageResponse:
    return_code: int
    message: Optional[str] = None
    report: Optional[DependencyReport] = None

    @property
    def ok(self) -> bool:
        return self.return_code == OK and self.report is not None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"return_code": self.return_code}
        if self.message is not None:
            payload["message"] = self.message
        if self.report is not None:
            payload.update(self.report.to_dict())
        return payload


@dataclass
class AncestorResponse:
    return_code: int
    common_parents: List[str] = field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.return_code == OK

    def to_dict(self) -> Dict[str, Any]:
        if self.ok:
            return {"return_code": self.return_code, "common_parents": list(self.common_parents)}
        return {"return_code": self.return_code, "error_message": self.error_message}


@dataclass
class DependentsResponse:
    return_code: int
    dependents: List[DependentRecord] = field(default_factory=list)
    message: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "return_code": self.return_code,
            "dependents": [record.to_dict() for record in self.dependents],
        }
        if self.message is not None:
            payload["message"] = self.message
        return payload


def get_lineage(
    uri: Optional[str],
    cluster: Optional[str] = None,
    *,
    repository: DatasetRepository,
    settings: Optional[LineageSettings] = None,
) -> LineageResponse:
    """
    Resolve the dependency lineage of a dataset URI.

    Returns:
        ``404`` with :data:`MISSING_URI_MESSAGE` for a blank or malformed URI,
        ``200`` with :data:`NO_DEPENDENCY_MESSAGE` and no report when the
        catalog has no matching dataset, ``200`` with the report otherwise.
    """
    resolver = LineageResolver(repository, settings)
    try:
        report = resolver.resolve(uri, cluster)
    except UriError as e:
        logger.warning(f"Rejected dataset uri {uri!r}: {e}")
        return LineageResponse(return_code=NOT_FOUND, message=MISSING_URI_MESSAGE)
    except CatalogLookupError as e:
        logger.warning(f"No catalog record for {uri!r}: {e}")
        return LineageResponse(return_code=OK, message=NO_DEPENDENCY_MESSAGE)
    return LineageResponse(return_code=OK, report=report)


def get_common_ancestors(
    urn_a: str,
    urn_b: str,
    *,
    repository: DatasetRepository,
    settings: Optional[LineageSettings] = None,
) -> AncestorResponse:
    """
    Direct parents shared by two urns.

    ``200`` with the sorted common parents, ``404`` with
    :data:`NO_COMMON_PARENTS_MESSAGE` when there are none.
    """
    resolver = AncestorResolver.from_settings(repository, settings)
    try:
        common = resolver.common_ancestors(urn_a, urn_b)
    except AncestorError as e:
        logger.warning(str(e))
        return AncestorResponse(return_code=NOT_FOUND, error_message=NO_COMMON_PARENTS_MESSAGE)
    return AncestorResponse(return_code=OK, common_parents=sorted(common))


def get_dependents(dataset_id: int, *, repository: DatasetRepository) -> DependentsResponse:
    """Datasets that depend on *dataset_id*."""
    dependents = catalog.get_dependents(repository, dataset_id)
    if dependents is None:
        return DependentsResponse(return_code=NOT_FOUND, message=f"Invalid dataset id {dataset_id}")
    return DependentsResponse(return_code=OK, dependents=dependents)


__all__ = [
    "OK",
    "NOT_FOUND",
    "MISSING_URI_MESSAGE",
    "NO_DEPENDENCY_MESSAGE",
    "NO_COMMON_PARENTS_MESSAGE",
    "LineageResponse",
    "AncestorResponse",
    "DependentsResponse",
    "get_lineage",
    "get_common_ancestors",
    "get_dependents",
]
