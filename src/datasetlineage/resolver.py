"""
Lineage resolution: URI -> catalog record -> dependency tree -> report.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from datasetlineage import logger
from .config.models import LineageSettings
from .exceptions import CatalogLookupError
from .repository.base import DatasetRepository, call_repository
from .repository.models import CatalogRecord
from .tree import DependencyRecord, DependencyTreeBuilder, count_leaf_dependencies
from .uri import DatasetIdentity, Platform, normalize, reconstruct_uri


@dataclass
class DependencyReport:
    """Lineage of one dataset as resolved against the catalog."""

    identity: DatasetIdentity
    dataset_id: int
    urn: str
    dataset_type: str
    deployment_tier: Optional[str]
    data_center: Optional[str]
    cluster: str
    input_uri: str
    dependencies: List[DependencyRecord] = field(default_factory=list)
    leaf_level_dependency_count: int = 0

    @property
    def database_name(self) -> str:
        return self.identity.database

    @property
    def table_name(self) -> str:
        return self.identity.table

    def to_dict(self) -> Dict[str, Any]:
        return {
            "deployment_tier": self.deployment_tier,
            "data_center": self.data_center,
            "cluster": self.cluster,
            "dataset_type": self.dataset_type,
            "database_name": self.database_name,
            "table_name": self.table_name,
            "urn": self.urn,
            "dataset_id": self.dataset_id,
            "input_uri": self.input_uri,
            "dependencies": [record.to_dict() for record in self.dependencies],
            "leaf_level_dependency_count": self.leaf_level_dependency_count,
        }


def _display_platform(identity: DatasetIdentity, record: CatalogRecord) -> DatasetIdentity:
    # a hive catalog type always wins, a dalids type only upgrades a generic uri
    typed = Platform.from_dataset_type(record.dataset_type)
    if typed is Platform.HIVE or (typed is not None and not identity.is_recognized):
        return identity.with_platform(typed)
    return identity


class LineageResolver:
    """
    Resolves a dataset URI into a :class:`DependencyReport`.

    Args:
        repository: Catalog access
        settings: Default cluster, recognized platforms and traversal limits
    """

    def __init__(self, repository: DatasetRepository, settings: Optional[LineageSettings] = None):
        self.repository = repository
        self.settings = settings or LineageSettings()
        self.tree_builder = DependencyTreeBuilder.from_settings(repository, self.settings)

    def identify(self, raw_uri: Optional[str], cluster: Optional[str] = None) -> DatasetIdentity:
        """Normalize *raw_uri*, falling back to the configured default cluster."""
        default_cluster = cluster if cluster is not None else self.settings.default_cluster
        return normalize(raw_uri, default_cluster, self.settings.platforms)

    def lookup(self, identity: DatasetIdentity) -> CatalogRecord:
        """
        Find the catalog record of an identity.

        Recognized platforms restrict the lookup to catalog entries of that
        type; generic identities match on object path and cluster only.

        Raises:
            CatalogLookupError: CATALOG_001 when nothing matches
        """
        platform = identity.platform.value if identity.is_recognized else None
        record = call_repository(
            "lookup_catalog_record",
            self.repository.lookup_catalog_record,
            identity.object_path,
            platform,
            identity.cluster,
        )
        if record is None:
            raise CatalogLookupError(
                "Dependency information is not available.",
                error_code="CATALOG_001",
                context={
                    "object_path": identity.object_path,
                    "platform": platform,
                    "cluster": identity.cluster,
                },
            )
        return record

    def resolve(self, raw_uri: Optional[str], cluster: Optional[str] = None) -> DependencyReport:
        """
        Build the lineage report of a dataset.

        Args:
            raw_uri: Dataset URI in any supported grammar
            cluster: Cluster for URIs that do not name one; the configured
                default cluster when None

        Raises:
            UriError: The URI is blank or malformed
            CatalogLookupError: The catalog has no matching record
            TraversalError: The dependency graph is cyclic or too large
            RepositoryError: The backing store failed
        """
        identity = self.identify(raw_uri, cluster)
        record = self.lookup(identity)
        identity = _display_platform(identity, record)

        dependencies = self.tree_builder.build(record.dataset_id)
        leaf_count = count_leaf_dependencies(dependencies)

        report = DependencyReport(
            identity=identity,
            dataset_id=record.dataset_id,
            urn=record.urn,
            dataset_type=record.dataset_type,
            deployment_tier=record.deployment_tier,
            data_center=record.data_center,
            cluster=record.server_cluster if record.server_cluster and record.server_cluster.strip() else identity.cluster,
            input_uri=reconstruct_uri(identity),
            dependencies=dependencies,
            leaf_level_dependency_count=leaf_count,
        )
        logger.info(
            f"Resolved lineage of {report.input_uri} ({report.urn}): "
            f"{len(dependencies)} dependencies, {leaf_count} at leaf level"
        )
        return report


__all__ = ["DependencyReport", "LineageResolver"]
