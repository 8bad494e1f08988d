"""
In-memory dataset repository served from a :class:`CatalogDocument`.

The document mirrors the relational layout the catalog is usually kept in:
dataset rows with their deployed instances, the object name map holding
dependency edges, and the family table of direct parent/child urns. All
queries iterate in document order so results are deterministic.
"""

from __future__ import annotations

from collections import OrderedDict
from pathlib import Path
from typing import Dict, List, Optional, Set, Union

from datasetlineage import logger
from ..config.models import CatalogDocument, DatasetSpec
from ..config.yaml_config import load_catalog
from .models import CatalogRecord, DatasetEntry, DependencyEdge, DependentRecord


def _lower(value: Optional[str]) -> str:
    return (value or "").lower()


class InMemoryDatasetRepository:
    """Catalog snapshot held in memory; implements :class:`DatasetRepository`."""

    def __init__(self, catalog: Optional[CatalogDocument] = None):
        self._catalog = catalog or CatalogDocument()
        self._datasets_by_id: "OrderedDict[int, DatasetSpec]" = OrderedDict(
            (dataset.id, dataset) for dataset in self._catalog.datasets
        )
        self._datasets_by_urn: Dict[str, DatasetSpec] = {
            dataset.urn: dataset for dataset in self._catalog.datasets
        }
        logger.debug(
            f"InMemoryDatasetRepository holding {len(self._datasets_by_id)} datasets "
            f"and {len(self._catalog.object_map)} object map rows"
        )

    @classmethod
    def from_catalog(cls, catalog: Union[CatalogDocument, dict]) -> "InMemoryDatasetRepository":
        if isinstance(catalog, dict):
            catalog = load_catalog(catalog)
        return cls(catalog)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> "InMemoryDatasetRepository":
        return cls(load_catalog(path))

    @property
    def catalog(self) -> CatalogDocument:
        return self._catalog

    @staticmethod
    def _entry(dataset: DatasetSpec) -> DatasetEntry:
        return DatasetEntry(
            id=dataset.id,
            urn=dataset.urn,
            dataset_type=dataset.dataset_type,
            properties=dict(dataset.properties),
            source_modified_time=dataset.source_modified_time,
            properties_text=dataset.properties_text,
        )

    def lookup_catalog_record(
        self, object_path: str, platform: Optional[str], cluster: str
    ) -> Optional[CatalogRecord]:
        wanted_path = _lower(object_path)
        wanted_cluster = _lower(cluster)
        wanted_platform = _lower(platform) if platform else None

        for row in self._catalog.object_map:
            if row.object_dataset_id is None or _lower(row.object_name) != wanted_path:
                continue
            if wanted_platform is not None and _lower(row.object_type) != wanted_platform:
                continue
            dataset = self._datasets_by_id.get(row.object_dataset_id)
            if dataset is None:
                continue
            for instance in dataset.instances:
                if _lower(instance.server_cluster) == wanted_cluster:
                    return CatalogRecord(
                        dataset_id=dataset.id,
                        urn=dataset.urn,
                        dataset_type=dataset.dataset_type,
                        deployment_tier=instance.deployment_tier,
                        data_center=instance.data_center,
                        server_cluster=instance.server_cluster,
                    )
        return None

    def lookup_dependency_edges(self, dataset_id: int) -> List[DependencyEdge]:
        return [
            DependencyEdge(
                mapped_dataset_id=row.mapped_object_dataset_id,
                mapped_object_name=row.mapped_object_name,
                mapped_object_type=row.mapped_object_type,
                mapped_object_sub_type=row.mapped_object_sub_type,
            )
            for row in self._catalog.object_map
            if row.object_dataset_id == dataset_id
        ]

    def lookup_direct_parents(self, urn: str) -> Set[str]:
        return {row.parent_urn for row in self._catalog.family if row.child_urn == urn}

    def get_dataset_by_id(self, dataset_id: int) -> Optional[DatasetEntry]:
        dataset = self._datasets_by_id.get(dataset_id)
        return self._entry(dataset) if dataset is not None else None

    def get_dataset_by_urn(self, urn: str) -> Optional[DatasetEntry]:
        dataset = self._datasets_by_urn.get(urn)
        return self._entry(dataset) if dataset is not None else None

    def list_datasets(self) -> List[DatasetEntry]:
        return [self._entry(dataset) for dataset in self._datasets_by_id.values()]

    def _dependent(self, object_dataset_id: Optional[int], object_sub_type: Optional[str]) -> Optional[DependentRecord]:
        dataset = self._datasets_by_id.get(object_dataset_id) if object_dataset_id is not None else None
        if dataset is None:
            return None
        return DependentRecord(
            dataset_id=dataset.id,
            urn=dataset.urn,
            dataset_type=dataset.dataset_type,
            object_sub_type=object_sub_type,
        )

    def lookup_dependents(self, dataset_id: int) -> List[DependentRecord]:
        dependents = []
        for row in self._catalog.object_map:
            if row.mapped_object_dataset_id != dataset_id:
                continue
            record = self._dependent(row.object_dataset_id, row.object_sub_type)
            if record is not None:
                dependents.append(record)
        return dependents

    def lookup_dependents_by_name(self, object_type: str, path: str) -> List[DependentRecord]:
        child_prefix = path + "/"
        dependents = []
        for row in self._catalog.object_map:
            if _lower(row.mapped_object_type) != _lower(object_type) or row.mapped_object_name is None:
                continue
            name = row.mapped_object_name
            if name != path and not name.startswith(child_prefix):
                continue
            record = self._dependent(row.object_dataset_id, row.object_sub_type)
            if record is not None:
                dependents.append(record)
        return dependents


__all__ = ["InMemoryDatasetRepository"]
