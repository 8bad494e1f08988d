"""
Read-only catalog queries beyond lineage resolution.

- Dataset lookups by id and urn
- Reverse edges: which datasets depend on a dataset id or on an object path
- Urn search over serialized dataset properties with SQL ``LIKE`` wildcards
- Latest valid dataset of a type, optionally bounded in time
"""

from __future__ import annotations

import json
import re
from typing import Any, Callable, Dict, List, Optional

from datasetlineage import logger
from .exceptions import CatalogLookupError
from .repository.base import DatasetRepository, call_repository
from .repository.models import DatasetEntry, DependentRecord

NONE_FOUND = "none found"


def like_to_regex(pattern: str) -> "re.Pattern[str]":
    """Compile an SQL ``LIKE`` pattern (``%`` any run, ``_`` one character)."""
    parts = []
    for char in pattern:
        if char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL | re.IGNORECASE)


def serialize_properties(properties: Dict[str, Any]) -> str:
    return json.dumps(properties, sort_keys=False)


def _properties_blob(entry: DatasetEntry) -> str:
    """The stored properties text, or its serialization when none was kept."""
    if entry.properties_text is not None:
        return entry.properties_text
    return serialize_properties(entry.properties)


def get_dataset_by_id(repository: DatasetRepository, dataset_id: int) -> DatasetEntry:
    """
    Raises:
        CatalogLookupError: CATALOG_002 for an unknown id
    """
    entry = call_repository("get_dataset_by_id", repository.get_dataset_by_id, dataset_id)
    if entry is None:
        raise CatalogLookupError(
            f"No dataset with id {dataset_id}", error_code="CATALOG_002", context={"dataset_id": dataset_id}
        )
    return entry


def get_dataset_by_urn(repository: DatasetRepository, urn: str) -> DatasetEntry:
    """
    Raises:
        CatalogLookupError: CATALOG_002 for an unknown urn
    """
    entry = call_repository("get_dataset_by_urn", repository.get_dataset_by_urn, urn)
    if entry is None:
        raise CatalogLookupError(
            f"No dataset with urn {urn}", error_code="CATALOG_002", context={"urn": urn}
        )
    return entry


def get_dependents(repository: DatasetRepository, dataset_id: int) -> Optional[List[DependentRecord]]:
    """Datasets depending on *dataset_id*; None for non-positive ids."""
    if dataset_id is None or dataset_id <= 0:
        return None
    return call_repository("lookup_dependents", repository.lookup_dependents, dataset_id)


def get_dependents_by_path(
    repository: DatasetRepository, data_platform: str, path: str
) -> Optional[List[DependentRecord]]:
    """
    Datasets depending on *path* or on any object below it (``path/...``)
    of type *data_platform*. None when either argument is empty.
    """
    if not path or not data_platform:
        return None
    return call_repository(
        "lookup_dependents_by_name", repository.lookup_dependents_by_name, data_platform, path
    )


def find_urns_by_properties(repository: DatasetRepository, properties: Optional[str]) -> Dict[str, Any]:
    """
    Urns whose stored properties text matches an SQL ``LIKE`` pattern.

    Returns ``{"count": n, "urns": [...]}``, or an empty dict for a blank pattern.

    Example:
        >>> find_urns_by_properties(repo, '%"owner": "data-eng"%')
        {'count': 2, 'urns': ['hive:///tracking/page_view', 'hive:///tracking/click']}
    """
    if not properties or not properties.strip():
        return {}
    matcher = like_to_regex(properties)
    datasets = call_repository("list_datasets", repository.list_datasets)
    urns = [
        entry.urn for entry in datasets
        if matcher.fullmatch(_properties_blob(entry))
    ]
    logger.debug(f"{len(urns)} datasets match properties pattern {properties!r}")
    return {"count": len(urns), "urns": urns}


def _is_of_type(entry: DatasetEntry, dataset_type: str) -> bool:
    # the type is read from the urn scheme; dataset_type is not consulted
    return entry.urn.startswith(f"{dataset_type}://")


def _latest(
    repository: DatasetRepository,
    dataset_type: Optional[str],
    time_filter: Callable[[int], bool],
    description: str,
) -> Dict[str, str]:
    if not dataset_type or not dataset_type.strip():
        return {}

    datasets = call_repository("list_datasets", repository.list_datasets)
    candidates = [
        entry for entry in datasets
        if _is_of_type(entry, dataset_type)
        and entry.is_valid
        and entry.source_modified_time is not None
        and time_filter(entry.source_modified_time)
    ]
    if not candidates:
        logger.debug(f"No valid {dataset_type} dataset {description}")
        return {"message": NONE_FOUND}

    # max() keeps the first of equal timestamps
    latest = max(candidates, key=lambda entry: entry.source_modified_time)
    return {"urn": latest.urn}


def latest_of_type(repository: DatasetRepository, dataset_type: str) -> Dict[str, str]:
    """Most recently modified valid dataset of *dataset_type*."""
    return _latest(repository, dataset_type, lambda t: True, "")


def latest_after(repository: DatasetRepository, dataset_type: str, time: int) -> Dict[str, str]:
    return _latest(repository, dataset_type, lambda t: t > time, f"after {time}")


def latest_before(repository: DatasetRepository, dataset_type: str, time: int) -> Dict[str, str]:
    return _latest(repository, dataset_type, lambda t: t < time, f"before {time}")


def latest_between(
    repository: DatasetRepository, dataset_type: str, first_time: int, second_time: int
) -> Dict[str, str]:
    """Bounds are inclusive."""
    return _latest(
        repository,
        dataset_type,
        lambda t: first_time <= t <= second_time,
        f"between {first_time} and {second_time}",
    )


def at_time(repository: DatasetRepository, dataset_type: str, time: int) -> Dict[str, str]:
    return _latest(repository, dataset_type, lambda t: t == time, f"at {time}")


__all__ = [
    "NONE_FOUND",
    "like_to_regex",
    "get_dataset_by_id",
    "get_dataset_by_urn",
    "get_dependents",
    "get_dependents_by_path",
    "find_urns_by_properties",
    "latest_of_type",
    "latest_after",
    "latest_before",
    "latest_between",
    "at_time",
]
