"""
Common ancestor lookup between two datasets.

Only direct parents are compared; there is no transitive closure.

Two modes exist. ``corrected`` intersects the parents of both urns.
``legacy`` keeps the behaviour of the historical service, which fetched the
parents of the first urn twice and therefore always answered with the first
urn's own parents. It stays selectable until consumers confirm which answer
they depend on.
"""

from __future__ import annotations

from typing import Literal, Optional, Set

from datasetlineage import logger
from .config.models import LineageSettings
from .exceptions import AncestorError
from .repository.base import DatasetRepository, call_repository

AncestorMode = Literal["corrected", "legacy"]


class AncestorResolver:
    """Intersects the direct parent sets of two dataset urns."""

    def __init__(self, repository: DatasetRepository, mode: AncestorMode = "corrected"):
        if mode not in ("corrected", "legacy"):
            raise ValueError(f"Unknown ancestor mode '{mode}'")
        self.repository = repository
        self.mode = mode

    @classmethod
    def from_settings(cls, repository: DatasetRepository, settings: Optional[LineageSettings] = None) -> "AncestorResolver":
        settings = settings or LineageSettings()
        return cls(repository, mode=settings.ancestor_mode)

    def parents_of(self, urn: str) -> Set[str]:
        parents = set(call_repository("lookup_direct_parents", self.repository.lookup_direct_parents, urn))
        if not parents:
            logger.warning(f"Couldn't find any parents for URN: {urn}")
        return parents

    def common_ancestors(self, urn_a: str, urn_b: str) -> Set[str]:
        """
        Direct parents shared by *urn_a* and *urn_b*.

        Raises:
            AncestorError: ANCESTOR_001 when the intersection is empty
            RepositoryError: When a parent lookup fails
        """
        parents_a = self.parents_of(urn_a)
        second = urn_a if self.mode == "legacy" else urn_b
        parents_b = self.parents_of(second)

        common = parents_a & parents_b
        if not common:
            raise AncestorError(
                "No common parents found",
                error_code="ANCESTOR_001",
                context={"urn_a": urn_a, "urn_b": urn_b, "mode": self.mode},
            )
        logger.debug(f"{len(common)} common parents of {urn_a} and {urn_b} ({self.mode})")
        return common


__all__ = ["AncestorMode", "AncestorResolver"]
