"""
datasetlineage Exception Hierarchy

Domain-specific exceptions carrying an error code for programmatic handling
and a context dictionary for debugging:

- DatasetLineageError: Base exception for all datasetlineage errors
- UriError: Dataset URI could not be parsed into a complete identity
- CatalogLookupError: No catalog record matches a dataset identity, id or urn
- RepositoryError: The backing store failed or holds an invalid catalog
- TraversalError: Dependency expansion hit a cycle or a configured limit
- AncestorError: Two datasets share no direct parent
- ConfigError: Settings or catalog documents failed to load or validate

``UriError``, ``CatalogLookupError`` and ``AncestorError`` describe expected
"no data" outcomes; the outward operations in :mod:`datasetlineage.api` turn
them into status-coded responses. ``RepositoryError`` and ``TraversalError``
always propagate to the caller.

Usage Examples:
    >>> try:
    ...     identity = normalize(raw_uri, "ltx1-holdem")
    ... except UriError as e:
    ...     if e.error_code == "URI_001":
    ...         logger.warning("Blank dataset uri")

    >>> raise TraversalError("Cycle detected", error_code="TRAVERSAL_001").with_context({
    ...     "dataset_id": 42,
    ...     "path": [1, 7, 42],
    ... })
"""

from typing import Any, Dict, Optional


class DatasetLineageError(Exception):
    """
    Root of every error raised by datasetlineage.

    Attributes:
        message (str): Text given at construction, without code or context
        error_code (str): Stable code callers can branch on
        context (Dict[str, Any]): Values describing the failing input

    Error Codes:
        LINEAGE_001: Generic datasetlineage error
    """

    default_code = "LINEAGE_001"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.default_code
        self.context = dict(context or {})

    def with_context(self, context: Dict[str, Any]) -> 'DatasetLineageError':
        """
        Merge *context* into the error context and return the error.

        Example:
            >>> raise CatalogLookupError("No catalog record").with_context({
            ...     "object_path": "/db/table",
            ...     "cluster": "ltx1-holdem",
            ... })
        """
        self.context.update(context)
        return self

    def __str__(self) -> str:
        message = super().__str__()
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{message} [Error Code: {self.error_code}, Context: {context_str}]"
        return f"{message} [Error Code: {self.error_code}]"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"error_code={self.error_code!r}, "
            f"context={self.context!r})"
        )


class UriError(DatasetLineageError):
    """
    Dataset URI could not be normalized.

    Error Codes:
        URI_001: Dataset URI is missing or blank
        URI_002: URI does not match any supported grammar
        URI_003: Parsed identity has a blank cluster, database or table
    """

    default_code = "URI_001"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)
        if context and 'raw_uri' in context:
            self.context['raw_uri'] = str(context['raw_uri'])


class CatalogLookupError(DatasetLineageError):
    """
    Catalog has no record for the requested dataset.

    Error Codes:
        CATALOG_001: No catalog record for an object path and cluster
        CATALOG_002: Unknown dataset id or urn
    """

    default_code = "CATALOG_001"


class RepositoryError(DatasetLineageError):
    """
    Backing store failure. Never retried by this package.

    Error Codes:
        REPOSITORY_001: Repository call failed
    """

    default_code = "REPOSITORY_001"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)
        if context and 'operation' in context:
            self.context['operation'] = str(context['operation'])


class TraversalError(DatasetLineageError):
    """
    Dependency expansion aborted.

    Error Codes:
        TRAVERSAL_001: Cyclic dependency detected
        TRAVERSAL_002: Maximum expansion depth exceeded
        TRAVERSAL_003: Maximum number of dependency records exceeded
    """

    default_code = "TRAVERSAL_001"


class AncestorError(DatasetLineageError):
    """
    Ancestor query produced no result.

    Error Codes:
        ANCESTOR_001: No common parents found
    """

    default_code = "ANCESTOR_001"


class ConfigError(DatasetLineageError):
    """
    Settings or catalog document loading errors.

    Error Codes:
        CONFIG_001: Configuration file not found
        CONFIG_002: YAML parsing error
        CONFIG_003: Pydantic validation failure
        CONFIG_004: Unsupported schema version
    """

    default_code = "CONFIG_001"

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(message, error_code, context)
        if context and 'config_path' in context:
            self.context['config_path'] = str(context['config_path'])


def log_and_raise(
    exception: DatasetLineageError,
    logger: Optional[Any] = None,
    level: str = "error"
) -> None:
    """
    Log *exception* through *logger* at *level*, then raise it.

    Without a logger the exception is raised unlogged. Unknown level names
    fall back to ``error``.
    """
    if logger is not None:
        log_method = getattr(logger, level, logger.error)
        log_method(f"{exception.__class__.__name__}: {exception}")

    raise exception


__all__ = [
    'DatasetLineageError',
    'UriError',
    'CatalogLookupError',
    'RepositoryError',
    'TraversalError',
    'AncestorError',
    'ConfigError',
    'log_and_raise',
]
