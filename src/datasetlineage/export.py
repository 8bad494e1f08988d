"""
export.py - Tabular and file export of lineage reports.

A report's dependency list is kept in post-order (children before their
parent); the DataFrame view and the CSV export present it in display order,
sorted by topology sort id.
"""

import json
from dataclasses import fields
from pathlib import Path
from typing import Optional, Union

import pandas as pd
import yaml

from datasetlineage import logger
from .resolver import DependencyReport
from .tree import DependencyRecord

DEPENDENCY_COLUMNS = [f.name for f in fields(DependencyRecord)]

SUPPORTED_FORMATS = ("json", "yaml", "csv")


def report_to_dataframe(report: DependencyReport) -> pd.DataFrame:
    """
    One row per dependency record, sorted by ``topology_sort_id``.

    Example:
        >>> df = report_to_dataframe(report)
        >>> df[["topology_sort_id", "level_from_root", "table_name"]]
    """
    rows = [record.to_dict() for record in report.dependencies]
    df = pd.DataFrame(rows, columns=DEPENDENCY_COLUMNS)
    if df.empty:
        return df
    return df.sort_values("topology_sort_id", kind="stable").reset_index(drop=True)


def export_report(
    report: DependencyReport,
    path: Union[str, Path],
    format: Optional[str] = None
) -> Path:
    """
    Write a report to *path*.

    Args:
        report: Report to export
        path: Destination file
        format: ``json``, ``yaml`` or ``csv``; inferred from the file suffix when None

    Returns:
        The destination path

    Raises:
        ValueError: If the format is not supported
    """
    destination = Path(path)
    fmt = (format or destination.suffix.lstrip(".")).lower()
    if fmt == "yml":
        fmt = "yaml"
    if fmt not in SUPPORTED_FORMATS:
        raise ValueError(f"Unsupported export format '{fmt}'. Use one of: {', '.join(SUPPORTED_FORMATS)}")

    destination.parent.mkdir(parents=True, exist_ok=True)

    if fmt == "csv":
        report_to_dataframe(report).to_csv(destination, index=False)
    elif fmt == "yaml":
        with open(destination, "w", encoding="utf-8") as f:
            yaml.safe_dump(report.to_dict(), f, sort_keys=False)
    else:
        with open(destination, "w", encoding="utf-8") as f:
            json.dump(report.to_dict(), f, indent=2)

    logger.info(f"Exported lineage of {report.urn} to {destination} ({fmt})")
    return destination


__all__ = ["DEPENDENCY_COLUMNS", "SUPPORTED_FORMATS", "report_to_dataframe", "export_report"]
