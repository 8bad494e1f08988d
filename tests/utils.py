"""
Shared test data for the datasetlineage test suite.

Usage:
    from tests.utils import CATALOG, PAGE_VIEW, EdgeTableRepository
"""

from typing import Any, Dict

PAGE_VIEW = "hive:///tracking/page_view_event"
RAW_EVENT = "hive:///tracking/raw_event"
MEMBER = "hive:///tracking/member"
SESSION = "hive:///tracking/session"
DAILY = "dalids:///metrics/page_view_daily"
DERIVED = "hdfs:///data/derived"
KAFKA_SESSION = "kafka:///events/session"


def _instance(cluster: str, tier: str = "prod", data_center: str = "ltx1") -> Dict[str, Any]:
    return {"deployment_tier": tier, "data_center": data_center, "server_cluster": cluster}


def _edge(owner: int, owner_name: str, owner_type: str, mapped_id, mapped_name: str,
          mapped_type: str = "hive", mapped_sub_type: str = "table",
          owner_sub_type: str = "view") -> Dict[str, Any]:
    return {
        "object_dataset_id": owner,
        "object_name": owner_name,
        "object_type": owner_type,
        "object_sub_type": owner_sub_type,
        "mapped_object_dataset_id": mapped_id,
        "mapped_object_name": mapped_name,
        "mapped_object_type": mapped_type,
        "mapped_object_sub_type": mapped_sub_type,
    }


CATALOG: Dict[str, Any] = {
    "schema_version": "1.0.0",
    "datasets": [
        {
            "id": 1, "urn": PAGE_VIEW, "dataset_type": "hive",
            "properties": {"valid": "true", "owner": "data-eng"},
            "source_modified_time": 1000,
            "instances": [_instance("ltx1-holdem"), _instance("lva1-war", tier="corp", data_center="lva1")],
        },
        {
            "id": 2, "urn": RAW_EVENT, "dataset_type": "hive",
            "properties": {"valid": "true"}, "source_modified_time": 2000,
            "instances": [_instance("ltx1-holdem")],
        },
        {
            "id": 3, "urn": MEMBER, "dataset_type": "hive",
            "properties": {"valid": "false"}, "source_modified_time": 3000,
            "instances": [_instance("ltx1-holdem")],
        },
        {
            "id": 4, "urn": SESSION, "dataset_type": "hive",
            "properties": '{"valid": "true"}', "source_modified_time": 1500,
            "instances": [_instance("ltx1-holdem")],
        },
        {
            "id": 5, "urn": DAILY, "dataset_type": "dalids",
            "properties": {"valid": "true", "owner": "data-eng"}, "source_modified_time": 2500,
            "instances": [_instance("ltx1-holdem")],
        },
        {
            "id": 6, "urn": DERIVED, "dataset_type": "hdfs",
            "instances": [_instance("ltx1-holdem", tier=None, data_center=None)],
        },
    ],
    "object_map": [
        # page_view_event <- raw_event, member
        _edge(1, "/tracking/page_view_event", "hive", 2, "/tracking/raw_event"),
        _edge(1, "/tracking/page_view_event", "hive", 3, "/tracking/member"),
        # raw_event <- session
        _edge(2, "/tracking/raw_event", "hive", 4, "/tracking/session", owner_sub_type="table"),
        # page_view_daily <- page_view_event
        _edge(5, "/metrics/page_view_daily", "dalids", 1, "/tracking/page_view_event",
              mapped_sub_type="view"),
        # derived <- an external topic without a catalog id
        _edge(6, "/data/derived", "hdfs", None, "/external/feed",
              mapped_type="kafka", mapped_sub_type="topic"),
    ],
    "family": [
        {"parent_urn": RAW_EVENT, "child_urn": PAGE_VIEW},
        {"parent_urn": MEMBER, "child_urn": PAGE_VIEW},
        {"parent_urn": PAGE_VIEW, "child_urn": DAILY},
        {"parent_urn": RAW_EVENT, "child_urn": DAILY},
        {"parent_urn": KAFKA_SESSION, "child_urn": SESSION},
    ],
}


CYCLIC_CATALOG: Dict[str, Any] = {
    "datasets": [
        {"id": 10, "urn": "hive:///loop/a", "dataset_type": "hive", "instances": [_instance("ltx1-holdem")]},
        {"id": 11, "urn": "hive:///loop/b", "dataset_type": "hive", "instances": [_instance("ltx1-holdem")]},
    ],
    "object_map": [
        _edge(10, "/loop/a", "hive", 11, "/loop/b"),
        _edge(11, "/loop/b", "hive", 10, "/loop/a"),
    ],
}


class EdgeTableRepository:
    """Minimal repository serving dependency edges from a dict, for tree tests."""

    def __init__(self, edges):
        self.edges = edges
        self.calls = []

    def lookup_dependency_edges(self, dataset_id):
        self.calls.append(dataset_id)
        return list(self.edges.get(dataset_id, []))
