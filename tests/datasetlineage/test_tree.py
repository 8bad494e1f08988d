"""
Dependency tree expansion tests.

Trees are described as ``{dataset_id: [DependencyEdge, ...]}`` tables served
by a minimal repository, except where the full catalog fixture is used.
"""

import pytest
from hypothesis import given, settings, strategies as st

from datasetlineage.exceptions import RepositoryError, TraversalError
from datasetlineage.repository import DependencyEdge
from datasetlineage.tree import (
    DependencyRecord,
    DependencyTreeBuilder,
    count_leaf_dependencies,
    display_order,
    split_object_location,
)
from tests.utils import EdgeTableRepository

R, A, B, C = 1, 2, 3, 4


def edge(dataset_id, name=None, object_type="hive", sub_type="table"):
    return DependencyEdge(
        mapped_dataset_id=dataset_id,
        mapped_object_name=name if name is not None else f"/db/t{dataset_id}",
        mapped_object_type=object_type,
        mapped_object_sub_type=sub_type,
    )


@pytest.fixture
def simple_tree():
    """R depends on A and B; A depends on C."""
    return EdgeTableRepository({R: [edge(A), edge(B)], A: [edge(C)]})


class TestExpand:

    def test_post_order_append_with_pre_order_numbering(self, simple_tree):
        records = DependencyTreeBuilder(simple_tree).build(R)

        summary = [
            (r.dataset_id, r.level_from_root, r.topology_sort_id, r.next_level_dependency_count)
            for r in records
        ]
        assert summary == [
            (C, 2, "100100", 0),
            (A, 1, "100", 1),
            (B, 1, "200", 0),
        ]
        assert count_leaf_dependencies(records) == 2

    def test_expand_returns_direct_child_count_and_fills_accumulator(self, simple_tree):
        accumulator = []
        count = DependencyTreeBuilder(simple_tree).expand(R, "", 1, accumulator)
        assert count == 2
        assert len(accumulator) == 3

    def test_expand_from_a_sort_prefix_and_level(self, simple_tree):
        accumulator = []
        DependencyTreeBuilder(simple_tree).expand(A, "300", 4, accumulator)
        assert [(r.topology_sort_id, r.level_from_root) for r in accumulator] == [("300100", 4)]

    def test_record_fields_come_from_edge(self):
        repository = EdgeTableRepository({R: [edge(A, "/tracking/raw_event", "hive", "view")]})
        (record,) = DependencyTreeBuilder(repository).build(R)
        assert record == DependencyRecord(
            dataset_id=A,
            database_name="tracking",
            table_name="raw_event",
            level_from_root=1,
            type="view",
            ref_obj_location="/tracking/raw_event",
            ref_obj_type="hive",
            topology_sort_id="100",
            next_level_dependency_count=0,
        )

    def test_root_without_dependencies(self):
        repository = EdgeTableRepository({})
        builder = DependencyTreeBuilder(repository)
        records = builder.build(R)
        assert records == []
        assert count_leaf_dependencies(records) == 0

    def test_edge_without_dataset_id_is_a_leaf(self):
        repository = EdgeTableRepository({R: [edge(None, "/external/feed")]})
        (record,) = DependencyTreeBuilder(repository).build(R)
        assert record.dataset_id is None
        assert record.is_leaf
        assert repository.calls == [R]

    def test_rerun_is_identical(self, simple_tree):
        builder = DependencyTreeBuilder(simple_tree)
        assert builder.build(R) == builder.build(R)

    def test_diamond_is_expanded_on_each_branch(self):
        # A and B both depend on C; that is not a cycle
        repository = EdgeTableRepository({R: [edge(A), edge(B)], A: [edge(C)], B: [edge(C)]})
        records = DependencyTreeBuilder(repository).build(R)
        assert [r.topology_sort_id for r in records] == ["100100", "100", "200100", "200"]
        assert count_leaf_dependencies(records) == 2

    def test_catalog_tree(self, repository):
        records = DependencyTreeBuilder(repository).build(1)
        assert [(r.table_name, r.topology_sort_id) for r in records] == [
            ("session", "100100"),
            ("raw_event", "100"),
            ("member", "200"),
        ]


class TestLimits:

    def test_cycle_is_rejected(self, cyclic_repository):
        with pytest.raises(TraversalError) as exc_info:
            DependencyTreeBuilder(cyclic_repository).build(10)
        assert exc_info.value.error_code == "TRAVERSAL_001"
        assert exc_info.value.context["path"] == [10, 11, 10]

    def test_self_dependency_is_a_cycle(self):
        repository = EdgeTableRepository({R: [edge(R)]})
        with pytest.raises(TraversalError) as exc_info:
            DependencyTreeBuilder(repository).build(R)
        assert exc_info.value.error_code == "TRAVERSAL_001"

    def test_depth_limit(self):
        chain = {i: [edge(i + 1)] for i in range(1, 6)}
        repository = EdgeTableRepository(chain)
        with pytest.raises(TraversalError) as exc_info:
            DependencyTreeBuilder(repository, max_depth=3).build(1)
        assert exc_info.value.error_code == "TRAVERSAL_002"

    def test_depth_limit_allows_exact_depth(self):
        chain = {i: [edge(i + 1)] for i in range(1, 4)}
        records = DependencyTreeBuilder(EdgeTableRepository(chain), max_depth=3).build(1)
        assert max(r.level_from_root for r in records) == 3

    def test_node_limit(self):
        repository = EdgeTableRepository({R: [edge(i) for i in range(10, 15)]})
        with pytest.raises(TraversalError) as exc_info:
            DependencyTreeBuilder(repository, max_nodes=4).build(R)
        assert exc_info.value.error_code == "TRAVERSAL_003"

    def test_from_settings(self, repository):
        from datasetlineage.config import LineageSettings

        builder = DependencyTreeBuilder.from_settings(repository, LineageSettings(max_depth=2, max_nodes=5))
        assert (builder.max_depth, builder.max_nodes) == (2, 5)


class TestRepositoryFailures:

    def test_failing_edge_lookup_aborts_whole_expansion(self, simple_tree, mocker):
        original = simple_tree.lookup_dependency_edges

        def flaky(dataset_id):
            if dataset_id == A:
                raise ConnectionError("database went away")
            return original(dataset_id)

        mocker.patch.object(simple_tree, "lookup_dependency_edges", side_effect=flaky)
        accumulator = []
        with pytest.raises(RepositoryError) as exc_info:
            DependencyTreeBuilder(simple_tree).expand(R, "", 1, accumulator)

        assert exc_info.value.error_code == "REPOSITORY_001"
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert accumulator == []


class TestHelpers:

    @pytest.mark.parametrize(
        "location, expected",
        [
            ("/db/table", ("db", "table")),
            ("/db/table/", ("db", "table")),
            ("x/db/table", ("db", "table")),
            ("/db", ("", "")),
            ("/a/b/c", ("", "")),
            ("", ("", "")),
            (None, ("", "")),
        ],
    )
    def test_split_object_location(self, location, expected):
        assert split_object_location(location) == expected

    def test_display_order(self, simple_tree):
        records = DependencyTreeBuilder(simple_tree).build(R)
        assert [r.dataset_id for r in display_order(records)] == [A, C, B]


@st.composite
def small_trees(draw):
    """Random trees with fewer than ten children per node."""
    edges = {}
    next_id = 2
    frontier = [1]
    while frontier and next_id < 40:
        parent = frontier.pop(0)
        for _ in range(draw(st.integers(min_value=0, max_value=4))):
            edges.setdefault(parent, []).append(edge(next_id))
            frontier.append(next_id)
            next_id += 1
    return edges


class TestTreeProperties:

    @given(tree=small_trees())
    @settings(max_examples=60, deadline=None)
    def test_sort_ids_unique_and_sorted_in_pre_order(self, tree):
        records = DependencyTreeBuilder(EdgeTableRepository(tree)).build(1)
        sort_ids = [r.topology_sort_id for r in records]

        assert len(set(sort_ids)) == len(sort_ids)
        assert len(records) == sum(len(children) for children in tree.values())

        # every parent comes after its descendants in the output list
        position = {r.topology_sort_id: i for i, r in enumerate(records)}
        for sort_id, index in position.items():
            parent_id = sort_id[:-3]
            if parent_id:
                assert position[parent_id] > index

        # level equals the number of 3-digit path elements
        for record in records:
            assert record.level_from_root == len(record.topology_sort_id) // 3

    @given(tree=small_trees())
    @settings(max_examples=60, deadline=None)
    def test_leaf_count_matches_childless_nodes(self, tree):
        records = DependencyTreeBuilder(EdgeTableRepository(tree)).build(1)
        childless = [r for r in records if not tree.get(r.dataset_id)]
        assert count_leaf_dependencies(records) == len(childless)
