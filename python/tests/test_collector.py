"""Tests for descendant collection and version grouping."""

from depconverge.collector import collect_descendants, iter_descendants
from depconverge.grouping import count_artifacts, count_versions, group_by_version
from depconverge.models import ArtifactIdentity, DependencyNode, ReverseDependencyLink


class TestCollectDescendants:
    """Tests for collect_descendants."""

    def test_collects_all_nodes_below_root(self, tree, coord):
        """R -> [A, B], B -> C yields exactly {A, B, C}."""
        root = tree("g:r:1", tree("g:a:1"), tree("g:b:1", tree("g:c:1")))

        assert collect_descendants(root) == {coord("g:a:1"), coord("g:b:1"), coord("g:c:1")}

    def test_leaf_root_has_no_descendants(self, tree):
        assert collect_descendants(tree("g:r:1")) == set()

    def test_deduplicates_by_full_coordinate(self, tree, coord):
        """The same version twice counts once, different versions stay apart."""
        root = tree(
            "g:r:1",
            tree("g:a:1", tree("g:x:1.0")),
            tree("g:b:1", tree("g:x:1.0"), tree("g:x:2.0")),
        )

        descendants = collect_descendants(root)

        assert len(descendants) == 4
        assert coord("g:x:1.0") in descendants
        assert coord("g:x:2.0") in descendants

    def test_scope_does_not_split_coordinates(self, tree, coord):
        root = tree("g:r:1")
        root.add_child(DependencyNode(coordinate=coord("g:x:1.0", scope="compile")))
        root.add_child(DependencyNode(coordinate=coord("g:x:1.0", scope="test")))

        assert collect_descendants(root) == {coord("g:x:1.0")}

    def test_deep_tree_does_not_exhaust_stack(self, tree):
        root = tree("g:r:1")
        node = root
        for i in range(5000):
            child = tree(f"g:n{i}:1")
            node.add_child(child)
            node = child

        assert len(collect_descendants(root)) == 5000

    def test_iteration_follows_resolution_order(self, tree):
        root = tree("g:r:1", tree("g:b:1", tree("g:c:1")), tree("g:a:1"))

        names = [n.coordinate.artifact_id for n in iter_descendants(root)]

        assert names == ["b", "c", "a"]

    def test_shared_node_visited_once(self, tree):
        shared = tree("g:s:1")
        root = tree("g:r:1", tree("g:a:1", shared), tree("g:b:1", shared))

        names = [n.coordinate.artifact_id for n in iter_descendants(root)]

        assert names == ["a", "s", "b"]


class TestGroupByVersion:
    """Tests for the version grouping engine."""

    def test_groups_literal_versions(self, coord, module):
        links = [
            ReverseDependencyLink(coord("g:lib:1.0"), module("g:m1:1")),
            ReverseDependencyLink(coord("g:lib:1.0"), module("g:m2:1")),
            ReverseDependencyLink(coord("g:lib:2.0"), module("g:m3:1")),
        ]

        groups = group_by_version(links)

        assert list(groups) == ["1.0", "2.0"]
        assert [link.module.artifact_id for link in groups["1.0"]] == ["m1", "m2"]
        assert len(groups["2.0"]) == 1

    def test_keys_are_lexicographic(self, coord, module):
        links = [
            ReverseDependencyLink(coord(f"g:lib:{v}"), module("g:m:1"))
            for v in ["1.9", "1.10", "1.2", "1.0-SNAPSHOT"]
        ]

        assert list(group_by_version(links)) == ["1.0-SNAPSHOT", "1.10", "1.2", "1.9"]

    def test_no_semantic_version_equality(self, coord, module):
        links = [
            ReverseDependencyLink(coord("g:lib:1.0"), module("g:m:1")),
            ReverseDependencyLink(coord("g:lib:1.0.0"), module("g:m:1")),
        ]

        assert count_versions(links) == 2

    def test_empty_input(self):
        assert group_by_version([]) == {}

    def test_count_artifacts_sums_versions_per_identity(self, coord, module):
        m = module("g:m:1")
        dependencies = {
            ArtifactIdentity("g", "lib"): [
                ReverseDependencyLink(coord("g:lib:1.0"), m),
                ReverseDependencyLink(coord("g:lib:1.0"), module("g:m2:1")),
                ReverseDependencyLink(coord("g:lib:2.0"), m),
            ],
            ArtifactIdentity("g", "other"): [ReverseDependencyLink(coord("g:other:3"), m)],
        }

        assert count_artifacts(dependencies) == 3
