"""Tests for strict pattern artifact filtering."""

import pytest

from depconverge.artifact_filter import StrictPatternArtifactFilter, prune_tree
from depconverge.models import ArtifactCoordinate


@pytest.fixture
def artifact():
    return ArtifactCoordinate("org.apache.commons", "commons-lang3", "3.12.0", classifier="sources")


class TestStrictPatternArtifactFilter:
    """Tests for StrictPatternArtifactFilter."""

    @pytest.mark.parametrize("pattern", [
        "org.apache.commons:commons-lang3",
        "org.apache.commons:commons-lang3:3.12.0",
        "org.apache.commons:commons-lang3:3.12.0:sources",
        "*:commons-lang3",
        "org.apache.*:*",
        "*apache*:*lang3",
        "::3.12.0",
        "*",
    ])
    def test_matching_patterns(self, artifact, pattern):
        assert StrictPatternArtifactFilter([pattern]).include(artifact)

    @pytest.mark.parametrize("pattern", [
        "org.apache.commons:commons-io",
        "org.apache.commons:commons-lang3:3.11.0",
        "org.apache.commons:commons-lang3:3.12.0:javadoc",
        "org.apache.commons:commons-lang3:3.12.0:sources:extra",
        "org.apache:commons-lang3",
    ])
    def test_non_matching_patterns(self, artifact, pattern):
        assert not StrictPatternArtifactFilter([pattern]).include(artifact)

    def test_any_pattern_may_match(self, artifact):
        artifact_filter = StrictPatternArtifactFilter(["g:nothing", "*:commons-lang3"])

        assert artifact_filter.include(artifact)

    def test_from_includes_splits_on_commas(self):
        artifact_filter = StrictPatternArtifactFilter.from_includes("a:b, c:d ,")

        assert artifact_filter.patterns == ["a:b", "c:d"]

    def test_from_includes_without_patterns(self):
        assert StrictPatternArtifactFilter.from_includes(None) is None
        assert StrictPatternArtifactFilter.from_includes(" , ") is None


class TestPruneTree:
    """Tests for prune_tree."""

    def test_drops_rejected_subtrees(self, tree):
        root = tree("g:r:1", tree("g:keep:1", tree("other:x:1")), tree("other:y:1", tree("g:deep:1")))

        pruned = prune_tree(root, StrictPatternArtifactFilter(["g:*"]))

        assert [c.coordinate.artifact_id for c in pruned.children] == ["keep"]
        assert pruned.children[0].children == []
        assert len(root.children) == 2

    def test_no_filter_returns_tree(self, tree):
        root = tree("g:r:1", tree("g:a:1"))

        assert prune_tree(root, None) is root

    def test_shared_nodes_stay_shared(self, tree):
        shared = tree("g:shared:1", tree("g:leaf:1"))
        root = tree("g:r:1", tree("g:a:1", shared), tree("g:b:1", shared))

        pruned = prune_tree(root, StrictPatternArtifactFilter(["g:*"]))

        left, right = pruned.children
        assert left.children[0] is right.children[0]
        assert left.children[0] is not shared
        assert left.children[0].children[0].coordinate.artifact_id == "leaf"
