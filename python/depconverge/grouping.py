"""Groups reverse dependency links by version."""

from typing import Dict, Iterable, List, Mapping

from .models import ArtifactIdentity, ReverseDependencyLink

# version string -> links, keys in ascending codepoint order
VersionGroupMap = Dict[str, List[ReverseDependencyLink]]


def group_by_version(links: Iterable[ReverseDependencyLink]) -> VersionGroupMap:
    """
    Group links by their literal version string.

    No semantic version comparison: "1.0" and "1.0.0" are different groups.
    Links keep their order inside a group.
    """
    groups: Dict[str, List[ReverseDependencyLink]] = {}
    for link in links:
        groups.setdefault(link.dependency.version, []).append(link)
    return {version: groups[version] for version in sorted(groups)}


def count_versions(links: Iterable[ReverseDependencyLink]) -> int:
    """Return the number of distinct versions among the links."""
    return len({link.dependency.version for link in links})


def count_artifacts(dependencies: Mapping[ArtifactIdentity, List[ReverseDependencyLink]]) -> int:
    """Return the number of distinct (identity, version) pairs."""
    return sum(count_versions(links) for links in dependencies.values())
