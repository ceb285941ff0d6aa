"""Analysis result and the evidence views built on top of it."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from .artifact_filter import StrictPatternArtifactFilter
from .convergence import calculate_convergence, is_release_ready
from .grouping import count_artifacts, group_by_version
from .models import ArtifactCoordinate, ArtifactIdentity, DependencyNode, ModuleRef, ReverseDependencyLink

logger = logging.getLogger(__name__)


@dataclass
class ModuleEvidence:
    """How one module reached a given version of a dependency."""

    module: ModuleRef
    tree: DependencyNode  # filtered view: only ancestors of matching nodes
    paths: List[List[ArtifactCoordinate]]


@dataclass
class VersionDetail:
    """All modules that resolved one version of a dependency."""

    version: str
    links: List[ReverseDependencyLink]
    evidence: List[ModuleEvidence] = field(default_factory=list)


@dataclass
class IdentityDetail:
    """Evidence for one reported identity, a version conflict or a snapshot."""

    identity: ArtifactIdentity
    versions: List[VersionDetail]


def filter_paths(root: DependencyNode, pattern: str) -> Optional[DependencyNode]:
    """
    Project the tree onto the ancestors of nodes matching pattern.

    Returns a new tree holding each matching node and every node on the way to
    it from root, or None when nothing matches. The input tree is not modified
    and a node shared by several parents is projected once.
    """
    artifact_filter = StrictPatternArtifactFilter([pattern])
    projected: Dict[int, Optional[DependencyNode]] = {}
    started: Set[int] = set()
    stack: List[Tuple[DependencyNode, bool]] = [(root, False)]

    # post-order: a node is projected once all of its children are
    while stack:
        node, children_done = stack.pop()
        if children_done:
            # a child without a projection yet closes a cycle and is left out
            kept = [projected[id(c)] for c in node.children if projected.get(id(c)) is not None]
            if kept or artifact_filter.include(node.coordinate):
                projected[id(node)] = DependencyNode(coordinate=node.coordinate, children=kept)
            else:
                projected[id(node)] = None
            continue
        if id(node) in started:
            continue
        started.add(id(node))
        stack.append((node, True))
        stack.extend((child, False) for child in reversed(node.children) if id(child) not in started)

    return projected[id(root)]


def dependency_paths(root: DependencyNode, pattern: str) -> List[List[ArtifactCoordinate]]:
    """
    Return the root-to-node path of every node matching pattern.

    A node shared by several parents is reported once, along the first path
    that reaches it.
    """
    artifact_filter = StrictPatternArtifactFilter([pattern])
    parents: Dict[int, Optional[DependencyNode]] = {id(root): None}
    paths = []
    stack = [root]

    while stack:
        node = stack.pop()
        if artifact_filter.include(node.coordinate):
            path = []
            current: Optional[DependencyNode] = node
            while current is not None:
                path.append(current.coordinate)
                current = parents[id(current)]
            paths.append(path[::-1])
        for child in reversed(node.children):
            if id(child) not in parents:
                parents[id(child)] = node
                stack.append(child)

    return paths


def _detail_pattern(dependency: ArtifactCoordinate) -> str:
    return f"{dependency.group_id}:{dependency.artifact_id}:{dependency.version}"


@dataclass
class AnalysisResult:
    """
    Outcome of a convergence analysis.

    Attributes:
        all_dependencies: identity -> one link per (version, module) resolved anywhere in the build
        conflicting: identity -> links for identities resolved to more than one version
        snapshots: one representative link per unreleased version that is not a build module
        modules: the build's modules in build order
        module_trees: module -> its resolved dependency tree
    """

    all_dependencies: Dict[ArtifactIdentity, List[ReverseDependencyLink]]
    conflicting: Dict[ArtifactIdentity, List[ReverseDependencyLink]]
    snapshots: List[ReverseDependencyLink]
    modules: List[ModuleRef] = field(default_factory=list)
    module_trees: Dict[ModuleRef, DependencyNode] = field(default_factory=dict)

    @property
    def dependency_count(self) -> int:
        return len(self.all_dependencies)

    @property
    def artifact_count(self) -> int:
        return count_artifacts(self.all_dependencies)

    @property
    def conflicting_count(self) -> int:
        return len(self.conflicting)

    @property
    def snapshot_count(self) -> int:
        return len(self.snapshots)

    @property
    def module_count(self) -> int:
        return len(self.modules)

    @property
    def is_reactor_build(self) -> bool:
        return len(self.modules) > 1

    @property
    def convergence(self) -> int:
        return calculate_convergence(self.dependency_count, self.artifact_count)

    @property
    def is_release_ready(self) -> bool:
        return is_release_ready(self.convergence, self.snapshot_count)

    def version_details(self, links: List[ReverseDependencyLink]) -> List[VersionDetail]:
        """
        Break links down by version and attach each implicated module's filtered tree.

        Modules are listed in order of their root artifact id. Buckets for which no
        module tree can be found are logged and left out.
        """
        details = []
        for version, bucket in group_by_version(links).items():
            if not bucket:
                logger.warning(f"No dependencies recorded for version {version}, skipping")
                continue

            evidence = self._module_evidence(bucket)
            if not evidence:
                logger.warning(f"Can't find module trees for dependency: {bucket[0].dependency}")
                continue
            details.append(VersionDetail(version=version, links=bucket, evidence=evidence))
        return details

    def _module_evidence(self, bucket: List[ReverseDependencyLink]) -> List[ModuleEvidence]:
        pattern = _detail_pattern(bucket[0].dependency)

        modules = []
        for link in bucket:
            if link.module not in modules and link.module in self.module_trees:
                modules.append(link.module)
        modules.sort(key=lambda m: self.module_trees[m].coordinate.id)

        evidence = []
        for module in modules:
            root = self.module_trees[module]
            tree = filter_paths(root, pattern)
            if tree is None:
                logger.debug(f"No node matching {pattern} in tree of {module}")
                continue
            evidence.append(ModuleEvidence(module=module, tree=tree, paths=dependency_paths(root, pattern)))
        return evidence

    def conflict_details(self) -> List[IdentityDetail]:
        """Evidence for every conflicting identity, in identity order."""
        return [
            IdentityDetail(identity=identity, versions=self.version_details(links))
            for identity, links in self.conflicting.items()
        ]

    def snapshot_details(self) -> List[IdentityDetail]:
        """Evidence for every snapshot dependency."""
        return [
            IdentityDetail(identity=link.dependency.identity, versions=self.version_details([link]))
            for link in self.snapshots
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable summary."""
        def links_to_dict(links: List[ReverseDependencyLink]) -> Dict[str, List[str]]:
            return {
                version: [link.module.id for link in bucket]
                for version, bucket in group_by_version(links).items()
            }

        return {
            'stats': {
                'modules': self.module_count,
                'dependencies': self.dependency_count,
                'artifacts': self.artifact_count,
                'conflicting': self.conflicting_count,
                'snapshots': self.snapshot_count,
                'convergence': self.convergence,
                'releaseReady': self.is_release_ready,
            },
            'conflicting': {
                identity.key: links_to_dict(links) for identity, links in self.conflicting.items()
            },
            'snapshots': [
                {'dependency': link.dependency.full_name, 'module': link.module.id}
                for link in self.snapshots
            ],
            'paths': {
                detail.identity.key: {
                    version.version: {
                        ev.module.id: [[c.full_name for c in path] for path in ev.paths]
                        for ev in version.evidence
                    }
                    for version in detail.versions
                }
                for detail in self.conflict_details()
            },
        }
