"""Detects identities resolved to more than one version inside one module's tree."""

import logging
from typing import Dict, List

from .collector import iter_descendants
from .models import ArtifactIdentity, DependencyNode

logger = logging.getLogger(__name__)


class VersionMapVisitor:
    """
    Records, per identity, the nodes met while walking a tree in resolution order.

    The first node recorded for an identity is the canonical one; every later
    node with a different version conflicts with it. With ``unique_versions``
    only the first node of each version is kept.
    """

    def __init__(self, unique_versions: bool = True):
        self.unique_versions = unique_versions
        self.version_map: Dict[ArtifactIdentity, List[DependencyNode]] = {}

    def visit(self, node: DependencyNode) -> None:
        identity = node.coordinate.identity
        nodes = self.version_map.setdefault(identity, [])

        if self.unique_versions and any(n.coordinate.version == node.coordinate.version for n in nodes):
            return

        if nodes and nodes[0].coordinate.version != node.coordinate.version:
            logger.debug(
                f"Version conflict: {identity} {node.coordinate.version} "
                f"vs first seen {nodes[0].coordinate.version}"
            )
        nodes.append(node)

    def visit_tree(self, root: DependencyNode) -> 'VersionMapVisitor':
        """Visit every node below root."""
        for node in iter_descendants(root):
            self.visit(node)
        return self

    def conflicted_versions(self) -> List[List[DependencyNode]]:
        """Return node lists that span more than one version, in first-seen identity order."""
        return [
            nodes for nodes in self.version_map.values()
            if len({n.coordinate.version for n in nodes}) > 1
        ]


def find_conflicts(root: DependencyNode) -> Dict[ArtifactIdentity, List[List[DependencyNode]]]:
    """
    Find identities with more than one version below root.

    Each identity maps to node groups, one group per version. Group 0 holds the
    first version seen during traversal, the others the divergent versions in the
    order they were met.
    """
    visitor = VersionMapVisitor(unique_versions=True).visit_tree(root)

    conflicts: Dict[ArtifactIdentity, List[List[DependencyNode]]] = {}
    for nodes in visitor.conflicted_versions():
        groups: Dict[str, List[DependencyNode]] = {}
        for node in nodes:
            groups.setdefault(node.coordinate.version, []).append(node)
        conflicts[nodes[0].coordinate.identity] = list(groups.values())

    if conflicts:
        logger.debug(f"Found {len(conflicts)} conflicting dependencies below {root.coordinate}")
    return conflicts
