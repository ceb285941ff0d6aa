"""Flattens a resolved dependency tree into the artifacts below its root."""

import logging
from typing import Iterator, List, Set

from .models import ArtifactCoordinate, DependencyNode

logger = logging.getLogger(__name__)


def iter_descendants(root: DependencyNode) -> Iterator[DependencyNode]:
    """
    Yield every node below root, depth-first in resolution order.

    Uses an explicit stack so very deep trees don't hit the recursion limit.
    A node reachable twice (shared subtree) is only yielded once.
    """
    visited: Set[int] = {id(root)}
    stack: List[DependencyNode] = list(reversed(root.children))

    while stack:
        node = stack.pop()
        if id(node) in visited:
            continue
        visited.add(id(node))
        yield node
        stack.extend(reversed(node.children))


def collect_descendants(root: DependencyNode) -> Set[ArtifactCoordinate]:
    """Return the coordinates of all nodes below root (root itself excluded)."""
    descendants = {node.coordinate for node in iter_descendants(root)}
    logger.debug(f"Collected {len(descendants)} descendants below {root.coordinate}")
    return descendants
