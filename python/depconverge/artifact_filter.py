"""Strict include-pattern filtering of artifacts."""

import logging
from typing import Dict, Iterable, List, Optional

from .models import ArtifactCoordinate, DependencyNode

logger = logging.getLogger(__name__)


class StrictPatternArtifactFilter:
    """
    Includes artifacts matching any of a list of patterns.

    A pattern is ``group:artifact:version:classifier``; trailing tokens may be
    left out. Each token is matched strictly against the same token of the
    artifact:

    - ``*`` or an empty token matches anything
    - ``*text*`` matches tokens containing ``text``
    - ``*text`` matches tokens ending with ``text``
    - ``text*`` matches tokens starting with ``text``
    - anything else must be equal

    A pattern with more tokens than an artifact has never matches.
    """

    def __init__(self, patterns: Iterable[str]):
        self.patterns: List[str] = [p.strip() for p in patterns if p and p.strip()]

    @classmethod
    def from_includes(cls, includes: Optional[str]) -> Optional['StrictPatternArtifactFilter']:
        """Build a filter from comma-separated patterns, or None if there are none."""
        if not includes:
            return None
        patterns = includes.split(',')
        logger.debug(f"Filtering dependency tree by artifact include patterns: {patterns}")
        artifact_filter = cls(patterns)
        return artifact_filter if artifact_filter.patterns else None

    def include(self, coordinate: ArtifactCoordinate) -> bool:
        """Return True if the coordinate matches at least one pattern."""
        tokens = [
            coordinate.group_id,
            coordinate.artifact_id,
            coordinate.version,
            coordinate.classifier or "",
        ]
        return any(self._include(tokens, pattern) for pattern in self.patterns)

    def _include(self, tokens: List[str], pattern: str) -> bool:
        pattern_tokens = pattern.split(':')
        if len(pattern_tokens) > len(tokens):
            return False
        return all(
            self._matches(token, pattern_token)
            for token, pattern_token in zip(tokens, pattern_tokens)
        )

    @staticmethod
    def _matches(token: str, pattern: str) -> bool:
        if pattern == "*" or not pattern:
            return True
        if len(pattern) > 1 and pattern.startswith("*") and pattern.endswith("*"):
            return pattern[1:-1] in token
        if pattern.startswith("*"):
            return token.endswith(pattern[1:])
        if pattern.endswith("*"):
            return token.startswith(pattern[:-1])
        return token == pattern

    def __repr__(self) -> str:
        return f"StrictPatternArtifactFilter({self.patterns!r})"


def prune_tree(node: DependencyNode, artifact_filter: Optional[StrictPatternArtifactFilter]) -> DependencyNode:
    """
    Return a copy of the tree without children the filter rejects.

    A rejected child is dropped together with its subtree. The root is always
    kept, and a node shared by several parents stays shared in the copy.
    """
    if artifact_filter is None:
        return node

    copies: Dict[int, DependencyNode] = {id(node): DependencyNode(coordinate=node.coordinate)}
    stack = [node]

    while stack:
        current = stack.pop()
        pruned = copies[id(current)]
        for child in current.children:
            if not artifact_filter.include(child.coordinate):
                logger.debug(f"Excluding {child.coordinate} from {current.coordinate} (filtered)")
                continue
            child_copy = copies.get(id(child))
            if child_copy is None:
                child_copy = copies[id(child)] = DependencyNode(coordinate=child.coordinate)
                stack.append(child)
            pruned.add_child(child_copy)

    return copies[id(node)]
