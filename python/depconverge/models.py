"""Core data models for depconverge."""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class ArtifactIdentity:
    """A library irrespective of version: groupId and artifactId."""

    group_id: str
    artifact_id: str

    @property
    def key(self) -> str:
        """Return the identity in group:artifact format."""
        return f"{self.group_id}:{self.artifact_id}"

    def __str__(self) -> str:
        return self.key


@dataclass(frozen=True)
class ArtifactCoordinate:
    """
    One resolved dependency occurrence.

    Equality and hashing only consider group, artifact and version, so the same
    artifact pulled in with a different scope or classifier is still the same
    coordinate.
    """

    group_id: str
    artifact_id: str
    version: str
    classifier: Optional[str] = field(default=None, compare=False)
    type: str = field(default="jar", compare=False)
    scope: Optional[str] = field(default=None, compare=False)

    @property
    def identity(self) -> ArtifactIdentity:
        return ArtifactIdentity(self.group_id, self.artifact_id)

    @property
    def full_name(self) -> str:
        """Return the coordinate in group:artifact:version format."""
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    @property
    def id(self) -> str:
        """Return group:artifact:type[:classifier]:version, used to sort nodes."""
        parts = [self.group_id, self.artifact_id, self.type]
        if self.classifier:
            parts.append(self.classifier)
        parts.append(self.version)
        return ":".join(parts)

    def __str__(self) -> str:
        if self.scope:
            return f"{self.full_name}:{self.scope}"
        return self.full_name


@dataclass(frozen=True)
class ModuleRef:
    """A module (project) taking part in the build."""

    group_id: str
    artifact_id: str
    version: str

    @property
    def identity(self) -> ArtifactIdentity:
        return ArtifactIdentity(self.group_id, self.artifact_id)

    @property
    def id(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"

    def __str__(self) -> str:
        return self.id


@dataclass
class DependencyNode:
    """A node in a module's resolved dependency tree."""

    coordinate: ArtifactCoordinate
    children: List['DependencyNode'] = field(default_factory=list, compare=False, hash=False)

    def __eq__(self, other) -> bool:
        """Equality based on object identity, two occurrences of one artifact are distinct nodes."""
        return self is other

    def __hash__(self) -> int:
        return id(self)

    def add_child(self, child: 'DependencyNode') -> None:
        """Append a child, keeping resolution order."""
        if child not in self.children:
            self.children.append(child)

    def get_tree_representation(self) -> str:
        """
        Generate a tree visualization string.

        A node reached again through another parent is shown once with its
        children; later occurrences are marked ``(*)``.
        """
        lines = [str(self.coordinate)]
        expanded = {id(self)}
        stack = [(child, "", i == len(self.children) - 1) for i, child in enumerate(self.children)]
        stack.reverse()

        while stack:
            node, prefix, is_last = stack.pop()
            connector = "└── " if is_last else "├── "
            if id(node) in expanded and node.children:
                lines.append(f"{prefix}{connector}{node.coordinate} (*)")
                continue
            expanded.add(id(node))
            lines.append(f"{prefix}{connector}{node.coordinate}")

            child_prefix = prefix + ("    " if is_last else "│   ")
            for i in reversed(range(len(node.children))):
                stack.append((node.children[i], child_prefix, i == len(node.children) - 1))

        return "\n".join(lines)


@dataclass(frozen=True)
class ReverseDependencyLink:
    """Records that a module resolved a dependency coordinate."""

    dependency: ArtifactCoordinate
    module: ModuleRef

    def __str__(self) -> str:
        return self.module.id
