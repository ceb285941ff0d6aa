"""Client for the deps.dev API and a graph provider built on it."""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Mapping, Optional, Sequence
from urllib.parse import quote

import requests

from . import __version__
from .artifact_filter import StrictPatternArtifactFilter, prune_tree
from .errors import CollectionError
from .models import ArtifactCoordinate, DependencyNode, ModuleRef
from .parsers import link_shared_nodes

logger = logging.getLogger(__name__)


class DepsDevClient:
    """Client for fetching resolved dependency graphs from the deps.dev API."""

    BASE_URL = "https://api.deps.dev/v3/systems"

    def __init__(self, base_url: str = BASE_URL, timeout: float = 30):
        """Initialize the API client."""
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = requests.Session()
        self.session.headers.update({
            "Accept": "application/json",
            "User-Agent": f"depconverge/{__version__}"
        })

    def get_dependency_graph(self, coordinate: ArtifactCoordinate) -> Dict[str, Any]:
        """
        Get the resolved dependency graph of a Maven artifact.

        Returns:
            JSON response containing nodes and edges

        Raises:
            requests.RequestException: If the request fails or the response is not 200
        """
        # URL-encode the package name to handle the ':' separator
        encoded_name = quote(f"{coordinate.group_id}:{coordinate.artifact_id}", safe='')
        url = (
            f"{self.base_url}/maven/packages/{encoded_name}"
            f"/versions/{quote(coordinate.version, safe='')}:dependencies"
        )

        logger.debug(f"Fetching dependency graph for {coordinate.full_name}")
        logger.debug(f"  URL: {url}")

        response = self.session.get(url, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def close(self):
        """Close the session and clean up resources."""
        self.session.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()


def parse_dependency_graph(graph: Dict, declared: ArtifactCoordinate) -> DependencyNode:
    """
    Turn a deps.dev graph response into a tree rooted at the declared dependency.

    deps.dev returns a graph in which nodes may be shared; they stay shared in
    the tree, one node per graph node. Edges leading back into the current path
    are dropped.
    """
    nodes = graph.get("nodes", [])
    edges = graph.get("edges", [])

    coordinates: Dict[int, ArtifactCoordinate] = {}
    self_node_index = -1

    for i, node in enumerate(nodes):
        version_key = node.get("versionKey", {})
        group_id, _, artifact_id = version_key.get("name", "").partition(":")
        coordinates[i] = ArtifactCoordinate(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version_key.get("version", ""),
        )
        if node.get("relation") == "SELF":
            self_node_index = i

    root = DependencyNode(coordinate=declared)
    if self_node_index == -1:
        # No graph at all, treat as leaf
        return root

    adjacency: Dict[int, List[int]] = defaultdict(list)
    for edge in edges:
        from_node = edge.get("fromNode")
        to_node = edge.get("toNode")
        if from_node is not None and to_node is not None:
            adjacency[from_node].append(to_node)

    link_shared_nodes(root, self_node_index, adjacency, coordinates)
    return root


class DepsDevGraphProvider:
    """
    Provider resolving each module's direct dependencies through deps.dev.

    The module becomes the root; under it hangs the resolved graph of every
    direct dependency, in declaration order. Dependencies on other modules of
    the build are kept as leaves since deps.dev doesn't know unreleased modules.
    """

    def __init__(
        self,
        direct_dependencies: Mapping[ModuleRef, Sequence[ArtifactCoordinate]],
        client: Optional[DepsDevClient] = None
    ):
        self.direct_dependencies = {m: list(deps) for m, deps in direct_dependencies.items()}
        self.client = client or DepsDevClient()
        self._reactor = {m.identity for m in self.direct_dependencies}

    def collect_dependency_graph(
        self,
        module: ModuleRef,
        artifact_filter: Optional[StrictPatternArtifactFilter] = None
    ) -> DependencyNode:
        if module not in self.direct_dependencies:
            raise CollectionError(module, "module has no descriptor")

        root = DependencyNode(coordinate=ArtifactCoordinate(
            module.group_id, module.artifact_id, module.version, type="pom"
        ))

        for declared in self.direct_dependencies[module]:
            if declared.identity in self._reactor:
                logger.debug(f"{declared} is a reactor module, not resolving")
                root.add_child(DependencyNode(coordinate=declared))
                continue
            try:
                graph = self.client.get_dependency_graph(declared)
            except (requests.RequestException, ValueError) as e:
                raise CollectionError(module, f"{declared.full_name}: {e}", e) from e
            root.add_child(parse_dependency_graph(graph, declared))

        logger.info(f"Resolved {len(root.children)} direct dependencies of {module} through deps.dev")
        return prune_tree(root, artifact_filter)

    def close(self):
        self.client.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
