"""Dependency graph providers: where each module's resolved tree comes from."""

import logging
from typing import Dict, Iterable, List, Mapping, Optional, Protocol, Tuple

import requests

from .artifact_filter import StrictPatternArtifactFilter, prune_tree
from .errors import CollectionError
from .models import DependencyNode, ModuleRef
from .parsers import parse_sbom_tree, read_content

logger = logging.getLogger(__name__)


class DependencyGraphProvider(Protocol):
    """Returns the resolved dependency tree of a module."""

    def collect_dependency_graph(
        self,
        module: ModuleRef,
        artifact_filter: Optional[StrictPatternArtifactFilter] = None
    ) -> DependencyNode:
        """
        Return the module's tree, without nodes the filter rejects.

        Raises:
            CollectionError: If the tree can't be built
        """
        ...


class StaticGraphProvider:
    """Provider over trees that are already in memory."""

    def __init__(self, trees: Mapping[ModuleRef, DependencyNode]):
        self.trees: Dict[ModuleRef, DependencyNode] = dict(trees)

    def collect_dependency_graph(
        self,
        module: ModuleRef,
        artifact_filter: Optional[StrictPatternArtifactFilter] = None
    ) -> DependencyNode:
        tree = self.trees.get(module)
        if tree is None:
            raise CollectionError(module, "no dependency tree available")
        return prune_tree(tree, artifact_filter)


class SbomGraphProvider:
    """
    Provider reading one CycloneDX JSON SBOM per module.

    Such SBOMs are produced per module by e.g. the cyclonedx-maven-plugin;
    their ``dependencies`` section is the module's resolved graph. Sources are
    file paths or URLs.
    """

    def __init__(self, sources: Iterable[str]):
        self.sources = list(sources)
        self._trees: Dict[ModuleRef, DependencyNode] = {}
        self._loaded = False

    def load(self) -> None:
        """Read every source once, indexing trees by module."""
        if self._loaded:
            return
        for source in self.sources:
            module, tree = self._read(source)
            if module in self._trees:
                logger.warning(f"Module {module} appears in more than one SBOM, keeping the first")
                continue
            self._trees[module] = tree
        self._loaded = True
        logger.info(f"Loaded {len(self._trees)} module SBOMs")

    @property
    def modules(self) -> List[ModuleRef]:
        """Modules in the order their SBOMs were given."""
        self.load()
        return list(self._trees)

    def _read(self, source: str) -> Tuple[ModuleRef, DependencyNode]:
        try:
            return parse_sbom_tree(read_content(source))
        except (OSError, ValueError, requests.RequestException) as e:
            # the module is unknown until the SBOM is read
            raise CollectionError(source, str(e), e) from e

    def collect_dependency_graph(
        self,
        module: ModuleRef,
        artifact_filter: Optional[StrictPatternArtifactFilter] = None
    ) -> DependencyNode:
        self.load()
        tree = self._trees.get(module)
        if tree is None:
            raise CollectionError(module, "no SBOM found for module")
        return prune_tree(tree, artifact_filter)


def load_sbom_provider(sources: Iterable[str]) -> Tuple[SbomGraphProvider, List[ModuleRef]]:
    """Create an SBOM provider and return it with the modules it describes."""
    provider = SbomGraphProvider(sources)
    return provider, provider.modules

