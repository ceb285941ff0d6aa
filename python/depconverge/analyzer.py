"""Runs the convergence analysis across all modules of a build."""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from .artifact_filter import StrictPatternArtifactFilter
from .collector import collect_descendants
from .conflicts import find_conflicts
from .grouping import count_versions
from .models import ArtifactCoordinate, ArtifactIdentity, DependencyNode, ModuleRef, ReverseDependencyLink
from .providers import DependencyGraphProvider
from .result import AnalysisResult
from .snapshots import find_snapshots

logger = logging.getLogger(__name__)


@dataclass
class ModuleAnalysis:
    """What one module's tree contributes to the build-wide maps."""

    module: ModuleRef
    tree: DependencyNode
    conflicts: Dict[ArtifactIdentity, List[List[DependencyNode]]]
    descendants: Set[ArtifactCoordinate]


def analyze_module(module: ModuleRef, tree: DependencyNode) -> ModuleAnalysis:
    """Analyze one module's tree. Depends on nothing but its arguments."""
    return ModuleAnalysis(
        module=module,
        tree=tree,
        conflicts=find_conflicts(tree),
        descendants=collect_descendants(tree),
    )


@dataclass
class ResultAccumulator:
    """
    Merges per-module analyses into the build-wide maps.

    The single writer of an analysis run; merge order is build order.
    """

    modules: List[ModuleRef] = field(default_factory=list)
    module_trees: Dict[ModuleRef, DependencyNode] = field(default_factory=dict)
    conflicting: Dict[ArtifactIdentity, List[ReverseDependencyLink]] = field(default_factory=dict)
    all_dependencies: Dict[ArtifactIdentity, List[ReverseDependencyLink]] = field(default_factory=dict)

    def merge(self, analysis: ModuleAnalysis) -> None:
        module = analysis.module
        self.modules.append(module)
        self.module_trees[module] = analysis.tree

        for identity, groups in analysis.conflicts.items():
            links = self.conflicting.setdefault(identity, [])
            for nodes in groups:
                for node in nodes:
                    links.append(ReverseDependencyLink(node.coordinate, module))

        # sets have no stable order, sort so repeated runs give identical maps
        for coordinate in sorted(analysis.descendants, key=lambda c: (c.group_id, c.artifact_id, c.version)):
            links = self.all_dependencies.setdefault(coordinate.identity, [])
            link = ReverseDependencyLink(coordinate, module)
            if link not in links:
                links.append(link)

        logger.debug(
            f"Merged {module}: {len(analysis.descendants)} dependencies, "
            f"{len(analysis.conflicts)} conflicting"
        )

    def _add_cross_module_conflicts(self) -> None:
        """Mark identities resolved to different versions by different modules as conflicting."""
        for identity, links in self.all_dependencies.items():
            if count_versions(links) < 2:
                continue
            conflict_links = self.conflicting.setdefault(identity, [])
            for link in links:
                if link not in conflict_links:
                    conflict_links.append(link)

    def build(self) -> AnalysisResult:
        self._add_cross_module_conflicts()

        all_dependencies = {
            identity: self.all_dependencies[identity]
            for identity in sorted(self.all_dependencies, key=lambda i: i.key)
        }
        conflicting = {
            identity: self.conflicting[identity]
            for identity in sorted(self.conflicting, key=lambda i: i.key)
        }

        return AnalysisResult(
            all_dependencies=all_dependencies,
            conflicting=conflicting,
            snapshots=find_snapshots(all_dependencies, self.modules),
            modules=list(self.modules),
            module_trees=dict(self.module_trees),
        )


class ConvergenceAnalyzer:
    """
    Analyzes dependency convergence for the modules of a build.

    Each module's tree is requested from the provider exactly once. A provider
    failure aborts the whole analysis.
    """

    def __init__(
        self,
        provider: DependencyGraphProvider,
        modules: Sequence[ModuleRef],
        includes: Optional[str] = None
    ):
        self.provider = provider
        self.modules = list(modules)
        self.artifact_filter = StrictPatternArtifactFilter.from_includes(includes)

    def analyze(self) -> AnalysisResult:
        logger.info(f"Analyzing dependency convergence for {len(self.modules)} modules")

        accumulator = ResultAccumulator()
        for module in self.modules:
            logger.info(f"Collecting dependency tree for {module}")
            tree = self.provider.collect_dependency_graph(module, self.artifact_filter)
            accumulator.merge(analyze_module(module, tree))

        result = accumulator.build()
        logger.info(
            f"Analysis complete: {result.dependency_count} dependencies, "
            f"{result.artifact_count} artifacts, {result.conflicting_count} conflicting, "
            f"{result.snapshot_count} snapshots, convergence {result.convergence}%"
        )
        return result
