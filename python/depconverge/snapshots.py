"""Finds unreleased (snapshot) dependencies that are not modules of the build."""

import logging
from typing import Iterable, List, Mapping

from .grouping import group_by_version
from .models import ArtifactCoordinate, ArtifactIdentity, ModuleRef, ReverseDependencyLink

logger = logging.getLogger(__name__)

SNAPSHOT_SUFFIX = "-SNAPSHOT"


def is_snapshot(version: str) -> bool:
    """Return True if the version marks an unreleased artifact."""
    return version.endswith(SNAPSHOT_SUFFIX)


def is_reactor_module(dependency: ArtifactCoordinate, reactor_modules: Iterable[ModuleRef]) -> bool:
    """Return True if the dependency is one of the build's own modules."""
    for module in reactor_modules:
        if module.group_id == dependency.group_id and module.artifact_id == dependency.artifact_id:
            return True
    return False


def find_snapshots(
    dependencies: Mapping[ArtifactIdentity, List[ReverseDependencyLink]],
    reactor_modules: Iterable[ModuleRef]
) -> List[ReverseDependencyLink]:
    """
    Return one representative link per snapshot version bucket.

    Buckets are visited in identity order, then version order. A snapshot of a
    sibling module is expected during development and is not reported.
    """
    reactor_modules = list(reactor_modules)
    snapshots = []

    for identity in sorted(dependencies, key=lambda i: i.key):
        for version, links in group_by_version(dependencies[identity]).items():
            if not links:
                continue
            # every link in a bucket carries the same version, the first one is enough
            link = links[0]
            if not is_snapshot(version):
                continue
            if is_reactor_module(link.dependency, reactor_modules):
                logger.debug(f"Ignoring snapshot {link.dependency}, it is a reactor module")
                continue
            logger.debug(f"Snapshot dependency: {link.dependency} (from {link.module})")
            snapshots.append(link)

    return snapshots
