"""Shared fixtures for the depconverge test suite."""

import json

import pytest

from depconverge.models import ArtifactCoordinate, DependencyNode, ModuleRef


def make_coordinate(gav: str, scope: str = None) -> ArtifactCoordinate:
    """Build a coordinate from ``group:artifact:version``."""
    group_id, artifact_id, version = gav.split(':')
    return ArtifactCoordinate(group_id, artifact_id, version, scope=scope)


def make_tree(gav, *children) -> DependencyNode:
    """Build a tree: make_tree("g:root:1", make_tree("g:a:1"), ...)."""
    node = DependencyNode(coordinate=make_coordinate(gav))
    for child in children:
        node.add_child(child)
    return node


def make_module(gav: str) -> ModuleRef:
    group_id, artifact_id, version = gav.split(':')
    return ModuleRef(group_id, artifact_id, version)


@pytest.fixture
def coord():
    return make_coordinate


@pytest.fixture
def tree():
    return make_tree


@pytest.fixture
def module():
    return make_module


@pytest.fixture
def write_sbom(tmp_path):
    """Factory fixture writing a CycloneDX SBOM for a module and returning its path."""
    def _write(module_gav: str, dependencies: dict, components: list) -> str:
        group_id, artifact_id, version = module_gav.split(':')
        root_ref = f"pkg:maven/{group_id}/{artifact_id}@{version}?type=jar"
        sbom = {
            "bomFormat": "CycloneDX",
            "specVersion": "1.5",
            "metadata": {
                "component": {
                    "type": "library",
                    "bom-ref": root_ref,
                    "group": group_id,
                    "name": artifact_id,
                    "version": version,
                    "purl": root_ref,
                }
            },
            "components": [
                {
                    "type": "library",
                    "bom-ref": f"pkg:maven/{c.replace(':', '/', 1).replace(':', '@', 1)}?type=jar",
                    "purl": f"pkg:maven/{c.replace(':', '/', 1).replace(':', '@', 1)}?type=jar",
                }
                for c in components
            ],
            "dependencies": [
                {
                    "ref": root_ref if ref == module_gav
                    else f"pkg:maven/{ref.replace(':', '/', 1).replace(':', '@', 1)}?type=jar",
                    "dependsOn": [
                        f"pkg:maven/{d.replace(':', '/', 1).replace(':', '@', 1)}?type=jar" for d in depends_on
                    ],
                }
                for ref, depends_on in dependencies.items()
            ],
        }
        path = tmp_path / f"{artifact_id}-bom.json"
        path.write_text(json.dumps(sbom), encoding="utf-8")
        return str(path)
    return _write
