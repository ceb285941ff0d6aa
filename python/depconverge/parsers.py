"""Input parsers: CycloneDX SBOMs and pom.xml module descriptors."""

import json
import logging
import re
import xml.etree.ElementTree as ET
from typing import Dict, Hashable, Iterator, List, Mapping, Optional, Sequence, Tuple
from urllib.parse import urlparse

import requests
from packageurl import PackageURL

from .models import ArtifactCoordinate, DependencyNode, ModuleRef

logger = logging.getLogger(__name__)

_END = object()


def _is_url(path: str) -> bool:
    """Check if a path is a URL."""
    return urlparse(path).scheme in ('http', 'https')


def read_content(path: str) -> str:
    """
    Read content from either a file path or URL.

    Raises:
        OSError: If the file can't be read
        requests.RequestException: If the URL fetch fails
    """
    if _is_url(path):
        logger.info(f"Fetching content from URL: {path}")
        response = requests.get(path, timeout=30)
        response.raise_for_status()
        return response.text
    logger.info(f"Reading content from file: {path}")
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


# CycloneDX SBOM

def parse_purl(purl: str, scope: Optional[str] = None) -> Optional[ArtifactCoordinate]:
    """Parse a maven Package URL into a coordinate, or None if it isn't one."""
    try:
        parsed = PackageURL.from_string(purl)
    except ValueError as e:
        logger.warning(f"Invalid purl format: {purl} ({e})")
        return None

    if parsed.type != 'maven' or not parsed.version:
        logger.debug(f"Skipping non-maven or unversioned purl: {purl}")
        return None

    qualifiers = parsed.qualifiers or {}
    return ArtifactCoordinate(
        group_id=parsed.namespace or "",
        artifact_id=parsed.name,
        version=parsed.version,
        classifier=qualifiers.get('classifier'),
        type=qualifiers.get('type', 'jar'),
        scope=scope,
    )


def _component_coordinate(component: Dict) -> Optional[ArtifactCoordinate]:
    scope = component.get('scope')
    purl = component.get('purl')
    if purl:
        return parse_purl(purl, scope)

    # Fall back to plain component fields
    name = component.get('name')
    version = component.get('version')
    if not name or not version:
        return None
    return ArtifactCoordinate(group_id=component.get('group', ''), artifact_id=name, version=version, scope=scope)


def parse_sbom_tree(content: str) -> Tuple[ModuleRef, DependencyNode]:
    """
    Build a module's dependency graph from a CycloneDX JSON SBOM.

    The root is ``metadata.component``; children follow the ``dependsOn``
    order of the ``dependencies`` section. Every component becomes a single
    node shared by all of its dependents, and edges leading back into the
    current path are dropped.

    Raises:
        ValueError: If the document is not a usable CycloneDX SBOM
    """
    sbom = json.loads(content)
    if not isinstance(sbom, dict):
        raise ValueError(f"SBOM must be a JSON object, got {type(sbom).__name__}")

    metadata = sbom.get('metadata')
    if not isinstance(metadata, dict) or not isinstance(metadata.get('component'), dict):
        raise ValueError("SBOM has no metadata.component to use as module root")
    metadata_component = metadata['component']

    root_coordinate = _component_coordinate(metadata_component)
    if root_coordinate is None:
        raise ValueError("SBOM metadata.component has no maven coordinate")
    root_ref = metadata_component.get('bom-ref') or metadata_component.get('purl')

    components = sbom.get('components') or []
    dependencies = sbom.get('dependencies') or []
    if not isinstance(components, list) or not isinstance(dependencies, list):
        raise ValueError("SBOM components and dependencies must be lists")

    # bom-ref -> coordinate
    coordinates: Dict[str, ArtifactCoordinate] = {}
    for component in components:
        if not isinstance(component, dict):
            continue
        bom_ref = component.get('bom-ref') or component.get('purl')
        coordinate = _component_coordinate(component)
        if isinstance(bom_ref, str) and coordinate:
            coordinates[bom_ref] = coordinate

    # bom-ref -> dependsOn
    dep_graph: Dict[str, List[str]] = {}
    for dep in dependencies:
        if isinstance(dep, dict) and isinstance(dep.get('ref'), str):
            dep_graph[dep['ref']] = [r for r in dep.get('dependsOn') or [] if isinstance(r, str)]

    module = ModuleRef(root_coordinate.group_id, root_coordinate.artifact_id, root_coordinate.version)
    root = DependencyNode(coordinate=root_coordinate)
    link_shared_nodes(root, root_ref, dep_graph, coordinates)

    logger.debug(f"Parsed SBOM graph for {module}: {len(coordinates)} components")
    return module, root


def link_shared_nodes(
    root: DependencyNode,
    root_key: Hashable,
    adjacency: Mapping[Hashable, Sequence[Hashable]],
    coordinates: Mapping[Hashable, ArtifactCoordinate]
) -> int:
    """
    Attach the graph reachable from root_key below root.

    Each key gets exactly one node, reused by every parent that depends on it,
    so the result stays as large as the graph no matter how often components
    are shared. An edge back into the current path would close a cycle and is
    skipped. Returns the number of nodes created, root included.
    """
    nodes: Dict[Hashable, DependencyNode] = {root_key: root}
    on_path = {root_key}
    stack: List[Tuple[Hashable, Iterator[Hashable]]] = [(root_key, iter(adjacency.get(root_key, [])))]

    while stack:
        key, children = stack[-1]
        child_key = next(children, _END)
        if child_key is _END:
            stack.pop()
            on_path.discard(key)
            continue

        if child_key not in coordinates:
            logger.debug(f"Dependency ref not in components: {child_key}")
            continue
        if child_key in on_path:
            logger.debug(f"Skipping cyclic dependency {child_key} below {key}")
            continue

        child = nodes.get(child_key)
        if child is None:
            child = nodes[child_key] = DependencyNode(coordinate=coordinates[child_key])
            on_path.add(child_key)
            stack.append((child_key, iter(adjacency.get(child_key, []))))
        nodes[key].add_child(child)

    return len(nodes)


# pom.xml

_PROPERTY_REFERENCE = re.compile(r'\$\{([^}]+)\}')


def _child_text(parent: ET.Element, tag: str) -> Optional[str]:
    """Text of the first direct child named tag, in the POM's namespace."""
    elem = parent.find(tag)
    if elem is not None and elem.text:
        return elem.text.strip()
    return None


def resolve_property(value: Optional[str], properties: Dict[str, str]) -> Optional[str]:
    """
    Substitute ${name} references, following nested references.

    Returns None if a reference can't be resolved.
    """
    for _ in range(10):
        if not value:
            return value
        names = _PROPERTY_REFERENCE.findall(value)
        if not names:
            return value
        if any(name not in properties for name in names):
            return None
        value = _PROPERTY_REFERENCE.sub(lambda m: properties[m.group(1)], value)
    return None


def parse_pom_module(content: str) -> Tuple[ModuleRef, List[ArtifactCoordinate]]:
    """
    Parse a pom.xml into its module and its direct dependencies.

    Dependencies without a resolvable explicit version (for instance managed by
    a parent or BOM) are skipped with a warning.

    Raises:
        ValueError: If the POM can't be parsed or lacks coordinates
    """
    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise ValueError(f"Invalid pom.xml: {e}") from e

    # '{http://maven.apache.org/POM/4.0.0}' or '' for POMs without a namespace
    ns = root.tag[:root.tag.index('}') + 1] if root.tag.startswith('{') else ''

    def text(parent: ET.Element, name: str) -> Optional[str]:
        return _child_text(parent, ns + name)

    group_id = text(root, 'groupId')
    artifact_id = text(root, 'artifactId')
    version = text(root, 'version')

    parent_elem = root.find(ns + 'parent')
    if parent_elem is not None:
        group_id = group_id or text(parent_elem, 'groupId')
        version = version or text(parent_elem, 'version')

    properties_elem = root.find(ns + 'properties')
    properties = {
        prop.tag[len(ns):]: prop.text.strip()
        for prop in (properties_elem if properties_elem is not None else [])
        if prop.text
    }
    properties.update({
        'project.groupId': group_id or '',
        'project.artifactId': artifact_id or '',
        'project.version': version or '',
    })
    version = resolve_property(version, properties)

    if not group_id or not artifact_id or not version:
        raise ValueError("pom.xml is missing groupId, artifactId or version")
    module = ModuleRef(group_id, artifact_id, version)

    dependencies = []
    for dep_elem in root.iterfind(f'{ns}dependencies/{ns}dependency'):
        dep_group = resolve_property(text(dep_elem, 'groupId'), properties)
        dep_artifact = resolve_property(text(dep_elem, 'artifactId'), properties)
        dep_version = resolve_property(text(dep_elem, 'version'), properties)

        if not dep_group or not dep_artifact:
            continue
        if not dep_version:
            logger.warning(f"Skipping {dep_group}:{dep_artifact} in {module}: no explicit version")
            continue

        dependencies.append(ArtifactCoordinate(
            group_id=dep_group,
            artifact_id=dep_artifact,
            version=dep_version,
            classifier=text(dep_elem, 'classifier'),
            type=text(dep_elem, 'type') or 'jar',
            scope=text(dep_elem, 'scope') or 'compile',
        ))

    logger.info(f"Parsed {len(dependencies)} direct dependencies from pom.xml of {module}")
    return module, dependencies
