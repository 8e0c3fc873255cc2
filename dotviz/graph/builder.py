"""
Graph Builder for dotviz

This module applies the filtering, coloring and topology policy to raw
project and package facts, producing a renderable Graph.

Design Decisions:
    - Node lookups go through a lowercased-key cache owned by one build
    - Nodes are created before any edge that references them
    - Facts are processed strictly in input order, so output is deterministic
    - Missing lock-file data means "no packages", never an error

Policy:
    - Excluded projects and packages contribute no node and no edge
    - Projects named like *.Tests / *.UnitTests are drawn as test projects
    - Self-references follow SelfReferenceMode
    - With collapsing, a package named like a known project becomes a
      project-to-project edge instead of a package node
"""

import logging
import re
from typing import Iterable, Optional, Sequence

from dotviz.config import BuildConfig
from dotviz.errors import InvalidConfigurationError
from dotviz.models import (
    Color,
    Edge,
    EdgeStyle,
    Graph,
    Node,
    NodeShape,
    PackageFact,
    ProjectFact,
    SelfReferenceMode,
    ServiceFact,
    ServiceLifetime,
    node_key,
)

logger = logging.getLogger(__name__)

TEST_MARKERS = (".tests", ".unittests")

REFERENCE_LABEL = "Reference"
PACKAGE_LABEL = "PackageReference"
SELF_REFERENCE_LABEL = "Self Reference"
COLLAPSED_LABEL = "Pkg → Proj"

LIFETIME_COLORS = {
    ServiceLifetime.SINGLETON: Color.SINGLETON,
    ServiceLifetime.SCOPED: Color.SCOPED,
    ServiceLifetime.TRANSIENT: Color.TRANSIENT,
}


def is_excluded(value: str, patterns: Iterable[re.Pattern]) -> bool:
    """Check whether a project or package id matches any exclude pattern."""
    return any(pattern.match(value) for pattern in patterns)


def is_test_project(project_id: str) -> bool:
    """Check whether a project id looks like a test project."""
    lowered = project_id.lower()
    return any(marker in lowered for marker in TEST_MARKERS)


def handle_self_reference(
    mode: SelfReferenceMode,
    node: Node,
    graph: Graph,
    edge_labels: bool,
) -> None:
    """
    Draw a project's reference to itself according to mode.

    Highlighted self-references are always labelled, even when edge labels
    are off for ordinary edges.

    Raises:
        InvalidConfigurationError: If mode is not a SelfReferenceMode
    """
    if mode is SelfReferenceMode.HIDE:
        return
    if mode is SelfReferenceMode.SHOW:
        graph.add_edge(
            Edge(node.id, node.id, label=SELF_REFERENCE_LABEL if edge_labels else None)
        )
        return
    if mode is SelfReferenceMode.HIGHLIGHT:
        graph.add_edge(
            Edge(
                node.id,
                node.id,
                label=SELF_REFERENCE_LABEL,
                color=Color.SELF_REFERENCE,
                style=EdgeStyle.DOTTED,
            )
        )
        return
    raise InvalidConfigurationError(f"Unknown self-reference mode: {mode!r}")


class GraphBuilder:
    """
    Builds a project dependency Graph from ProjectFacts.

    A builder holds only its configuration; every call to build() starts
    from an empty graph and an empty node cache.

    Usage:
        builder = GraphBuilder(config)
        graph = builder.build(projects)
    """

    def __init__(self, config: Optional[BuildConfig] = None) -> None:
        self.config = config or BuildConfig()
        if not isinstance(self.config.self_reference_mode, SelfReferenceMode):
            raise InvalidConfigurationError(
                f"Unknown self-reference mode: {self.config.self_reference_mode!r}"
            )

    def build(self, projects: Sequence[ProjectFact], graph_id: str = "DotnetVisualizer") -> Graph:
        """
        Build a graph from project facts, in input order.

        Args:
            projects: Project facts, usually from dotviz.msbuild.load_projects
            graph_id: Identifier written in the graph header

        Returns:
            A new Graph that is not touched again by the builder
        """
        config = self.config
        graph = Graph(id=graph_id)
        cache: dict[str, Node] = {}

        def get_node(node_id: str, shape: NodeShape, fill_color: Optional[str]) -> Node:
            key = node_key(node_id)
            node = cache.get(key)
            if node is None:
                node = graph.add_node(Node(node_id, shape=shape, fill_color=fill_color))
                cache[key] = node
            return node

        def project_node(project_id: str) -> Node:
            color = Color.TEST_PROJECT if is_test_project(project_id) else Color.PROJECT
            return get_node(project_id, NodeShape.BOX, color)

        known_projects = self._known_projects(projects)

        for project in projects:
            if is_excluded(project.id, config.exclude):
                logger.debug("Excluded project %s", project.id)
                continue

            source = project_node(project.id)

            for reference in project.references:
                if node_key(reference) == source.key:
                    handle_self_reference(
                        config.self_reference_mode, source, graph, config.edge_labels
                    )
                    continue
                if is_excluded(reference, config.exclude):
                    logger.debug("Excluded reference %s -> %s", project.id, reference)
                    continue
                target = project_node(reference)
                graph.add_edge(
                    Edge(
                        source.id,
                        target.id,
                        label=REFERENCE_LABEL if config.edge_labels else None,
                    )
                )

            if not config.include_packages:
                continue
            if project.packages is None:
                logger.debug("No package data for %s", project.id)
                continue

            for package in project.packages:
                if config.direct_packages_only and not package.is_direct:
                    continue
                if self._package_excluded(package):
                    logger.debug("Excluded package %s", package.id)
                    continue

                # a package named like its own project stays a package node
                match = known_projects.get(node_key(package.name))
                if match is not None and node_key(match) == source.key:
                    match = None
                if config.collapse_matching_packages and match is not None:
                    target = project_node(match)
                    graph.add_edge(
                        Edge(
                            source.id,
                            target.id,
                            label=COLLAPSED_LABEL if config.edge_labels else None,
                            color=Color.COLLAPSED,
                        )
                    )
                    continue

                package_node = get_node(package.id, NodeShape.ELLIPSE, Color.PACKAGE)
                graph.add_edge(
                    Edge(
                        source.id,
                        package_node.id,
                        label=PACKAGE_LABEL if config.edge_labels else None,
                    )
                )

        logger.info(
            "Built graph %s: %d nodes, %d edges", graph.id, graph.node_count, graph.edge_count
        )
        return graph

    def _package_excluded(self, package: PackageFact) -> bool:
        return is_excluded(package.name, self.config.exclude) or is_excluded(
            package.id, self.config.exclude
        )

    def _known_projects(self, projects: Sequence[ProjectFact]) -> dict[str, str]:
        """Map lowercased id to id for every project that can appear in the graph."""
        known: dict[str, str] = {}
        for project in projects:
            if is_excluded(project.id, self.config.exclude):
                continue
            known.setdefault(node_key(project.id), project.id)
            for reference in project.references:
                if not is_excluded(reference, self.config.exclude):
                    known.setdefault(node_key(reference), reference)
        return known


def build_graph(projects: Sequence[ProjectFact], config: Optional[BuildConfig] = None) -> Graph:
    """
    Build a project dependency graph.

    Example:
        >>> graph = build_graph([ProjectFact("A", ["B"]), ProjectFact("B")])
        >>> [edge.target for edge in graph.edges]
        ['B']
    """
    return GraphBuilder(config).build(projects)


def build_service_graph(services: Iterable[ServiceFact]) -> Graph:
    """
    Build a graph of dependency-injection registrations.

    Each registration draws service -> implementation; the implementation
    is filled according to its lifetime. A later registration recolors an
    implementation node that already exists.
    """
    graph = Graph()

    for service in services:
        implementation = service.implementation or "Factory"
        service_node = graph.add_node(Node(service.service))
        impl_node = graph.replace_node(
            Node(implementation, fill_color=LIFETIME_COLORS.get(service.lifetime))
        )
        graph.add_edge(Edge(service_node.id, impl_node.id))

    return graph
