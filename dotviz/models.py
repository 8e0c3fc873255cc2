"""
Core Data Models for dotviz

This module defines the canonical data structures used throughout the system:
- Node / Edge / Graph: The renderable dependency graph
- ProjectFact / PackageFact: Raw facts supplied by the MSBuild layer
- ServiceFact: A dependency-injection registration
- NodeShape / EdgeStyle / SelfReferenceMode / ServiceLifetime: Closed choices

These models are designed to be:
- Immutable where possible (nodes and edges are frozen dataclasses)
- Independent of any output format
- Keyed case-insensitively, the way MSBuild treats project names
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional

import networkx as nx


class NodeShape(Enum):
    """Shape used to draw a node."""

    BOX = "box"
    ELLIPSE = "ellipse"


class EdgeStyle(Enum):
    """Stroke style used to draw an edge."""

    SOLID = "solid"
    DOTTED = "dotted"


class SelfReferenceMode(Enum):
    """
    Describes how a project that references itself is drawn.

    States:
        HIDE: Do not draw the edge.
        SHOW: Draw a standard self-loop.
        HIGHLIGHT: Draw a labelled, colored, dotted self-loop.
    """

    HIDE = "Hide"
    SHOW = "Show"
    HIGHLIGHT = "Highlight"


class ServiceLifetime(Enum):
    """Lifetime of a dependency-injection registration."""

    SINGLETON = "Singleton"
    SCOPED = "Scoped"
    TRANSIENT = "Transient"


class Color:
    """Color names understood by both Graphviz and Mermaid."""

    PROJECT = "lightblue"
    TEST_PROJECT = "khaki"
    PACKAGE = "lightgray"
    SELF_REFERENCE = "red"
    COLLAPSED = "blue"
    SINGLETON = "lightgreen"
    SCOPED = "gold"
    TRANSIENT = "lightpink"


def node_key(node_id: str) -> str:
    """Normalize an identifier for case-insensitive lookups."""
    return node_id.lower()


@dataclass(frozen=True)
class Node:
    """
    A single vertex of the dependency graph.

    Attributes:
        id: Identifier, also used as the display label
        shape: How the node is drawn
        fill_color: Fill color, None for an unstyled node
    """

    id: str
    shape: NodeShape = NodeShape.BOX
    fill_color: Optional[str] = None

    @property
    def key(self) -> str:
        return node_key(self.id)

    @property
    def filled(self) -> bool:
        """A node is drawn filled whenever it carries a fill color."""
        return self.fill_color is not None


@dataclass(frozen=True)
class Edge:
    """
    A directed edge between two nodes of the same graph.

    Attributes:
        source: Identifier of the source node
        target: Identifier of the target node
        label: Optional text drawn on the edge
        color: Optional stroke color
        style: Stroke style
    """

    source: str
    target: str
    label: Optional[str] = None
    color: Optional[str] = None
    style: EdgeStyle = EdgeStyle.SOLID

    @property
    def is_self_loop(self) -> bool:
        return node_key(self.source) == node_key(self.target)


@dataclass
class Graph:
    """
    An ordered, renderable dependency graph.

    Nodes keep their insertion order and are deduplicated case-insensitively.
    Edges keep their insertion order and may repeat the same pair, since a
    project reference and a collapsed package reference are distinct edges.

    Invariants:
        - No two nodes share the same lowercased id
        - Every edge endpoint is a node of this graph
    """

    id: str = "DotnetVisualizer"
    directed: bool = True
    rank_dir: str = "LR"
    nodes: list[Node] = field(default_factory=list)
    edges: list[Edge] = field(default_factory=list)
    _index: dict[str, Node] = field(default_factory=dict, init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        """Index nodes passed to the constructor, dropping duplicates."""
        nodes, self.nodes = self.nodes, []
        for node in nodes:
            self.add_node(node)

    @property
    def node_count(self) -> int:
        return len(self.nodes)

    @property
    def edge_count(self) -> int:
        return len(self.edges)

    def add_node(self, node: Node) -> Node:
        """
        Add a node unless one with the same case-insensitive id exists.

        Returns:
            The node stored in the graph; the first-seen node wins.
        """
        existing = self._index.get(node.key)
        if existing is not None:
            return existing
        self._index[node.key] = node
        self.nodes.append(node)
        return node

    def replace_node(self, node: Node) -> Node:
        """Overwrite the styling of an existing node, keeping its position."""
        existing = self._index.get(node.key)
        if existing is None:
            return self.add_node(node)
        replaced = Node(id=existing.id, shape=node.shape, fill_color=node.fill_color)
        self.nodes[self.nodes.index(existing)] = replaced
        self._index[node.key] = replaced
        return replaced

    def get_node(self, node_id: str) -> Optional[Node]:
        return self._index.get(node_key(node_id))

    def has_node(self, node_id: str) -> bool:
        return node_key(node_id) in self._index

    def add_edge(self, edge: Edge) -> None:
        """
        Append an edge.

        Raises:
            ValueError: If either endpoint is not a node of this graph
        """
        for endpoint in (edge.source, edge.target):
            if not self.has_node(endpoint):
                raise ValueError(f"Edge endpoint {endpoint!r} is not a node of graph {self.id!r}")
        self.edges.append(edge)

    def edges_from(self, node_id: str) -> Iterator[Edge]:
        """Yield the outgoing edges of a node, in insertion order."""
        key = node_key(node_id)
        for edge in self.edges:
            if node_key(edge.source) == key:
                yield edge

    def copy_empty(self) -> "Graph":
        """Return a new graph with the same header and no content."""
        return Graph(id=self.id, directed=self.directed, rank_dir=self.rank_dir)

    def to_networkx(self) -> nx.MultiDiGraph:
        """
        Build a NetworkX view of the graph keyed by lowercased node id.

        The original id is kept in the "id" node attribute.
        """
        view = nx.MultiDiGraph()
        for node in self.nodes:
            view.add_node(node.key, id=node.id)
        for edge in self.edges:
            view.add_edge(node_key(edge.source), node_key(edge.target), label=edge.label)
        return view


@dataclass(frozen=True)
class PackageFact:
    """
    A resolved package of a project, as read from its lock file.

    Attributes:
        name: Package id, e.g. "Newtonsoft.Json"
        version: Resolved version, e.g. "13.0.3"
        is_direct: True for a <PackageReference/> of the project itself
    """

    name: str
    version: str
    is_direct: bool = True

    @property
    def id(self) -> str:
        """Composite identifier used as the package node id."""
        return f"{self.name}:{self.version}"


@dataclass
class ProjectFact:
    """
    A project and the raw facts the graph is built from.

    Attributes:
        id: Project name (file name without extension)
        references: Ids of referenced projects, in declaration order
        packages: Resolved packages, None when no lock file data exists
        path: Project file the facts came from, if any
    """

    id: str
    references: list[str] = field(default_factory=list)
    packages: Optional[list[PackageFact]] = None
    path: Optional[str] = None


@dataclass(frozen=True)
class ServiceFact:
    """
    A dependency-injection registration.

    Attributes:
        service: Full name of the service type
        implementation: Full name of the implementation, None for factories
        lifetime: Registration lifetime
    """

    service: str
    implementation: Optional[str] = None
    lifetime: ServiceLifetime = ServiceLifetime.TRANSIENT
