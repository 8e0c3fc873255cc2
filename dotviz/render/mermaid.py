"""
Mermaid flowchart serializer.

Boxes are written as id["label"], ellipses as id(("label")), solid edges
with --> and dotted edges with -.->; a label goes between pipes right
after the connector.

Mermaid node ids are restricted to ASCII letters, digits and "_". Any
other character is replaced by "_" and clashing ids get a numeric suffix;
ids that Mermaid would misread ("end", a leading "o" or "x") get an "n_"
prefix. The quoted label always shows the original identifier.
"""

import re

from dotviz.models import Edge, EdgeStyle, Graph, Node, NodeShape, node_key

HEADER = "flowchart LR"

_UNSAFE = re.compile(r"[^A-Za-z0-9_]")

# "end" closes a subgraph; a leading o/x right after a connector reads as
# a circle or cross arrow head.
_AMBIGUOUS = re.compile(r"^(end$|[ox])", re.IGNORECASE)
RESERVED_PREFIX = "n_"

CONNECTORS = {
    EdgeStyle.SOLID: "-->",
    EdgeStyle.DOTTED: "-.->",
}


def escape_label(text: str) -> str:
    return text.replace('"', "#quot;").replace("|", "#124;").replace("\n", " ")


def assign_ids(graph: Graph) -> dict[str, str]:
    """Map each node key to a unique Mermaid-safe id, in node order."""
    ids: dict[str, str] = {}
    taken: set[str] = set()
    for node in graph.nodes:
        base = _UNSAFE.sub("_", node.id) or "_"
        if _AMBIGUOUS.match(base):
            base = f"{RESERVED_PREFIX}{base}"
        candidate, suffix = base, 2
        while candidate in taken:
            candidate = f"{base}_{suffix}"
            suffix += 1
        taken.add(candidate)
        ids[node.key] = candidate
    return ids


def _node_line(node: Node, ids: dict[str, str]) -> str:
    label = escape_label(node.id)
    if node.shape is NodeShape.ELLIPSE:
        return f'    {ids[node.key]}(("{label}"))'
    return f'    {ids[node.key]}["{label}"]'


def _edge_line(edge: Edge, ids: dict[str, str]) -> str:
    connector = CONNECTORS[edge.style]
    if edge.label:
        connector = f"{connector}|{escape_label(edge.label)}|"
    return f"    {ids[node_key(edge.source)]}{connector}{ids[node_key(edge.target)]}"


def serialize(graph: Graph) -> str:
    """
    Render a graph as a left-to-right Mermaid flowchart.

    Example:
        >>> from dotviz.models import Edge, Node
        >>> g = Graph(nodes=[Node("A"), Node("B")])
        >>> g.add_edge(Edge("A", "B"))
        >>> print(serialize(g), end="")
        flowchart LR
            A["A"]
            B["B"]
            A-->B
    """
    ids = assign_ids(graph)
    lines = [HEADER]
    lines.extend(_node_line(node, ids) for node in graph.nodes)
    lines.extend(_edge_line(edge, ids) for edge in graph.edges)
    return "\n".join(lines) + "\n"
