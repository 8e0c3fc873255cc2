"""
Graphviz DOT serializer.

Output shape:

    digraph "DotnetVisualizer" {
    	rankdir="LR";
    	"A" [shape="box", style="filled", fillcolor="lightblue"];
    	"A" -> "B" [label="Reference"];
    }

Every identifier and attribute value is double-quoted, so project and
package ids containing dots, colons or dashes need no special handling.
"""

from typing import Optional

from dotviz.models import Edge, EdgeStyle, Graph, Node


def quote(value: str) -> str:
    """Quote a DOT identifier or attribute value."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


def _attributes(pairs: list[tuple[str, Optional[str]]]) -> str:
    present = [f"{name}={quote(value)}" for name, value in pairs if value is not None]
    if not present:
        return ""
    return f" [{', '.join(present)}]"


def _node_statement(node: Node) -> str:
    pairs = [("shape", node.shape.value)]
    if node.filled:
        pairs += [("style", "filled"), ("fillcolor", node.fill_color)]
    return f"\t{quote(node.id)}{_attributes(pairs)};"


def _edge_statement(edge: Edge, connector: str) -> str:
    pairs = [
        ("label", edge.label),
        ("color", edge.color),
        ("style", EdgeStyle.DOTTED.value if edge.style is EdgeStyle.DOTTED else None),
    ]
    return f"\t{quote(edge.source)} {connector} {quote(edge.target)}{_attributes(pairs)};"


def serialize(graph: Graph) -> str:
    """
    Render a graph as DOT text.

    Nodes and then edges are written in the graph's insertion order, so the
    same graph always produces the same text.
    """
    keyword, connector = ("digraph", "->") if graph.directed else ("graph", "--")
    lines = [f"{keyword} {quote(graph.id)} {{"]
    if graph.rank_dir:
        lines.append(f"\trankdir={quote(graph.rank_dir)};")
    lines.extend(_node_statement(node) for node in graph.nodes)
    lines.extend(_edge_statement(edge, connector) for edge in graph.edges)
    lines.append("}")
    return "\n".join(lines) + "\n"
