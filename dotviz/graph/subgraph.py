"""
Per-root subgraph extraction.

Given a full project graph and a list of root projects, computes one
independent subgraph per root: every node reachable from the root through
outgoing edges, and every edge of the full graph between two such nodes.
The full graph is never modified.
"""

import logging
from typing import Sequence

import networkx as nx

from dotviz.models import Graph, node_key

logger = logging.getLogger(__name__)


def reachable_keys(full: Graph, root_id: str) -> set[str]:
    """
    Return the lowercased ids reachable from root_id, root included.

    Traversal is breadth-first over outgoing edges; cycles and self-loops
    terminate because visited nodes are never enqueued twice.
    """
    view = full.to_networkx()
    root = node_key(root_id)
    if root not in view:
        return set()
    return set(nx.bfs_tree(view, root).nodes)


def extract_subgraph(full: Graph, root_id: str) -> Graph:
    """
    Extract the reachability-closed subgraph of one root.

    Nodes and edges keep their relative order from the full graph.
    """
    visited = reachable_keys(full, root_id)
    subgraph = full.copy_empty()
    for node in full.nodes:
        if node.key in visited:
            subgraph.add_node(node)
    for edge in full.edges:
        if node_key(edge.source) in visited and node_key(edge.target) in visited:
            subgraph.add_edge(edge)
    return subgraph


def extract_per_root(full: Graph, root_ids: Sequence[str]) -> list[tuple[str, Graph]]:
    """
    Extract one subgraph per root.

    Roots that are not nodes of the full graph (for example because they
    were excluded) are left out of the result.

    Returns:
        (root id as stored in the graph, subgraph) pairs in root order
    """
    results = []
    for root_id in root_ids:
        root = full.get_node(root_id)
        if root is None:
            logger.debug("Root %s is not in graph %s, skipping", root_id, full.id)
            continue
        results.append((root.id, extract_subgraph(full, root.id)))
    return results
