"""
Graph module for dotviz.

This module builds project dependency graphs from raw facts and splits
them into per-root subgraphs.
"""

from dotviz.graph.builder import (
    GraphBuilder,
    build_graph,
    build_service_graph,
    handle_self_reference,
    is_excluded,
    is_test_project,
)
from dotviz.graph.subgraph import extract_per_root, extract_subgraph

__all__ = [
    "GraphBuilder",
    "build_graph",
    "build_service_graph",
    "handle_self_reference",
    "is_excluded",
    "is_test_project",
    "extract_per_root",
    "extract_subgraph",
]
