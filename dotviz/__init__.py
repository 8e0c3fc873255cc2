"""
dotviz

Core library for turning .NET project and package references into
Graphviz DOT and Mermaid dependency graphs.
"""

from dotviz.config import BuildConfig
from dotviz.errors import DotvizError
from dotviz.models import (
    Edge,
    EdgeStyle,
    Graph,
    Node,
    NodeShape,
    PackageFact,
    ProjectFact,
    SelfReferenceMode,
)

__all__ = [
    "BuildConfig",
    "DotvizError",
    "Edge",
    "EdgeStyle",
    "Graph",
    "Node",
    "NodeShape",
    "PackageFact",
    "ProjectFact",
    "SelfReferenceMode",
]
__version__ = "0.1.0"
