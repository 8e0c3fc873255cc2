"""
Render module for dotviz.

This module serializes graphs to Graphviz DOT and Mermaid flowchart text,
writes them to disk, and drives the Graphviz executable.
"""

from dotviz.render import dot, mermaid
from dotviz.render.graphviz import render_image, write_dot, write_mermaid

__all__ = [
    "dot",
    "mermaid",
    "render_image",
    "write_dot",
    "write_mermaid",
]
