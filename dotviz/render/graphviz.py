"""
File output and Graphviz invocation.

Serializers are pure; this module is where text meets the disk and where
the external `dot` executable is run to produce an image.
"""

import logging
import subprocess
from pathlib import Path
from typing import Union

from dotviz.errors import OutputError, RenderError
from dotviz.models import Graph
from dotviz.render import dot, mermaid

logger = logging.getLogger(__name__)

DEFAULT_TOOL = "dot"
DEFAULT_FORMAT = "svg"


def _write_text(text: str, path: Union[str, Path]) -> Path:
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise OutputError(f"Cannot write {path}: {e.strerror or e}") from e
    logger.debug("Wrote %s", path)
    return path


def write_dot(graph: Graph, path: Union[str, Path]) -> Path:
    """Write a graph as a .dot file, creating parent directories."""
    return _write_text(dot.serialize(graph), path)


def write_mermaid(graph: Graph, path: Union[str, Path]) -> Path:
    """Write a graph as a Mermaid .mmd file, creating parent directories."""
    return _write_text(mermaid.serialize(graph), path)


def render_image(
    dot_path: Union[str, Path],
    image_path: Union[str, Path],
    fmt: str = DEFAULT_FORMAT,
    tool: str = DEFAULT_TOOL,
) -> Path:
    """
    Run `<tool> -T<fmt> <dot_path> -o <image_path>`.

    Args:
        dot_path: Existing DOT file
        image_path: Image file to produce
        fmt: Graphviz output format (svg, png, pdf, ...)
        tool: Graphviz layout executable

    Returns:
        The image path

    Raises:
        RenderError: If the tool is missing or exits non-zero; the error
            carries the tool's standard error output
    """
    image_path = Path(image_path)
    image_path.parent.mkdir(parents=True, exist_ok=True)
    cmd = [tool, f"-T{fmt}", str(dot_path), "-o", str(image_path)]
    logger.debug("Running %s", " ".join(cmd))

    try:
        proc = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise RenderError(f"Graphviz executable {tool!r} not found") from e

    if proc.returncode != 0:
        raise RenderError(
            f"Graphviz failed with exit code {proc.returncode}",
            stderr=proc.stderr or "",
            returncode=proc.returncode,
        )
    return image_path
