"""
MSBuild Project Discovery for dotviz

This module resolves solution and project files into ProjectFacts: the
project's name, the projects it references, and optionally its packages.

Design Decisions:
    - Reads project XML directly instead of evaluating MSBuild
    - Namespace-agnostic, so both SDK-style and legacy project files work
    - Follows <ProjectReference/> items breadth-first from the roots
    - Each project is emitted once, in discovery order

Limitation:
    Conditions, imports and Directory.Build.props are not evaluated; only
    items written literally in the project file are seen.
"""

import logging
import re
import xml.etree.ElementTree as ET
from collections import deque
from pathlib import Path, PureWindowsPath
from typing import Iterable, Union

from dotviz.errors import InvalidConfigurationError, ProjectLoadError, ProjectNotFoundError
from dotviz.models import ProjectFact, node_key
from dotviz.msbuild.assets import read_lock_file

logger = logging.getLogger(__name__)

PROJECT_SUFFIXES = (".csproj", ".fsproj", ".vbproj")
SOLUTION_SUFFIX = ".sln"

# Project("{FAE04EC0-...}") = "Name", "src\Name\Name.csproj", "{GUID}"
_SLN_PROJECT = re.compile(r'^Project\("[^"]*"\)\s*=\s*"[^"]*"\s*,\s*"(?P<path>[^"]+)"', re.MULTILINE)


def project_id(path: Union[str, Path]) -> str:
    """A project's id is its file name without extension."""
    return Path(path).stem


def discover_projects(folder: Union[str, Path]) -> list[Path]:
    """
    Recursively find project files under a folder.

    Raises:
        ProjectNotFoundError: If the folder does not exist
    """
    folder = Path(folder)
    if not folder.is_dir():
        raise ProjectNotFoundError(f"Folder not found: {folder}")
    found = [
        path
        for suffix in PROJECT_SUFFIXES
        for path in folder.rglob(f"*{suffix}")
        if path.is_file()
    ]
    return sorted(found)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _resolve_include(base: Path, include: str) -> Path:
    """Resolve an Include attribute written with Windows separators."""
    relative = Path(*PureWindowsPath(include).parts)
    return (base.parent / relative).resolve()


def parse_project_file(path: Union[str, Path]) -> tuple[list[Path], list[str]]:
    """
    Read the literal items of a project file.

    Returns:
        (referenced project paths, <PackageReference/> names)

    Raises:
        ProjectLoadError: If the file is not well-formed XML
    """
    path = Path(path)
    try:
        root = ET.parse(path).getroot()
    except ET.ParseError as e:
        raise ProjectLoadError(f"Cannot parse project file {path}: {e}") from e

    references: list[Path] = []
    packages: list[str] = []
    for element in root.iter():
        name = _local_name(element.tag)
        include = element.get("Include")
        if not include:
            continue
        if name == "ProjectReference":
            references.append(_resolve_include(path, include))
        elif name == "PackageReference":
            packages.append(include.strip())
    return references, packages


def parse_solution_file(path: Union[str, Path]) -> list[Path]:
    """
    List the project files a solution contains.

    Solution folders and non-project entries are skipped.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig", errors="replace")
    except OSError as e:
        raise ProjectLoadError(f"Cannot read solution file {path}: {e.strerror or e}") from e
    projects = []
    for match in _SLN_PROJECT.finditer(text):
        candidate = _resolve_include(path, match.group("path"))
        if candidate.suffix.lower() in PROJECT_SUFFIXES:
            projects.append(candidate)
    return projects


def expand_roots(roots: Iterable[Union[str, Path]]) -> list[Path]:
    """
    Turn solution and project paths into a list of project files.

    Raises:
        ProjectNotFoundError: If a root does not exist
        InvalidConfigurationError: If a root is neither a solution nor a project
    """
    expanded: list[Path] = []
    for root in roots:
        path = Path(root)
        if not path.is_file():
            raise ProjectNotFoundError(f"Project or solution not found: {path}")
        suffix = path.suffix.lower()
        if suffix == SOLUTION_SUFFIX:
            expanded.extend(parse_solution_file(path))
        elif suffix in PROJECT_SUFFIXES:
            expanded.append(path.resolve())
        else:
            raise InvalidConfigurationError(
                f"Unsupported input {path}: expected a .sln or project file"
            )
    return expanded


def load_projects(
    roots: Iterable[Union[str, Path]],
    with_packages: bool = False,
) -> list[ProjectFact]:
    """
    Resolve roots into the full set of reachable ProjectFacts.

    Args:
        roots: Solution or project files
        with_packages: Read obj/project.assets.json for each project

    Returns:
        One ProjectFact per project, roots first, then references in
        breadth-first order

    Example:
        >>> facts = load_projects(["src/App/App.csproj"])
        >>> [fact.id for fact in facts]
        ['App', 'Core', 'Utils']
    """
    queue = deque(expand_roots(roots))
    seen: set[str] = set()
    facts: list[ProjectFact] = []

    while queue:
        path = queue.popleft()
        key = node_key(str(path))
        if key in seen:
            continue
        seen.add(key)

        fact = ProjectFact(id=project_id(path), path=str(path))
        facts.append(fact)

        if not path.is_file():
            logger.warning("Referenced project %s does not exist", path)
            continue

        references, package_names = parse_project_file(path)
        fact.references = [project_id(reference) for reference in references]
        queue.extend(references)

        if with_packages:
            fact.packages = read_lock_file(path, package_names)

    logger.info("Loaded %d project(s)", len(facts))
    return facts


def root_ids(roots: Iterable[Union[str, Path]]) -> list[str]:
    """Project ids of the roots, with solutions expanded."""
    return [project_id(path) for path in expand_roots(roots)]

