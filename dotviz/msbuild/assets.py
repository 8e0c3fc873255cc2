"""
NuGet lock-file reader.

Reads obj/project.assets.json, the file `dotnet restore` writes next to
each project, and turns its package libraries into PackageFacts.

A project that has not been restored has no lock file; that is reported
as None ("no package data"), never as an error.
"""

import json
import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from dotviz.models import PackageFact

logger = logging.getLogger(__name__)

LOCK_FILE = Path("obj") / "project.assets.json"


def lock_file_path(project_path: Union[str, Path]) -> Path:
    return Path(project_path).parent / LOCK_FILE


def _framework_dependencies(assets: dict) -> set[str]:
    """Lowercased names declared under project.frameworks.*.dependencies."""
    names: set[str] = set()
    frameworks = assets.get("project", {}).get("frameworks", {}) or {}
    for framework in frameworks.values():
        for name in (framework or {}).get("dependencies", {}) or {}:
            names.add(name.lower())
    return names


def read_lock_file(
    project_path: Union[str, Path],
    direct_names: Iterable[str] = (),
) -> Optional[list[PackageFact]]:
    """
    Read the resolved packages of a project.

    A package is direct when it is one of direct_names (the project's own
    <PackageReference/> items) or a dependency declared by one of the
    project's target frameworks; everything else is transitive.

    Args:
        project_path: The project file
        direct_names: Package names referenced by the project itself

    Returns:
        Packages in lock-file order, or None when no usable lock file exists
    """
    path = lock_file_path(project_path)
    if not path.is_file():
        logger.debug("No lock file for %s", project_path)
        return None

    try:
        assets = json.loads(path.read_text(encoding="utf-8-sig"))
    except (OSError, ValueError) as e:
        logger.warning("Ignoring unreadable lock file %s: %s", path, e)
        return None
    if not isinstance(assets, dict):
        logger.warning("Ignoring malformed lock file %s", path)
        return None

    direct = {name.lower() for name in direct_names} | _framework_dependencies(assets)

    packages = []
    for key, library in (assets.get("libraries") or {}).items():
        if not isinstance(library, dict) or library.get("type") != "package":
            continue
        name, _, version = key.partition("/")
        packages.append(
            PackageFact(name=name, version=version, is_direct=name.lower() in direct)
        )
    return packages
