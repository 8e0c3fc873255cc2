"""
MSBuild module for dotviz.

This module reads .sln / project files and NuGet lock files and turns
them into the ProjectFacts the graph builder consumes.
"""

from dotviz.msbuild.assets import read_lock_file
from dotviz.msbuild.projects import (
    discover_projects,
    expand_roots,
    load_projects,
    parse_project_file,
    parse_solution_file,
    project_id,
    root_ids,
)

__all__ = [
    "read_lock_file",
    "discover_projects",
    "expand_roots",
    "load_projects",
    "parse_project_file",
    "parse_solution_file",
    "project_id",
    "root_ids",
]
