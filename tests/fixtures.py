"""
Test fixtures for dotviz.

This module provides sample project facts, project file contents and a
helper that lays out a small solution on disk.
"""

import json
from pathlib import Path
from typing import Optional

from dotviz.models import PackageFact, ProjectFact

# A -> B -> C, project references only
CHAIN = [
    ProjectFact("A", ["B"]),
    ProjectFact("B", ["C"]),
    ProjectFact("C"),
]

# An app with a test project and packages, one of which shares a project's name
WITH_PACKAGES = [
    ProjectFact(
        "App",
        ["Core"],
        packages=[
            PackageFact("Newtonsoft.Json", "13.0.3", is_direct=True),
            PackageFact("System.Memory", "4.5.5", is_direct=False),
            PackageFact("Core", "1.2.0", is_direct=True),
        ],
    ),
    ProjectFact("Core", [], packages=[PackageFact("Newtonsoft.Json", "13.0.3")]),
    ProjectFact("App.Tests", ["App"], packages=None),
]

SDK_PROJECT = """<Project Sdk="Microsoft.NET.Sdk">
  <PropertyGroup>
    <TargetFramework>net8.0</TargetFramework>
  </PropertyGroup>
{items}
</Project>
"""

LEGACY_PROJECT = """<?xml version="1.0" encoding="utf-8"?>
<Project ToolsVersion="15.0" xmlns="http://schemas.microsoft.com/developer/msbuild/2003">
  <ItemGroup>
{items}
  </ItemGroup>
</Project>
"""

SOLUTION = """
Microsoft Visual Studio Solution File, Format Version 12.00
# Visual Studio Version 17
Project("{{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}}") = "A", "A\\A.csproj", "{{11111111-1111-1111-1111-111111111111}}"
EndProject
Project("{{2150E333-8FDC-42A3-9474-1A3956D46DE8}}") = "Solution Items", "Solution Items", "{{22222222-2222-2222-2222-222222222222}}"
EndProject
Project("{{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}}") = "{name}", "{path}", "{{33333333-3333-3333-3333-333333333333}}"
EndProject
Global
EndGlobal
"""


def write_project(
    root: Path,
    name: str,
    references: tuple[str, ...] = (),
    packages: tuple[str, ...] = (),
    legacy: bool = False,
) -> Path:
    """Write <root>/<name>/<name>.csproj referencing sibling projects."""
    items = [
        f'    <ProjectReference Include="..\\{ref}\\{ref}.csproj" />' for ref in references
    ] + [f'    <PackageReference Include="{pkg}" Version="1.0.0" />' for pkg in packages]

    if legacy:
        content = LEGACY_PROJECT.format(items="\n".join(items))
    else:
        body = "  <ItemGroup>\n" + "\n".join(items) + "\n  </ItemGroup>" if items else ""
        content = SDK_PROJECT.format(items=body)

    path = root / name / f"{name}.csproj"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def write_assets(
    project: Path,
    libraries: dict[str, str],
    framework_dependencies: Optional[list[str]] = None,
) -> Path:
    """Write obj/project.assets.json with the given "Name/Version": type entries."""
    assets = {
        "version": 3,
        "libraries": {key: {"type": kind, "path": key.lower()} for key, kind in libraries.items()},
        "project": {
            "frameworks": {
                "net8.0": {
                    "dependencies": {
                        name: {"target": "Package", "version": "[1.0.0, )"}
                        for name in framework_dependencies or []
                    }
                }
            }
        },
    }
    path = project.parent / "obj" / "project.assets.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(assets), encoding="utf-8")
    return path


def mini_solution(root: Path) -> dict[str, Path]:
    """Lay out A -> B -> C on disk, like a freshly created solution."""
    c = write_project(root, "C")
    b = write_project(root, "B", references=("C",))
    a = write_project(root, "A", references=("B",))
    return {"A": a, "B": b, "C": c}
