"""
Tests for the MSBuild layer.

Tests project file parsing, solution parsing, discovery and lock files.
"""

import pytest
from dotviz.errors import InvalidConfigurationError, ProjectLoadError, ProjectNotFoundError
from dotviz.msbuild import (
    discover_projects,
    load_projects,
    parse_project_file,
    parse_solution_file,
    read_lock_file,
    root_ids,
)
from tests.fixtures import SOLUTION, mini_solution, write_assets, write_project


class TestProjectFiles:
    """Tests for reading project files."""

    def test_sdk_project_items(self, tmp_path):
        path = write_project(tmp_path, "App", references=("Core",), packages=("Serilog",))

        references, packages = parse_project_file(path)

        assert references == [(tmp_path / "Core" / "Core.csproj").resolve()]
        assert packages == ["Serilog"]

    def test_legacy_project_with_namespace(self, tmp_path):
        path = write_project(tmp_path, "Old", references=("Core",), legacy=True)

        references, _ = parse_project_file(path)

        assert [ref.name for ref in references] == ["Core.csproj"]

    def test_malformed_xml(self, tmp_path):
        path = tmp_path / "Broken.csproj"
        path.write_text("<Project><ItemGroup>", encoding="utf-8")

        with pytest.raises(ProjectLoadError):
            parse_project_file(path)


class TestSolutionFiles:
    """Tests for reading solution files."""

    def test_lists_projects_and_skips_folders(self, tmp_path):
        mini_solution(tmp_path)
        sln = tmp_path / "Mini.sln"
        sln.write_text(SOLUTION.format(name="C", path="C\\C.csproj"), encoding="utf-8")

        projects = parse_solution_file(sln)

        assert [p.name for p in projects] == ["A.csproj", "C.csproj"]


class TestLoadProjects:
    """Tests for resolving roots into ProjectFacts."""

    def test_chain_from_single_root(self, tmp_path):
        paths = mini_solution(tmp_path)

        facts = load_projects([paths["A"]])

        assert [fact.id for fact in facts] == ["A", "B", "C"]
        assert [fact.references for fact in facts] == [["B"], ["C"], []]
        assert all(fact.packages is None for fact in facts)

    def test_each_project_once(self, tmp_path):
        paths = mini_solution(tmp_path)

        facts = load_projects([paths["A"], paths["B"], paths["C"]])

        assert [fact.id for fact in facts] == ["A", "B", "C"]

    def test_solution_root(self, tmp_path):
        mini_solution(tmp_path)
        sln = tmp_path / "Mini.sln"
        sln.write_text(SOLUTION.format(name="B", path="B\\B.csproj"), encoding="utf-8")

        facts = load_projects([sln])

        assert [fact.id for fact in facts] == ["A", "B", "C"]
        assert root_ids([sln]) == ["A", "B"]

    def test_missing_reference_is_kept(self, tmp_path):
        path = write_project(tmp_path, "App", references=("Ghost",))

        facts = load_projects([path])

        assert [fact.id for fact in facts] == ["App", "Ghost"]
        assert facts[0].references == ["Ghost"]
        assert facts[1].references == []

    def test_missing_root(self, tmp_path):
        with pytest.raises(ProjectNotFoundError):
            load_projects([tmp_path / "Nope.csproj"])

    def test_missing_root_is_a_file_not_found_error(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_projects([tmp_path / "Nope.sln"])

    def test_unsupported_root(self, tmp_path):
        path = tmp_path / "notes.txt"
        path.write_text("hello", encoding="utf-8")

        with pytest.raises(InvalidConfigurationError):
            load_projects([path])

    def test_packages_read_from_lock_file(self, tmp_path):
        app = write_project(tmp_path, "App", packages=("Serilog",))
        write_assets(app, {"Serilog/3.1.1": "package", "System.Memory/4.5.5": "package"})

        facts = load_projects([app], with_packages=True)

        packages = facts[0].packages
        assert [(p.id, p.is_direct) for p in packages] == [
            ("Serilog:3.1.1", True),
            ("System.Memory:4.5.5", False),
        ]


class TestDiscovery:
    """Tests for folder discovery."""

    def test_finds_nested_projects_sorted(self, tmp_path):
        mini_solution(tmp_path)

        found = discover_projects(tmp_path)

        assert [p.name for p in found] == ["A.csproj", "B.csproj", "C.csproj"]

    def test_missing_folder(self, tmp_path):
        with pytest.raises(ProjectNotFoundError):
            discover_projects(tmp_path / "nope")


class TestLockFile:
    """Tests for project.assets.json reading."""

    def test_no_lock_file(self, tmp_path):
        app = write_project(tmp_path, "App")

        assert read_lock_file(app) is None

    def test_only_package_libraries(self, tmp_path):
        app = write_project(tmp_path, "App")
        write_assets(app, {"Core/1.0.0": "project", "Serilog/3.1.1": "package"})

        packages = read_lock_file(app, ["serilog"])

        assert [(p.name, p.version, p.is_direct) for p in packages] == [("Serilog", "3.1.1", True)]

    def test_framework_dependencies_are_direct(self, tmp_path):
        app = write_project(tmp_path, "App")
        write_assets(
            app,
            {"Polly/8.2.0": "package", "Polly.Core/8.2.0": "package"},
            framework_dependencies=["Polly"],
        )

        packages = read_lock_file(app)

        assert [(p.name, p.is_direct) for p in packages] == [("Polly", True), ("Polly.Core", False)]

    def test_malformed_lock_file_is_missing_data(self, tmp_path):
        app = write_project(tmp_path, "App")
        lock = tmp_path / "App" / "obj" / "project.assets.json"
        lock.parent.mkdir(parents=True)
        lock.write_text("{not json", encoding="utf-8")

        assert read_lock_file(app) is None
