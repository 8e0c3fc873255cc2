"""
Build Configuration for dotviz

This module turns raw option values into a validated BuildConfig.

Design Decisions:
    - Exclude patterns are compiled once, here, into anchored regexes
    - Matching is case-insensitive, like MSBuild project names
    - Every invalid value fails with InvalidConfigurationError before
      any graph work begins
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

from dotviz.errors import InvalidConfigurationError
from dotviz.models import SelfReferenceMode

PACKAGE_SCOPES = ("direct", "all")
DEFAULT_OUTPUT = "deps.dot"


@dataclass(frozen=True)
class BuildConfig:
    """
    Policy applied by the graph builder.

    Attributes:
        include_packages: Add package nodes from lock files
        direct_packages_only: Skip transitive packages
        edge_labels: Label project and package edges
        exclude: Compiled exclude patterns
        collapse_matching_packages: Draw a package named like a project as a
            project-to-project edge instead of a package node
        self_reference_mode: How self-references are drawn
    """

    include_packages: bool = False
    direct_packages_only: bool = True
    edge_labels: bool = False
    exclude: tuple[re.Pattern, ...] = ()
    collapse_matching_packages: bool = False
    self_reference_mode: SelfReferenceMode = SelfReferenceMode.HIDE


def compile_excludes(raw: Optional[str]) -> tuple[re.Pattern, ...]:
    """
    Compile a comma-separated list of glob patterns.

    "*" matches any run of characters and "?" any single character; every
    other character matches itself. Each pattern must match the whole value.

    Args:
        raw: Patterns such as "*.Tests,Legacy?"

    Returns:
        One case-insensitive anchored regex per non-empty pattern

    Raises:
        InvalidConfigurationError: If a pattern contains control characters

    Example:
        >>> [p.pattern for p in compile_excludes("Foo*, Bar")]
        ['^Foo.*$', '^Bar$']
    """
    if raw is None or not raw.strip():
        return ()

    patterns = []
    for part in raw.split(","):
        glob = part.strip()
        if not glob:
            continue
        if not glob.isprintable():
            raise InvalidConfigurationError(f"Malformed exclude pattern: {glob!r}")
        expr = re.escape(glob).replace(r"\*", ".*").replace(r"\?", ".")
        patterns.append(re.compile(f"^{expr}$", re.IGNORECASE))
    return tuple(patterns)


def parse_self_reference_mode(value: Union[str, SelfReferenceMode, None]) -> SelfReferenceMode:
    """
    Parse a self-reference mode name, ignoring case.

    Raises:
        InvalidConfigurationError: For anything but Hide, Show or Highlight
    """
    if value is None:
        return SelfReferenceMode.HIDE
    if isinstance(value, SelfReferenceMode):
        return value
    for mode in SelfReferenceMode:
        if mode.value.lower() == str(value).strip().lower():
            return mode
    choices = ", ".join(mode.value for mode in SelfReferenceMode)
    raise InvalidConfigurationError(f"Unknown self-reference mode {value!r} (expected {choices})")


def parse_package_scope(value: Optional[str]) -> bool:
    """
    Parse a package scope.

    Returns:
        True when only direct packages are wanted

    Raises:
        InvalidConfigurationError: For anything but "direct" or "all"
    """
    if value is None:
        return True
    scope = value.strip().lower()
    if scope not in PACKAGE_SCOPES:
        raise InvalidConfigurationError(
            f"Unknown package scope {value!r} (expected {' or '.join(PACKAGE_SCOPES)})"
        )
    return scope == "direct"


def make_config(
    include_packages: bool = False,
    package_scope: Optional[str] = "direct",
    edge_labels: bool = False,
    exclude: Optional[str] = None,
    collapse_matching: bool = False,
    self_reference: Union[str, SelfReferenceMode, None] = None,
) -> BuildConfig:
    """Build a BuildConfig from raw option values."""
    return BuildConfig(
        include_packages=include_packages,
        direct_packages_only=parse_package_scope(package_scope),
        edge_labels=edge_labels,
        exclude=compile_excludes(exclude),
        collapse_matching_packages=collapse_matching,
        self_reference_mode=parse_self_reference_mode(self_reference),
    )


def determine_output_path(
    output: Optional[Union[str, Path]],
    inputs: Sequence[Union[str, Path]],
    folder: Optional[Union[str, Path]] = None,
) -> Path:
    """
    Pick the DOT file a single-graph run writes to.

    An explicit output wins, then the first input with a ".dot" suffix,
    then "<folder>/<folder name>.dot", then "deps.dot".
    """
    if output is not None and str(output).strip():
        return Path(output)
    if inputs:
        return Path(inputs[0]).with_suffix(".dot")
    if folder is not None and str(folder).strip():
        folder = Path(folder)
        return folder / f"{folder.resolve().name}.dot"
    return Path(DEFAULT_OUTPUT)
