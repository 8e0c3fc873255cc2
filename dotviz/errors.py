"""
Exceptions raised by dotviz.

Library code raises these and never retries; the CLI is the only place
that catches them and turns them into a message and an exit status.
"""

from typing import Optional


class DotvizError(Exception):
    """Base class for every error dotviz reports to its caller."""


class InvalidConfigurationError(DotvizError):
    """An option value cannot be understood (self-reference mode, scope, pattern)."""


class ProjectNotFoundError(DotvizError, FileNotFoundError):
    """A root path does not resolve to a project or solution file."""


class ProjectLoadError(DotvizError):
    """A project or solution file exists but cannot be parsed."""


class OutputError(DotvizError):
    """A graph file cannot be written."""


class RenderError(DotvizError):
    """
    The external layout renderer failed.

    Attributes:
        stderr: Diagnostic output captured from the renderer
        returncode: Exit status of the renderer, None if it never started
    """

    def __init__(self, message: str, stderr: str = "", returncode: Optional[int] = None) -> None:
        if stderr:
            message = f"{message}\n{stderr.rstrip()}"
        super().__init__(message)
        self.stderr = stderr
        self.returncode = returncode
