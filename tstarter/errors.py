"""Exception types raised while scaffolding a project."""

from __future__ import annotations

from pathlib import Path


class StarterError(Exception):
    """Base class for every error the starter reports to the user."""


class FatalIOError(StarterError):
    """A required template file is missing or cannot be parsed."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = Path(path)
        super().__init__(f"{message}: {self.path}")


class ManifestError(FatalIOError):
    """``package.json`` could not be read or is not a JSON object."""


class TemplateDriftError(FatalIOError):
    """An expected fragment is missing, so the template no longer matches the edit rules."""

    def __init__(self, path: str | Path, fragment: str, message: str | None = None) -> None:
        self.fragment = fragment
        super().__init__(path, message or f"Expected text {fragment!r} not found")


class ExternalToolError(StarterError):
    """git, npm or yarn failed or could not be started."""

    def __init__(self, message: str, command: str = "", stderr: str = "") -> None:
        self.command = command
        self.stderr = stderr
        super().__init__(message)


class BestEffortError(StarterError):
    """A non-essential operation failed. Reported, never raised into the pipeline."""
