"""typescript-starter configuration.

Typed configuration for a single scaffolding run. Everything the pipeline
needs to know about the project being created lives on ``ProjectConfig``;
where the template comes from is resolved by ``StarterSettings``.
"""

from __future__ import annotations

import os
import re
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Runner(str, Enum):
    """Package manager used to install and script the new project."""

    NPM = "npm"
    YARN = "yarn"


class Placeholders:
    """Sentinel identity values meaning "the user has not configured this"."""

    name = "YOUR_NAME"
    email = "YOUR_EMAIL"
    username = "YOUR_GITHUB_USER_NAME"


DEFAULT_REPO_URL = "https://github.com/bitjson/typescript-starter.git"
DEFAULT_REPO_BRANCH = "main"


class RepoInfo(BaseModel):
    """Where the template is cloned from. A branch of ``"."`` means the remote default."""

    model_config = ConfigDict(frozen=True)

    repo: str = Field(default=DEFAULT_REPO_URL)
    branch: str = Field(default=DEFAULT_REPO_BRANCH)


# ---------------------------------------------------------------------------
# Package-name validation
# ---------------------------------------------------------------------------

_MAX_NAME_LENGTH = 214
_BLACKLISTED_NAMES = frozenset({"node_modules", "favicon.ico"})
_URL_SAFE = re.compile(r"^[a-z0-9\-._~]+$")


def validate_name(name: str) -> str | None:
    """Check *name* against the npm rules for new package names.

    Returns:
        ``None`` when the name is valid, otherwise a human-readable message.
    """
    message = "Name should be in-kebab-case (for npm)"
    if not name or name != name.strip():
        return message
    if len(name) > _MAX_NAME_LENGTH:
        return f"Name must be at most {_MAX_NAME_LENGTH} characters"
    if name.startswith((".", "_")):
        return message
    if name.lower() in _BLACKLISTED_NAMES:
        return f"{name} is not a valid package name"
    if not _URL_SAFE.match(name):
        return message
    return None


# ---------------------------------------------------------------------------
# Project configuration
# ---------------------------------------------------------------------------


class ProjectConfig(BaseModel):
    """Everything the user decided about the project being created.

    Immutable for the duration of a run.
    """

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., description="npm package name and target directory")
    description: str = Field(default="a typescript-starter project")
    full_name: str = Field(default=Placeholders.name)
    email: str = Field(default=Placeholders.email)
    github_username: str = Field(default=Placeholders.username)
    dom_definitions: bool = Field(default=False, description="Keep the DOM lib and hash module")
    node_definitions: bool = Field(
        default=False, description="Keep Node.js types, runtime deps and the async module"
    )
    install: bool = Field(default=True)
    vscode: bool = Field(default=True, description="Keep the .vscode settings directory")
    runner: Runner = Field(default=Runner.NPM)
    working_directory: Path = Field(default_factory=Path.cwd)
    repo_info: RepoInfo = Field(default_factory=RepoInfo)

    @field_validator("project_name")
    @classmethod
    def _check_project_name(cls, value: str) -> str:
        problem = validate_name(value)
        if problem:
            raise ValueError(problem)
        return value

    @property
    def project_path(self) -> Path:
        """Directory the template is cloned into."""
        return self.working_directory / self.project_name


class StarterSettings(BaseModel):
    """Process-level settings that are not specific to one project."""

    repo_info: RepoInfo = Field(default_factory=RepoInfo)

    @classmethod
    def from_env(cls) -> "StarterSettings":
        """Build settings from environment variables.

        Recognised variables (all optional):
            TYPESCRIPT_STARTER_REPO_URL, TYPESCRIPT_STARTER_REPO_BRANCH.
        The branch is only honoured together with the URL.
        """
        repo_url = os.environ.get("TYPESCRIPT_STARTER_REPO_URL")
        if not repo_url:
            return cls()
        branch = os.environ.get("TYPESCRIPT_STARTER_REPO_BRANCH") or DEFAULT_REPO_BRANCH
        return cls(repo_info=RepoInfo(repo=repo_url, branch=branch))
