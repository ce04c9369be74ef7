"""External collaborators: git, the package manager and the GitHub API.

``Tasks`` bundles every operation that leaves the process so the pipeline can
be driven with fakes in tests.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import httpx

from .config import Placeholders, RepoInfo, Runner
from .errors import ExternalToolError
from .utils import run_command, step

GIT_INSTALL_URL = "https://git-scm.com/book/en/v2/Getting-Started-Installing-Git"
GITHUB_USER_SEARCH_URL = "https://api.github.com/search/users"
TEMPLATE_SLUG = "bitjson/typescript-starter"


@dataclass
class CloneResult:
    """Outcome of cloning the template."""

    commit_hash: str
    git_history_dir: Path


@dataclass
class UserInfo:
    """Identity read from the user's global git config."""

    git_name: str
    git_email: str


async def _run_git(*args: str, cwd: str | Path | None = None, capture: bool = True) -> str:
    """Run a git command and return its stdout.

    Raises ExternalToolError if git is missing or exits non-zero.
    """
    cmd = ["git", *args]
    cmd_str = " ".join(cmd)
    try:
        returncode, stdout, stderr = await run_command(cmd, cwd=cwd, capture=capture)
    except FileNotFoundError:
        raise GitNotInstalledError(
            "Git is not installed on your PATH. Please install Git and try again.\n\n"
            f"For more information, visit: {GIT_INSTALL_URL}",
            command=cmd_str,
        ) from None
    if returncode != 0:
        raise ExternalToolError(
            f"Git command failed (exit {returncode}): {cmd_str}\n{stderr}",
            command=cmd_str,
            stderr=stderr,
        )
    return stdout


class GitNotInstalledError(ExternalToolError):
    """The ``git`` executable could not be found."""


class Tasks:
    """Default implementations of the scaffolding collaborators."""

    def __init__(self, http_client: httpx.AsyncClient | None = None) -> None:
        self._http_client = http_client

    async def clone_repo(
        self, repo_info: RepoInfo, working_directory: str | Path, project_name: str
    ) -> CloneResult:
        """Shallow-clone the template into ``<working_directory>/<project_name>``.

        The caller owns the returned ``.git`` directory and is expected to delete it.
        """
        project_dir = Path(working_directory) / project_name
        git_history_dir = project_dir / ".git"
        args = ["clone", "--depth=1"]
        if repo_info.branch != ".":
            args.append(f"--branch={repo_info.branch}")
        args += [repo_info.repo, project_name]

        try:
            await _run_git(*args, cwd=working_directory, capture=False)
        except GitNotInstalledError:
            raise
        except ExternalToolError as exc:
            raise ExternalToolError("Git clone failed.", command=exc.command) from exc

        try:
            commit_hash = await _run_git(
                f"--git-dir={git_history_dir}", "rev-parse", "HEAD", cwd=working_directory
            )
        except ExternalToolError as exc:
            raise ExternalToolError("Git rev-parse failed.", command=exc.command) from exc
        return CloneResult(commit_hash=commit_hash, git_history_dir=git_history_dir)

    async def install(self, runner: Runner, project_path: str | Path) -> None:
        """Install dependencies with npm or yarn.  Output goes straight to the terminal."""
        cmd = ["npm", "install"] if runner == Runner.NPM else ["yarn"]
        with step("Installing dependencies..."):
            try:
                returncode, _, _ = await run_command(cmd, cwd=project_path, capture=False)
            except FileNotFoundError:
                returncode = -1
            if returncode != 0:
                raise ExternalToolError(
                    "Installation failed. You'll need to install manually.",
                    command=" ".join(cmd),
                )

    async def initial_commit(
        self,
        commit_hash: str,
        project_path: str | Path,
        full_name: str,
        email: str | None = None,
    ) -> None:
        """Initialise a fresh repository and commit the whole project."""
        identity = ["-c", f"user.name={full_name}"]
        if email:
            identity += ["-c", f"user.email={email}"]
        await _run_git("init", cwd=project_path)
        await _run_git("add", "-A", cwd=project_path)
        await _run_git(
            *identity,
            "commit",
            "-m",
            f"Initial commit\n\nCreated with {TEMPLATE_SLUG}@{commit_hash}",
            cwd=project_path,
        )

    async def get_user_info(self) -> UserInfo:
        """Read ``user.name`` and ``user.email`` from global git config.

        Falls back to the placeholders when either cannot be read.
        """
        try:
            name = await _run_git("config", "--global", "user.name")
            email = await _run_git("config", "--global", "user.email")
        except ExternalToolError:
            return UserInfo(git_name=Placeholders.name, git_email=Placeholders.email)
        return UserInfo(git_name=name, git_email=email)

    async def get_github_username(self, email: str) -> str:
        """Look up the GitHub login registered with *email*.

        Returns the placeholder username for the placeholder email, for
        unknown emails, and when GitHub cannot be reached.
        """
        if email == Placeholders.email:
            return Placeholders.username

        client = self._http_client or httpx.AsyncClient(timeout=httpx.Timeout(10.0, connect=5.0))
        try:
            response = await client.get(
                GITHUB_USER_SEARCH_URL,
                params={"q": f"{email} in:email"},
                headers={"Accept": "application/vnd.github+json"},
            )
            response.raise_for_status()
            items = response.json().get("items") or []
        except (httpx.HTTPError, ValueError):
            return Placeholders.username
        finally:
            if self._http_client is None:
                await client.aclose()

        if not items or not items[0].get("login"):
            return Placeholders.username
        return items[0]["login"]
