"""Last stage: scaffold cleanup, README, install and the initial commit."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from .config import Placeholders, ProjectConfig, Runner
from .errors import FatalIOError
from .tasks import Tasks
from .utils import apply_edit, delete_in_background, delete_paths, require_edit, step

# Files and directories that belong to the starter itself, not to new projects.
SCAFFOLD_ONLY_PATHS: tuple[str, ...] = (
    "CHANGELOG.md",
    "README.md",
    "package-lock.json",
    "bin",
    "src/cli",
)
EDITOR_SETTINGS_DIR = ".vscode"
STARTER_README = "README-starter.md"
README = "README.md"
NAME_PLACEHOLDER = "[package-name]"
DESCRIPTION_PLACEHOLDER = "[description]"


def git_is_configured(full_name: str, email: str) -> bool:
    """Both the name and the email must differ from their placeholders."""
    return full_name != Placeholders.name and email != Placeholders.email


def update_gitignore(project_path: Path, runner: Runner) -> None:
    """Stop ignoring ``diff``; yarn projects ignore npm's lockfile instead of their own."""
    gitignore = project_path / ".gitignore"
    apply_edit(gitignore, "diff\n", "")
    if runner == Runner.YARN:
        apply_edit(gitignore, "yarn.lock", "package-lock.json")


def promote_readme(project_path: Path, config: ProjectConfig) -> Path:
    """Turn ``README-starter.md`` into the project's README and fill in its placeholders."""
    readme = project_path / README
    starter = project_path / STARTER_README
    try:
        starter.rename(readme)
    except FileNotFoundError:
        raise FatalIOError(starter, "Required template file is missing") from None
    require_edit(readme, NAME_PLACEHOLDER, config.project_name)
    require_edit(readme, DESCRIPTION_PLACEHOLDER, config.description)
    return readme


class Finalizer:
    """Runs the finalization stage for one project.

    The optional ``.vscode`` removal is started but not awaited; its task is
    kept on ``background_tasks`` for anyone who wants to wait for it.
    """

    def __init__(self, config: ProjectConfig, tasks: Tasks) -> None:
        self.config = config
        self.tasks = tasks
        self.background_tasks: list[asyncio.Task[Any]] = []

    async def run(self, project_path: str | Path, commit_hash: str) -> None:
        root = Path(project_path)

        with step("Updating .gitignore"):
            update_gitignore(root, self.config.runner)

        with step("Deleting unnecessary files"):
            self.remove_scaffold_files(root)

        with step("Creating README.md"):
            promote_readme(root, self.config)

        if self.config.install:
            await self.tasks.install(self.config.runner, root)

        if git_is_configured(self.config.full_name, self.config.email):
            with step("Initializing git repository..."):
                await self.tasks.initial_commit(
                    commit_hash, root, self.config.full_name, self.config.email
                )

    def remove_scaffold_files(self, root: Path) -> None:
        delete_paths(root / rel for rel in SCAFFOLD_ONLY_PATHS)
        if not self.config.vscode:
            self.background_tasks.append(delete_in_background([root / EDITOR_SETTINGS_DIR]))


async def finalize(
    project_path: str | Path,
    config: ProjectConfig,
    commit_hash: str,
    tasks: Tasks,
) -> Finalizer:
    """Finalize a pruned project.  Returns the ``Finalizer`` so callers can reach its background tasks."""
    finalizer = Finalizer(config, tasks)
    await finalizer.run(project_path, commit_hash)
    return finalizer
