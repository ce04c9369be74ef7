"""typescript-starter pipeline.

Creates a new TypeScript project from the starter template in four strictly
sequential stages:

1. Provision -- clone the template and drop its git history.
2. Manifest -- rewrite package.json for the new project.
3. Prune    -- remove the DOM and/or Node.js features that were not requested.
4. Finalize -- clean up starter-only files, write the README, install, commit.

Nothing is rolled back: a failing stage leaves the directory as it was at the
point of failure.

Usage::

    python -m tstarter my-lib --description "My library" --node
    python -m tstarter            # interactive
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .config import ProjectConfig, Runner, StarterSettings
from .errors import StarterError
from .finalize import Finalizer, finalize
from .manifest import update_manifest
from .prompts import inquire
from .pruning import prune_dom_feature, prune_platform_feature
from .tasks import Tasks
from .utils import console, delete_paths, print_error, print_success, step


async def typescript_starter(config: ProjectConfig, tasks: Tasks) -> Finalizer:
    """Scaffold ``config.project_path`` from the template.

    Returns:
        The ``Finalizer`` that ran the last stage.
    """
    console.print()
    clone = await tasks.clone_repo(
        config.repo_info, config.working_directory, config.project_name
    )
    await asyncio.to_thread(delete_paths, [clone.git_history_dir])
    console.print(f"\n  [dim]Cloned at commit: {clone.commit_hash}[/dim]\n")

    project_path = config.project_path

    with step("Updating package.json"):
        await update_manifest(project_path, config)

    if not config.dom_definitions:
        with step('tsconfig: don\'t include "dom" lib'):
            prune_dom_feature(project_path, config.dom_definitions)

    if not config.node_definitions:
        with step('tsconfig: don\'t include "node" types'):
            prune_platform_feature(project_path, config.node_definitions)

    finalizer = await finalize(project_path, config, clone.commit_hash, tasks)

    console.print()
    print_success(f"Created {config.project_name} 🎉")
    console.print()
    return finalizer


async def run(answers: dict[str, Any], working_directory: Path, tasks: Tasks | None = None) -> Finalizer:
    """Fill in git identity and template location, then run the pipeline."""
    tasks = tasks or Tasks()
    settings = StarterSettings.from_env()
    user = await tasks.get_user_info()
    username = await tasks.get_github_username(user.git_email)
    config = ProjectConfig(
        **answers,
        full_name=user.git_name,
        email=user.git_email,
        github_username=username,
        working_directory=working_directory,
        repo_info=settings.repo_info,
    )
    return await typescript_starter(config, tasks)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``tstarter`` and ``python -m tstarter``."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Create a new TypeScript project from typescript-starter",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  tstarter\n"
            "  tstarter my-library --description \"Does one thing well\"\n"
            "  tstarter my-app --node --yarn --no-install\n"
        ),
    )
    parser.add_argument(
        "project_name",
        nargs="?",
        help="Package name; prompts interactively when omitted",
    )
    parser.add_argument("--description", default="a typescript-starter project")
    parser.add_argument("--dom", action="store_true", help="Include DOM lib and definitions")
    parser.add_argument("--node", action="store_true", help="Include Node.js type definitions")
    parser.add_argument("--yarn", action="store_true", help="Use yarn instead of npm")
    parser.add_argument("--no-install", action="store_true", help="Skip dependency installation")
    parser.add_argument("--no-vscode", action="store_true", help="Remove the .vscode directory")
    parser.add_argument(
        "--output", "-o",
        default=".",
        help="Directory to create the project in (default: current directory)",
    )

    args = parser.parse_args(argv)

    if args.project_name:
        answers: dict[str, Any] = {
            "project_name": args.project_name,
            "description": args.description,
            "dom_definitions": args.dom,
            "node_definitions": args.node,
            "runner": Runner.YARN if args.yarn else Runner.NPM,
            "install": not args.no_install,
            "vscode": not args.no_vscode,
        }
    else:
        answers = inquire()

    try:
        asyncio.run(run(answers, Path(args.output).resolve()))
    except ValidationError as exc:
        print_error(f"Invalid options: {exc.errors()[0]['msg']}")
        sys.exit(1)
    except StarterError as exc:
        print_error(str(exc))
        sys.exit(1)
    except OSError as exc:
        print_error(f"File system error: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
