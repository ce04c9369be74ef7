"""Interactive collection of project options."""

from __future__ import annotations

from typing import Any

from rich.prompt import Confirm, Prompt

from .config import Runner, validate_name
from .utils import console, print_error

PROJECT_TYPES: dict[str, tuple[bool, bool]] = {
    # choice -> (dom_definitions, node_definitions)
    "node": (False, True),
    "browser": (True, False),
    "both": (True, True),
}


def ask_project_name() -> str:
    """Ask until the user enters a valid npm package name."""
    while True:
        name = Prompt.ask("Enter the new package name", console=console).strip()
        problem = validate_name(name)
        if problem is None:
            return name
        print_error(problem)


def inquire() -> dict[str, Any]:
    """Ask for everything ``ProjectConfig`` needs that git cannot tell us.

    Returns:
        Keyword arguments for ``ProjectConfig``.
    """
    project_name = ask_project_name()
    description = Prompt.ask(
        "Enter the package description",
        default="a typescript-starter project",
        console=console,
    )
    project_type = Prompt.ask(
        "Where will this code run?",
        choices=list(PROJECT_TYPES),
        default="node",
        console=console,
    )
    runner = Prompt.ask(
        "Which package manager do you use?",
        choices=[r.value for r in Runner],
        default=Runner.NPM.value,
        console=console,
    )
    vscode = Confirm.ask("Include VS Code debugging config?", default=True, console=console)
    install = Confirm.ask("Install dependencies now?", default=True, console=console)

    dom_definitions, node_definitions = PROJECT_TYPES[project_type]
    return {
        "project_name": project_name,
        "description": description,
        "dom_definitions": dom_definitions,
        "node_definitions": node_definitions,
        "runner": Runner(runner),
        "vscode": vscode,
        "install": install,
    }
