"""package.json transformation.

``derive_manifest`` is a pure function from the template's manifest to the new
project's manifest.  The allow-lists it filters dependencies with live on a
``ManifestRules`` table so they can be swapped out in tests.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .config import ProjectConfig, Runner
from .errors import ManifestError
from .utils import load_json, save_json

Manifest = dict[str, Any]

INITIAL_VERSION = "1.0.0"


# ---------------------------------------------------------------------------
# Rule tables
# ---------------------------------------------------------------------------

KEPT_DEV_DEPENDENCIES: tuple[str, ...] = (
    "@ava/typescript",
    "@istanbuljs/nyc-config-typescript",
    "@typescript-eslint/eslint-plugin",
    "@typescript-eslint/parser",
    "ava",
    "eslint",
    "eslint-config-prettier",
    "eslint-plugin-eslint-comments",
    "eslint-plugin-import",
    "gh-pages",
    "npm-run-all",
    "nyc",
    "open-cli",
    "prettier",
    "standard-version",
    "trash-cli",
    "ts-node",
    "typedoc",
    "typescript",
)

# Dependencies retained for Node.js projects.
KEPT_NODE_DEPENDENCIES: tuple[str, ...] = ()

# Keys that only make sense for the starter's own CLI.
SCAFFOLD_ONLY_KEYS: tuple[str, ...] = ("bin", "NOTE", "NOTE_2")

RESET_HARD_SCRIPTS: dict[Runner, str] = {
    Runner.NPM: "git clean -dfx && git reset --hard && npm i",
    Runner.YARN: "git clean -dfx && git reset --hard && yarn",
}


class ManifestRules(BaseModel):
    """Fixed tables driving :func:`derive_manifest`."""

    model_config = ConfigDict(frozen=True)

    dev_dependencies: tuple[str, ...] = Field(default=KEPT_DEV_DEPENDENCIES)
    dependencies: tuple[str, ...] = Field(default=KEPT_NODE_DEPENDENCIES)
    removed_keys: tuple[str, ...] = Field(default=SCAFFOLD_ONLY_KEYS)
    ava_files: tuple[str, ...] = Field(default=("!build/module/**",))
    default_runner: Runner = Field(default=Runner.NPM)


DEFAULT_RULES = ManifestRules()


# ---------------------------------------------------------------------------
# Derivation
# ---------------------------------------------------------------------------


def filter_all_but(keep: tuple[str, ...], source: dict[str, Any] | None) -> dict[str, Any]:
    """Return the entries of *source* whose keys are in *keep*, in *keep* order.

    Names in *keep* that *source* lacks are left out entirely.
    """
    source = source or {}
    return {name: source[name] for name in keep if name in source}


def build_scripts(
    inherited: dict[str, str] | None,
    config: ProjectConfig,
    rules: ManifestRules = DEFAULT_RULES,
) -> dict[str, str]:
    """Inherited scripts plus the project's ``version`` (and maybe ``reset-hard``) script."""
    scripts = {
        **(inherited or {}),
        "version": f"standard-version -t {config.project_name}\\@",
    }
    if config.runner != rules.default_runner:
        scripts["reset-hard"] = RESET_HARD_SCRIPTS[config.runner]
    return scripts


def derive_manifest(
    original: Manifest,
    config: ProjectConfig,
    include_runtime_deps: bool,
    rules: ManifestRules = DEFAULT_RULES,
) -> Manifest:
    """Build the new project's manifest from the template's.

    *original* is not modified.  Keys keep the template's order; keys the
    template lacks are appended.

    Args:
        original: Parsed template ``package.json``.
        config: The project being created.
        include_runtime_deps: When ``False`` the ``dependencies`` mapping is empty.
        rules: Allow-lists and scaffold-only keys.
    """
    ava = {**(original.get("ava") or {}), "files": list(rules.ava_files)}
    ava.pop("ignoredByWatcher", None)

    manifest: Manifest = {
        **original,
        "dependencies": (
            filter_all_but(rules.dependencies, original.get("dependencies"))
            if include_runtime_deps
            else {}
        ),
        "description": config.description,
        "devDependencies": filter_all_but(
            rules.dev_dependencies, original.get("devDependencies")
        ),
        "keywords": [],
        "name": config.project_name,
        "repository": f"https://github.com/{config.github_username}/{config.project_name}",
        "scripts": build_scripts(original.get("scripts"), config, rules),
        "version": INITIAL_VERSION,
        "ava": ava,
    }
    for key in rules.removed_keys:
        manifest.pop(key, None)
    return manifest


# ---------------------------------------------------------------------------
# On-disk manifest
# ---------------------------------------------------------------------------


def read_manifest(path: str | Path) -> Manifest:
    """Load ``package.json``.

    Raises:
        ManifestError: If the file is missing, is not JSON, or is not an object.
    """
    try:
        data = load_json(path)
    except FileNotFoundError:
        raise ManifestError(path, "Template package.json is missing") from None
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ManifestError(path, f"Template package.json is not valid JSON ({exc})") from exc
    if not isinstance(data, dict):
        raise ManifestError(path, "Template package.json is not a JSON object")
    return data


async def write_manifest(path: str | Path, manifest: Manifest) -> None:
    """Replace ``package.json`` with *manifest* in npm's formatting."""
    await save_json(manifest, path)


async def update_manifest(
    project_path: str | Path,
    config: ProjectConfig,
    rules: ManifestRules = DEFAULT_RULES,
) -> Manifest:
    """Read, derive and write the project's ``package.json`` in one go.

    Nothing is written unless the template manifest parsed cleanly.
    """
    pkg_path = Path(project_path) / "package.json"
    original = read_manifest(pkg_path)
    manifest = derive_manifest(original, config, config.node_definitions, rules)
    await write_manifest(pkg_path, manifest)
    return manifest
