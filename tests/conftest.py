"""Shared pytest fixtures for the typescript-starter test suite.

Provides reusable fixtures for:
- A provisioned template tree laid out like the real starter repository
- Project configurations
- Fake collaborators (clone, install, commit)
"""

from __future__ import annotations

import json
import textwrap
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock

import pytest

from tstarter.config import ProjectConfig
from tstarter.tasks import CloneResult

COMMIT_HASH = "2f1c7d0a9b8e6f5d4c3b2a1908f7e6d5c4b3a291"


# ---------------------------------------------------------------------------
# Template contents
# ---------------------------------------------------------------------------

TEMPLATE_PACKAGE_JSON: dict[str, Any] = {
    "name": "typescript-starter",
    "version": "10.1.1",
    "description": "A typescript starter for building javascript libraries and projects",
    "bin": {"typescript-starter": "./bin/typescript-starter"},
    "main": "build/main/index.js",
    "typings": "build/main/index.d.ts",
    "module": "build/module/index.js",
    "repository": "https://github.com/bitjson/typescript-starter",
    "license": "MIT",
    "keywords": ["typescript", "starter"],
    "scripts": {
        "build": "run-p build:*",
        "test": "run-s build test:*",
        "version": "standard-version",
    },
    "engines": {"node": ">=10"},
    "dependencies": {
        "@bitauth/libauth": "^1.17.1",
        "chalk": "^4.1.0",
        "del": "^6.0.0",
        "ora": "^5.1.0",
    },
    "devDependencies": {
        "@ava/typescript": "^1.1.1",
        "@types/node": "^14.14.6",
        "ava": "^3.13.0",
        "eslint": "^7.12.1",
        "prettier": "^2.1.2",
        "typescript": "^4.0.5",
        "md5-file": "^5.0.0",
    },
    "ava": {
        "failFast": True,
        "timeout": "60s",
        "typescript": {"rewritePaths": {"src/": "build/main/"}},
        "files": ["!build/module/**", "!src/cli/**"],
        "ignoredByWatcher": ["src/cli/**"],
    },
    "NOTE": "These are scaffold-only notes.",
    "NOTE_2": "More scaffold-only notes.",
}

TSCONFIG = textwrap.dedent("""\
    {
      "compilerOptions": {
        "target": "es2017",
        "outDir": "build/main",
        "strict": true,
        "lib": ["es2017", "dom"],
        "types": ["node"],
        "typeRoots": ["node_modules/@types", "src/types"]
      },
      "include": ["src/**/*.ts"]
    }
""")

INDEX_TS = textwrap.dedent("""\
    export * from './lib/async';
    export * from './lib/hash';
    export * from './lib/number';
""")

GITIGNORE = textwrap.dedent("""\
    .idea/*
    .nyc_output
    build
    node_modules
    coverage
    *.log
    yarn.lock
    diff
""")

README_STARTER = textwrap.dedent("""\
    # [package-name]

    [description]

    ## Usage

    npm install [package-name]
""")

TEMPLATE_FILES: dict[str, str] = {
    "tsconfig.json": TSCONFIG,
    "src/index.ts": INDEX_TS,
    "src/lib/async.ts": "export const sleep = () => undefined;\n",
    "src/lib/async.spec.ts": "// async tests\n",
    "src/lib/hash.ts": "export const sha256 = () => undefined;\n",
    "src/lib/hash.spec.ts": "// hash tests\n",
    "src/lib/number.ts": "export const double = (n: number) => n * 2;\n",
    "src/lib/number.spec.ts": "// number tests\n",
    "src/cli/cli.ts": "// starter cli\n",
    "src/cli/tasks.ts": "// starter tasks\n",
    "bin/typescript-starter": "#!/usr/bin/env node\n",
    ".gitignore": GITIGNORE,
    ".vscode/settings.json": "{}\n",
    "README.md": "# typescript-starter\n",
    "README-starter.md": README_STARTER,
    "CHANGELOG.md": "# Changelog\n",
    "package-lock.json": "{}\n",
    ".git/HEAD": "ref: refs/heads/main\n",
}


def write_template(project_dir: Path) -> Path:
    """Materialise the fake starter repository at *project_dir*."""
    for rel, content in TEMPLATE_FILES.items():
        path = project_dir / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    (project_dir / "package.json").write_text(
        json.dumps(TEMPLATE_PACKAGE_JSON, indent=2) + "\n", encoding="utf-8"
    )
    return project_dir


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def template_package() -> dict[str, Any]:
    """A deep copy of the template manifest."""
    return json.loads(json.dumps(TEMPLATE_PACKAGE_JSON))


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """A provisioned template at ``<tmp>/demo``."""
    return write_template(tmp_path / "demo")


@pytest.fixture
def config(tmp_path: Path) -> ProjectConfig:
    """A fully customised configuration for project ``demo``."""
    return ProjectConfig(
        project_name="demo",
        description="A demo",
        full_name="Ada Lovelace",
        email="ada@example.com",
        github_username="ada",
        dom_definitions=False,
        node_definitions=True,
        install=False,
        working_directory=tmp_path,
    )


@pytest.fixture
def fake_tasks() -> AsyncMock:
    """Collaborators that provision the fake template instead of cloning."""
    tasks = AsyncMock()

    async def _clone(repo_info, working_directory, project_name):
        project = write_template(Path(working_directory) / project_name)
        return CloneResult(commit_hash=COMMIT_HASH, git_history_dir=project / ".git")

    tasks.clone_repo.side_effect = _clone
    return tasks
