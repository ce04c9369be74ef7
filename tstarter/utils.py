"""Shared utility functions for typescript-starter.

Provides async command execution, JSON I/O in npm's format, exact-text file
edits, path deletion (awaited or detached), and Rich-based status reporting.
"""

from __future__ import annotations

import asyncio
import json
import os
import shutil
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from rich.console import Console

from .errors import BestEffortError, FatalIOError, TemplateDriftError

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: float | None = None,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously.

    Args:
        cmd: Program and arguments.
        cwd: Working directory for the child process.
        timeout: Seconds before the process is killed. ``None`` waits forever.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams).
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.

    Raises:
        FileNotFoundError: If the program is not on ``PATH``.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    pipe = asyncio.subprocess.PIPE if capture else None
    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=pipe,
        stderr=pipe,
        cwd=str(cwd) if cwd else None,
        env=merged_env,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (-1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}")

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> Any:
    """Load and parse a JSON file.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    return json.loads(Path(path).read_text(encoding="utf-8"))


def dump_json(data: Any) -> str:
    """Serialise *data* the way npm writes ``package.json``: 2-space indent, trailing newline."""
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


async def save_json(data: Any, path: str | Path) -> None:
    """Write *data* with :func:`dump_json`, off the event loop."""
    file_path = Path(path)
    content = dump_json(data)
    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, file_path.write_text, content, "utf-8")


# ---------------------------------------------------------------------------
# Exact-text edits
# ---------------------------------------------------------------------------


def read_required(path: str | Path) -> str:
    """Read a template file that must exist."""
    file_path = Path(path)
    try:
        return file_path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise FatalIOError(file_path, "Required template file is missing") from None


def replace_in_file(path: str | Path, old: str, new: str) -> bool:
    """Replace the first occurrence of *old* with *new*.

    Matching is literal, never a regular expression.

    Returns:
        ``True`` if the file was changed.
    """
    file_path = Path(path)
    text = read_required(file_path)
    if old not in text:
        return False
    file_path.write_text(text.replace(old, new, 1), encoding="utf-8")
    return True


def apply_edit(path: str | Path, old: str, new: str) -> bool:
    """Replace *old* with *new*, treating an already-applied edit as a no-op.

    An edit counts as already applied when *new* is empty (a removal) or when
    *new* is already present in the file.  Anything else means the template
    no longer contains the text the rules expect.

    Returns:
        ``True`` if the file was changed, ``False`` if it was already edited.

    Raises:
        TemplateDriftError: If neither *old* nor the edited form is present.
    """
    if replace_in_file(path, old, new):
        return True
    if not new or new in read_required(path):
        return False
    raise TemplateDriftError(path, old)


def require_edit(path: str | Path, old: str, new: str) -> None:
    """Replace *old* with *new*; any miss is an error.

    For one-shot substitutions such as placeholders, where "already applied"
    cannot be told apart from drift.

    Raises:
        TemplateDriftError: If *old* is not present.
    """
    if not replace_in_file(path, old, new):
        raise TemplateDriftError(path, old)


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------


def delete_paths(paths: Iterable[str | Path]) -> list[Path]:
    """Delete files and directory trees.  Missing paths are skipped.

    Returns:
        The paths that existed and were removed.
    """
    removed: list[Path] = []
    for raw in paths:
        path = Path(raw)
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        elif path.exists() or path.is_symlink():
            path.unlink()
        else:
            continue
        removed.append(path)
    return removed


_background_tasks: set[asyncio.Task[Any]] = set()


def delete_in_background(paths: Iterable[str | Path]) -> asyncio.Task[list[Path]]:
    """Start deleting *paths* without waiting for the result.

    A failure is reported as a warning and otherwise ignored.  The task is
    returned so callers that care (tests) can still await it.
    """
    targets = [Path(p) for p in paths]
    task = asyncio.get_running_loop().create_task(asyncio.to_thread(delete_paths, targets))
    _background_tasks.add(task)
    task.add_done_callback(_report_background_deletion)
    return task


def _report_background_deletion(task: asyncio.Task[Any]) -> None:
    _background_tasks.discard(task)
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        print_warning(str(BestEffortError(f"Could not delete optional files: {exc}")))


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


@contextmanager
def step(message: str) -> Iterator[None]:
    """Show a spinner while the block runs, then mark it done or failed.

    Purely cosmetic: exceptions from the block always propagate.
    """
    try:
        with console.status(message):
            yield
    except BaseException:
        console.print(f"  [red]x[/red] {message}")
        raise
    console.print(f"  [green]+[/green] {message}")


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")
