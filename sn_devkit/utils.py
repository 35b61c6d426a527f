"""Shared utility functions for SN Devkit.

Provides async command execution, tool discovery, order-preserving JSON I/O,
and the Rich-based ``Reporter`` that every component prints through.
"""

from __future__ import annotations

import asyncio
import json
import os
import shutil
from pathlib import Path
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule

console = Console()
error_console = Console(stderr=True)

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: Optional[float] = 120,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously.

    Args:
        cmd: Program and arguments.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed, or
            ``None`` to wait for as long as the command takes.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams).
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple.  If *capture* is ``False``
        the stdout/stderr strings will be empty.

    Raises:
        FileNotFoundError: If the program does not exist.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    stdout_pipe = asyncio.subprocess.PIPE if capture else None
    stderr_pipe = asyncio.subprocess.PIPE if capture else None

    # Resolve through PATH (and PATHEXT on Windows, e.g. npm.cmd).
    program = shutil.which(cmd[0]) or cmd[0]
    process = await asyncio.create_subprocess_exec(
        program,
        *cmd[1:],
        stdout=stdout_pipe,
        stderr=stderr_pipe,
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

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace")
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


def command_exists(name: str) -> bool:
    """Return ``True`` if *name* resolves to an executable on ``PATH``."""
    return shutil.which(name) is not None


# ---------------------------------------------------------------------------
# JSON I/O
# ---------------------------------------------------------------------------


def load_json(path: str | Path) -> Any:
    """Load and parse a JSON file, keeping object keys in document order.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    return json.loads(Path(path).read_text(encoding="utf-8"))


def dump_json(data: Any) -> str:
    """Serialise *data* the way ``npm`` and ``jq`` lay out ``package.json``.

    Two-space indentation, non-ASCII characters kept as-is, trailing newline.
    """
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def replace_file(path: str | Path, content: str) -> None:
    """Write *content* to a temporary sibling, then move it over *path*."""
    target = Path(path)
    tmp = target.with_name(target.name + ".tmp")
    try:
        tmp.write_text(content, encoding="utf-8")
        os.replace(tmp, target)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


# ---------------------------------------------------------------------------
# Rich output
# ---------------------------------------------------------------------------


class Reporter:
    """Severity-levelled console sink.

    ``info``, ``success`` and ``warning`` go to *out* (stdout by default);
    ``error`` goes to *err* (stderr by default). Messages are printed
    literally, never parsed as Rich markup.  Tests inject consoles
    that record into a buffer.
    """

    def __init__(
        self,
        out: Console | None = None,
        err: Console | None = None,
    ) -> None:
        self.console = out if out is not None else console
        self.err_console = err if err is not None else error_console

    def info(self, message: str) -> None:
        self.console.print(f"[cyan]{escape(message)}[/cyan]")

    def success(self, message: str) -> None:
        self.console.print(f"[bold green]{escape(message)}[/bold green]")

    def warning(self, message: str) -> None:
        self.console.print(f"[bold yellow]{escape(message)}[/bold yellow]")

    def error(self, message: str) -> None:
        self.err_console.print(f"[bold red]{escape(message)}[/bold red]")

    def print_json(self, data: Any) -> None:
        """Pretty-print a JSON-serialisable value."""
        self.console.print_json(data=data)

    def header(self, title: str) -> None:
        """Print a full-width green rule with *title*."""
        self.console.print(Rule(f"[bold green]{title}[/bold green]", style="green"))
