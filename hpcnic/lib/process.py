"""Running external tools through a Context."""

import subprocess
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hpcnic.core.context import Context


class CommandError(Exception):
    """A command could not be run, timed out or exited non-zero."""

    pass


def resolve_context(context: "Context | None") -> "Context":
    """Return context, or a real host Context when none is given."""
    if context is None:
        from hpcnic.core.context import Context
        return Context()
    return context


def run_command(
    cmd: list[str],
    context: "Context | None" = None,
    check: bool = False,
) -> str:
    """
    Run a command and return its stdout.

    Args:
        cmd: Command and arguments
        context: Execution context (for testing)
        check: Raise on non-zero exit

    Raises:
        CommandError: If the command can't start, times out, or (with
            check=True) exits non-zero. The message carries stderr.
    """
    context = resolve_context(context)
    command = " ".join(cmd)

    try:
        result = context.run(cmd)
    except subprocess.TimeoutExpired as e:
        raise CommandError(f"{command}: timed out after {e.timeout}s") from e
    except Exception as e:
        raise CommandError(f"{command}: {e}") from e

    if check and result.returncode != 0:
        detail = (result.stderr or result.stdout or "").strip()
        raise CommandError(f"{command}: exit {result.returncode}: {detail}")

    return result.stdout


def check_tool(
    name: str,
    context: "Context | None" = None,
    required: bool = False,
) -> bool:
    """True if name is on PATH; raises CommandError instead when required."""
    exists = resolve_context(context).check_tool(name)
    if required and not exists:
        raise CommandError(f"{name} not found in PATH")
    return exists
