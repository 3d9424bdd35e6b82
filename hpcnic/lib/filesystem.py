"""Sysfs reads through a Context."""

from typing import TYPE_CHECKING

from hpcnic.lib.process import resolve_context

if TYPE_CHECKING:
    from hpcnic.core.context import Context


class FileError(Exception):
    """A sysfs path could not be read or listed."""

    pass


def read_file(
    path: str,
    context: "Context | None" = None,
    default: str | None = None,
) -> str:
    """
    Read a sysfs attribute.

    Attributes can exist and still fail to read (``speed`` on a downed
    link returns EINVAL), so any OSError counts as unreadable.

    Args:
        path: Attribute path
        context: Execution context (for testing)
        default: Returned instead of raising when the read fails

    Raises:
        FileError: If the read fails and no default was given
    """
    try:
        return resolve_context(context).read_file(path)
    except OSError as e:
        if default is not None:
            return default
        raise FileError(f"Cannot read {path}: {e}") from e


def file_exists(path: str, context: "Context | None" = None) -> bool:
    return resolve_context(context).file_exists(path)


def list_dir(path: str, context: "Context | None" = None) -> list[str]:
    """Sorted entry names under path; FileError if it can't be listed."""
    try:
        return resolve_context(context).list_dir(path)
    except OSError as e:
        raise FileError(f"Cannot list {path}: {e}") from e
