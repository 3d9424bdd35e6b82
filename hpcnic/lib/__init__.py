"""Shared host-access helpers."""

from hpcnic.lib.filesystem import FileError, file_exists, list_dir, read_file
from hpcnic.lib.process import CommandError, check_tool, run_command

__all__ = [
    "CommandError",
    "FileError",
    "check_tool",
    "file_exists",
    "list_dir",
    "read_file",
    "run_command",
]
