"""Host access for NIC discovery and tuning."""

import os
import shutil
import subprocess
from pathlib import Path

# ethtool can hang on a wedged driver; never wait longer than this
COMMAND_TIMEOUT = 30


class Context:
    """
    Every call that touches the host: ethtool runs and sysfs reads.

    Tests substitute MockContext, which serves canned command output
    and an in-memory sysfs tree.
    """

    def check_tool(self, name: str) -> bool:
        return shutil.which(name) is not None

    def run(
        self,
        cmd: list[str],
        check: bool = False,
        timeout: int | None = COMMAND_TIMEOUT,
        **kwargs,
    ) -> subprocess.CompletedProcess:
        """
        Run a command with captured text output.

        The C locale is forced unless the caller passes its own env, so
        ethtool field labels ("Speed:", "Pre-set maximums:") are stable.
        """
        kwargs.setdefault("env", {**os.environ, "LC_ALL": "C"})
        return subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            check=check,
            timeout=timeout,
            **kwargs,
        )

    def read_file(self, path: str) -> str:
        return Path(path).read_text()

    def file_exists(self, path: str) -> bool:
        # sysfs device entries are symlinks; a dangling one still marks hardware
        p = Path(path)
        return p.exists() or p.is_symlink()

    def list_dir(self, path: str) -> list[str]:
        """Entry names under path, sorted."""
        return sorted(entry.name for entry in Path(path).iterdir())
