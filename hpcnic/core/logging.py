"""JSONL logging for optimizer runs."""

import json
import os
import sys
import threading
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Any, TextIO

PROGRAM = "optimize-hpc-nic"

# Special log_path value: write JSONL to stdout instead of a file
STDOUT = "stdout"


def get_log_path(program: str = PROGRAM, base_path: Path | None = None) -> Path:
    """
    Where a run logs by default: {base}/{date}/{program}.jsonl.

    base_path defaults to ~/var/log/hpcnic, one directory per day so a
    monitor running for weeks rolls over on its next restart.
    """
    if base_path is None:
        base_path = Path(os.environ.get("HOME", "/tmp")) / "var" / "log" / "hpcnic"
    return base_path / date.today().isoformat() / f"{program}.jsonl"


class NullLogger:
    """Accepts the RunLogger API and discards everything."""

    def log(self, level: str, message: str, **extra: Any) -> None:
        pass

    def debug(self, message: str, **extra: Any) -> None:
        self.log("debug", message, **extra)

    def info(self, message: str, **extra: Any) -> None:
        self.log("info", message, **extra)

    def warning(self, message: str, **extra: Any) -> None:
        self.log("warning", message, **extra)

    def error(self, message: str, **extra: Any) -> None:
        self.log("error", message, **extra)


class RunLogger(NullLogger):
    """
    JSONL logger shared by discovery, the optimizer workers and the monitor.

    One JSON object per line, each carrying the program name plus any
    keyword extras (interface, rx, tx, tick...). Writes are serialised
    under a lock so worker threads never interleave lines. Debug entries
    are dropped unless verbose; verbose also echoes ``[LEVEL] message``
    to stderr when the JSONL itself is going to a file.
    """

    def __init__(
        self,
        program: str = PROGRAM,
        log_path: Path | str | None = None,
        verbose: bool = False,
        echo: TextIO | None = None,
    ):
        self.program = program
        if log_path == STDOUT:
            self.log_path = None
        else:
            self.log_path = Path(log_path) if log_path else get_log_path(program)
        self.verbose = verbose
        self._echo = echo
        self._stream: TextIO | None = None
        self._lock = threading.RLock()

    def _open(self) -> TextIO:
        if self._stream is None:
            if self.log_path is None:
                self._stream = sys.stdout
            else:
                self.log_path.parent.mkdir(parents=True, exist_ok=True)
                self._stream = open(self.log_path, "a")
        return self._stream

    def log(self, level: str, message: str, **extra: Any) -> None:
        if level == "debug" and not self.verbose:
            return

        line = json.dumps(
            {
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "level": level,
                "program": self.program,
                "message": message,
                **extra,
            },
            default=str,
        )
        with self._lock:
            stream = self._open()
            stream.write(line + "\n")
            stream.flush()
            if self.verbose and self.log_path is not None:
                (self._echo or sys.stderr).write(f"[{level.upper()}] {message}\n")

    def close(self) -> None:
        with self._lock:
            if self._stream is not None and self._stream is not sys.stdout:
                self._stream.close()
            self._stream = None

    def __enter__(self) -> "RunLogger":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
