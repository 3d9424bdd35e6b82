"""Shared test fixtures."""

import subprocess
import sys
import threading
import time
from pathlib import Path

import pytest

# Add project root to path for package imports
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from hpcnic.core.ethtool import HardwareQueryError  # noqa: E402
from hpcnic.core.models import RingSettings  # noqa: E402

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class MockContext:
    """Mock Context for testing without real system access."""

    def __init__(
        self,
        tools_available: list[str] | None = None,
        command_outputs: dict[tuple, str | Exception] | None = None,
        file_contents: dict[str, str | Exception] | None = None,
    ):
        self.tools_available = set(tools_available or [])
        self.command_outputs = command_outputs or {}
        self.file_contents = file_contents or {}
        self.commands_run: list[list[str]] = []

    def check_tool(self, name: str) -> bool:
        """Check if tool is in mocked available list."""
        return name in self.tools_available

    def run(
        self,
        cmd: list[str],
        check: bool = False,
        **kwargs,
    ) -> subprocess.CompletedProcess:
        """Return mocked command output."""
        self.commands_run.append(cmd)
        key = tuple(cmd)
        if key not in self.command_outputs:
            raise KeyError(f"No mock output for command: {cmd}")

        output = self.command_outputs[key]
        if isinstance(output, Exception):
            raise output

        # Allow passing CompletedProcess directly for non-zero returncode
        if isinstance(output, subprocess.CompletedProcess):
            return output

        return subprocess.CompletedProcess(
            cmd,
            returncode=0,
            stdout=output,
            stderr="",
        )

    def read_file(self, path: str) -> str:
        """Return mocked file content."""
        if path not in self.file_contents:
            raise FileNotFoundError(f"No mock content for: {path}")
        content = self.file_contents[path]
        if isinstance(content, Exception):
            raise content
        return content

    def file_exists(self, path: str) -> bool:
        """Check if path is a mocked file or a directory above one."""
        prefix = path.rstrip("/") + "/"
        return path in self.file_contents or any(
            p.startswith(prefix) for p in self.file_contents
        )

    def list_dir(self, path: str) -> list[str]:
        """List mocked directory entries derived from file paths."""
        prefix = path.rstrip("/") + "/"
        names = {
            p[len(prefix):].split("/")[0]
            for p in self.file_contents
            if p.startswith(prefix)
        }
        if not names:
            raise FileNotFoundError(f"No mock directory: {path}")
        return sorted(names)


def sysfs_interface(
    name: str,
    *,
    device: bool = True,
    virtual: bool = False,
    type_code: str | None = "1",
    speed: str | Exception | None = None,
    address: str | None = None,
) -> dict[str, str | Exception]:
    """Build mocked sysfs entries for one interface."""
    base = f"/sys/class/net/{name}"
    files: dict[str, str | Exception] = {}
    if type_code is not None:
        files[f"{base}/type"] = f"{type_code}\n"
    if device:
        files[f"{base}/device"] = ""
    if virtual:
        files[f"/sys/devices/virtual/net/{name}/type"] = f"{type_code or 1}\n"
    if speed is not None:
        files[f"{base}/speed"] = speed if isinstance(speed, Exception) else f"{speed}\n"
    if address is not None:
        files[f"{base}/address"] = f"{address}\n"
    return files


def sysfs(*interfaces: dict[str, str | Exception]) -> dict[str, str | Exception]:
    """Merge interface entries; loopback is always present."""
    files: dict[str, str | Exception] = sysfs_interface("lo", device=False, type_code="772")
    for entries in interfaces:
        files.update(entries)
    return files


class FakePort:
    """
    Scripted HardwareQueryPort.

    Each NIC is a dict with optional keys: driver, speed, mac, ring
    (RingSettings), accept ((rx, tx) the hardware settles on after a set),
    set_error and requery_error (exceptions). Missing query keys raise
    HardwareQueryError. Tracks peak concurrent set_ring calls.
    """

    def __init__(
        self,
        nics: dict[str, dict] | None = None,
        set_delay: float = 0.0,
        barrier: threading.Barrier | None = None,
    ):
        self.nics = nics or {}
        self.set_delay = set_delay
        self.barrier = barrier
        self.set_calls: list[tuple[str, int, int]] = []
        self.in_flight = 0
        self.peak_in_flight = 0
        self._lock = threading.Lock()
        self._set_done: set[str] = set()

    def _nic(self, name: str) -> dict:
        if name not in self.nics:
            raise HardwareQueryError(f"No such device: {name}")
        return self.nics[name]

    def _field(self, name: str, key: str):
        nic = self._nic(name)
        if key not in nic:
            raise HardwareQueryError(f"No {key} for {name}")
        return nic[key]

    def driver_of(self, name: str) -> str:
        return self._field(name, "driver")

    def speed_of(self, name: str) -> int:
        return self._field(name, "speed")

    def mac_of(self, name: str) -> str:
        return self._field(name, "mac")

    def ring_settings_of(self, name: str) -> RingSettings:
        nic = self._nic(name)
        if name in self._set_done and "requery_error" in nic:
            raise nic["requery_error"]
        return self._field(name, "ring")

    def set_ring(self, name: str, rx: int, tx: int) -> None:
        with self._lock:
            self.set_calls.append((name, rx, tx))
            self.in_flight += 1
            self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.barrier is not None:
                self.barrier.wait()
            if self.set_delay:
                time.sleep(self.set_delay)

            nic = self._nic(name)
            if "set_error" in nic:
                raise nic["set_error"]

            ring = nic["ring"]
            accept_rx, accept_tx = nic.get("accept", (rx, tx))
            nic["ring"] = RingSettings(
                rx_current=accept_rx,
                tx_current=accept_tx,
                rx_max=ring.rx_max,
                tx_max=ring.tx_max,
            )
            self._set_done.add(name)
        finally:
            with self._lock:
                self.in_flight -= 1


@pytest.fixture
def mock_context():
    """Factory fixture for creating MockContext instances."""
    def _create(**kwargs) -> MockContext:
        return MockContext(**kwargs)
    return _create


@pytest.fixture
def fake_port():
    """Factory fixture for creating FakePort instances."""
    def _create(nics=None, **kwargs) -> FakePort:
        return FakePort(nics, **kwargs)
    return _create


def load_fixture(category: str, name: str) -> str:
    """Load a fixture file by category and name."""
    fixture_path = FIXTURES_DIR / category / name
    if not fixture_path.exists():
        raise FileNotFoundError(f"Fixture not found: {fixture_path}")
    return fixture_path.read_text()
