"""Hardware query port and its ethtool-backed implementation."""

import re
from typing import Protocol

from hpcnic.core.context import Context
from hpcnic.core.models import RingSettings
from hpcnic.lib.filesystem import FileError, read_file
from hpcnic.lib.process import CommandError, run_command


class HardwareQueryError(Exception):
    """Error querying or changing NIC hardware state."""

    pass


class HardwareQueryPort(Protocol):
    """Per-interface queries and mutations of NIC hardware state.

    Every method raises HardwareQueryError on failure. Calls for different
    interfaces may run concurrently.
    """

    def driver_of(self, name: str) -> str: ...

    def speed_of(self, name: str) -> int: ...

    def mac_of(self, name: str) -> str: ...

    def ring_settings_of(self, name: str) -> RingSettings: ...

    def set_ring(self, name: str, rx: int, tx: int) -> None: ...


def parse_driver(text: str) -> str | None:
    """Extract the driver name from ``ethtool -i`` output."""
    for line in text.split("\n"):
        key, _, value = line.partition(":")
        if key.strip() == "driver" and value.strip():
            return value.strip()
    return None


def parse_speed(speed_str: str) -> int | None:
    """Parse speed string and return value in Mbps."""
    if not speed_str or speed_str in ("Unknown!", "N/A", ""):
        return None

    # Handle formats like "200000Mb/s", "100Mb/s"
    match = re.match(r"(\d+)\s*Mb/s", speed_str, re.IGNORECASE)
    if match:
        return int(match.group(1))

    # Handle formats like "10Gb/s", "400Gb/s"
    match = re.match(r"(\d+)\s*Gb/s", speed_str, re.IGNORECASE)
    if match:
        return int(match.group(1)) * 1000

    return None


def parse_link_speed(text: str) -> int | None:
    """Extract link speed from plain ``ethtool`` output."""
    for line in text.split("\n"):
        line = line.strip()
        if line.startswith("Speed:"):
            return parse_speed(line.split(":", 1)[1].strip())
    return None


def parse_ring_settings(text: str) -> RingSettings | None:
    """
    Parse ``ethtool -g`` output.

    Fields the driver reports as ``n/a`` or omits are returned as 0,
    which downstream treats as unknown.

    Returns:
        RingSettings, or None if neither section is present
    """
    sections: dict[str, dict[str, int]] = {}
    section = None

    for line in text.split("\n"):
        line = line.strip()
        if "Pre-set maximums" in line:
            section = sections.setdefault("preset_max", {})
        elif "Current hardware settings" in line:
            section = sections.setdefault("current", {})
        elif section is not None and ":" in line:
            key, _, value = line.partition(":")
            try:
                section[key.strip().lower()] = int(value.strip())
            except ValueError:
                continue

    if not sections:
        return None

    preset = sections.get("preset_max", {})
    current = sections.get("current", {})
    return RingSettings(
        rx_current=current.get("rx", 0),
        tx_current=current.get("tx", 0),
        rx_max=preset.get("rx", 0),
        tx_max=preset.get("tx", 0),
    )


class EthtoolPort:
    """HardwareQueryPort backed by the ethtool CLI and sysfs."""

    def __init__(self, context: Context | None = None):
        self.context = context or Context()

    def _ethtool(self, *args: str) -> str:
        try:
            return run_command(["ethtool", *args], context=self.context, check=True)
        except CommandError as e:
            raise HardwareQueryError(str(e)) from e

    def driver_of(self, name: str) -> str:
        driver = parse_driver(self._ethtool("-i", name))
        if driver is None:
            raise HardwareQueryError(f"Driver not found for {name}")
        return driver

    def speed_of(self, name: str) -> int:
        speed = parse_link_speed(self._ethtool(name))
        if speed is None:
            raise HardwareQueryError(f"Speed not found for {name}")
        return speed

    def mac_of(self, name: str) -> str:
        try:
            mac = read_file(f"/sys/class/net/{name}/address", context=self.context).strip()
        except FileError as e:
            raise HardwareQueryError(str(e)) from e
        if not mac:
            raise HardwareQueryError(f"MAC address not found for {name}")
        return mac

    def ring_settings_of(self, name: str) -> RingSettings:
        ring = parse_ring_settings(self._ethtool("-g", name))
        if ring is None:
            raise HardwareQueryError(f"Ring buffer settings not found for {name}")
        return ring

    def set_ring(self, name: str, rx: int, tx: int) -> None:
        self._ethtool("-G", name, "rx", str(rx), "tx", str(tx))
