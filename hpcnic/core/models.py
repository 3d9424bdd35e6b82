"""NIC records and optimization outcomes."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

# ARPHRD_* values exposed in /sys/class/net/<iface>/type
ARPHRD_ETHER = 1
ARPHRD_INFINIBAND = 32


class LinkType(Enum):
    """Link layer of an interface."""

    ETHERNET = "Ethernet"
    INFINIBAND = "Infiniband"
    UNKNOWN = "Unknown"

    @classmethod
    def from_arphrd(cls, value: str | int | None) -> "LinkType":
        """Map a sysfs ``type`` value to a link type."""
        try:
            code = int(str(value).strip())
        except ValueError:
            return cls.UNKNOWN

        if code == ARPHRD_ETHER:
            return cls.ETHERNET
        if code == ARPHRD_INFINIBAND:
            return cls.INFINIBAND
        return cls.UNKNOWN


@dataclass(frozen=True)
class RingSettings:
    """Ring buffer depths reported by the hardware."""

    rx_current: int
    tx_current: int
    rx_max: int
    tx_max: int

    @property
    def maxima_known(self) -> bool:
        """False if either maximum is 0, which drivers use for n/a."""
        return self.rx_max > 0 and self.tx_max > 0

    @property
    def at_max(self) -> bool:
        """True if both axes are at a known hardware maximum."""
        return (
            self.maxima_known
            and self.rx_current == self.rx_max
            and self.tx_current == self.tx_max
        )


@dataclass
class NICRecord:
    """A discovered physical network interface."""

    name: str
    link_type: LinkType = LinkType.UNKNOWN
    speed_mbps: int = 0
    driver: str = ""
    mac_address: str = ""
    ring: RingSettings | None = None
    is_physical: bool = True

    @property
    def rx_current(self) -> int:
        return self.ring.rx_current if self.ring else 0

    @property
    def tx_current(self) -> int:
        return self.ring.tx_current if self.ring else 0

    @property
    def rx_max(self) -> int:
        return self.ring.rx_max if self.ring else 0

    @property
    def tx_max(self) -> int:
        return self.ring.tx_max if self.ring else 0

    @property
    def is_optimal(self) -> bool:
        """
        True iff both maxima are known and both axes are at max.

        Computed on every access so it always reflects the latest ring
        state. Meaningless for Infiniband; check optimization_applicable.
        """
        return self.ring is not None and self.ring.at_max

    @property
    def optimization_applicable(self) -> bool:
        """False for link types whose rings are never tuned."""
        return self.link_type is not LinkType.INFINIBAND

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serialisable view."""
        return {
            "name": self.name,
            "link_type": self.link_type.value,
            "speed_mbps": self.speed_mbps,
            "driver": self.driver,
            "mac_address": self.mac_address,
            "ring_known": self.ring is not None,
            "rx_current": self.rx_current,
            "tx_current": self.tx_current,
            "rx_max": self.rx_max,
            "tx_max": self.tx_max,
            "is_optimal": self.is_optimal if self.optimization_applicable else None,
        }


class FailureKind(Enum):
    """Classification of a failed optimization attempt."""

    CONFIGURATION_DEFECT = "configuration_defect"
    MUTATION_FAILURE = "mutation_failure"


class SkipReason(Enum):
    """Why a record was intentionally left untouched."""

    INFINIBAND = "infiniband"
    UNKNOWN_LINK_TYPE = "unknown_link_type"
    ALREADY_OPTIMAL = "already_optimal"


@dataclass
class OptimizationOutcome:
    """Result of one optimization attempt on one record."""

    record: NICRecord
    changed: bool = False
    failure: FailureKind | None = None
    skip_reason: SkipReason | None = None
    detail: str = ""
    requested: tuple[int, int] | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "interface": self.record.name,
            "changed": self.changed,
            "failure": self.failure.value if self.failure else None,
            "skip_reason": self.skip_reason.value if self.skip_reason else None,
            "detail": self.detail,
            "requested": list(self.requested) if self.requested else None,
        }
