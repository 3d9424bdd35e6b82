"""Interface discovery and classification."""

from hpcnic.core.context import Context
from hpcnic.core.ethtool import HardwareQueryError, HardwareQueryPort
from hpcnic.core.logging import NullLogger
from hpcnic.core.models import LinkType, NICRecord
from hpcnic.lib.filesystem import FileError, file_exists, list_dir, read_file

SYSFS_NET = "/sys/class/net"
SYSFS_VIRTUAL_NET = "/sys/devices/virtual/net"
LOOPBACK = "lo"


class EnumerationError(Exception):
    """The host's interface list could not be read at all."""

    pass


class InterfaceCatalog:
    """
    Enumerates physical interfaces at or above a speed threshold.

    Only enumeration itself is fatal. Per-interface query failures either
    drop the interface (classification, speed) or leave a field empty
    (enrichment).
    """

    def __init__(
        self,
        port: HardwareQueryPort,
        context: Context | None = None,
        logger=None,
    ):
        self.port = port
        self.context = context or Context()
        self.logger = logger or NullLogger()

    def list_interfaces(self) -> list[str]:
        """Return all interface names except loopback."""
        try:
            names = list_dir(SYSFS_NET, context=self.context)
        except FileError as e:
            raise EnumerationError(f"Error reading network interfaces: {e}") from e
        return [name for name in names if name != LOOPBACK]

    def is_physical(self, name: str) -> bool:
        """Classify an interface as physical or virtual."""
        if file_exists(f"{SYSFS_VIRTUAL_NET}/{name}", context=self.context):
            return False

        if file_exists(f"{SYSFS_NET}/{name}/device", context=self.context):
            return True

        # No sysfs marker either way; a resolvable driver means real hardware
        try:
            return bool(self.port.driver_of(name))
        except HardwareQueryError:
            return False

    def speed_of(self, name: str) -> int | None:
        """Link speed in Mbps, or None if it can't be determined."""
        try:
            speed = self.port.speed_of(name)
            if speed > 0:
                return speed
        except HardwareQueryError as e:
            self.logger.debug("ethtool speed query failed", interface=name, error=str(e))

        try:
            raw = read_file(f"{SYSFS_NET}/{name}/speed", context=self.context)
            speed = int(raw.strip())
        except (FileError, ValueError):
            return None

        # sysfs reports -1 when there is no link
        return speed if speed > 0 else None

    def link_type_of(self, name: str) -> LinkType:
        try:
            raw = read_file(f"{SYSFS_NET}/{name}/type", context=self.context)
        except FileError:
            return LinkType.UNKNOWN
        return LinkType.from_arphrd(raw)

    def enrich(self, record: NICRecord) -> NICRecord:
        """Fill driver, MAC and ring fields, leaving gaps on failure."""
        name = record.name

        try:
            record.driver = self.port.driver_of(name)
        except HardwareQueryError as e:
            self.logger.warning("Could not resolve driver", interface=name, error=str(e))

        try:
            record.mac_address = self.port.mac_of(name)
        except HardwareQueryError as e:
            self.logger.warning("Could not resolve MAC address", interface=name, error=str(e))

        try:
            record.ring = self.port.ring_settings_of(name)
        except HardwareQueryError as e:
            self.logger.warning(
                "Could not read ring buffer settings", interface=name, error=str(e)
            )

        return record

    def discover(self, min_speed_mbps: int) -> list[NICRecord]:
        """
        Discover high-speed physical interfaces.

        Args:
            min_speed_mbps: Minimum link speed to qualify

        Returns:
            NICRecords sorted by interface name

        Raises:
            EnumerationError: If the interface list can't be read
        """
        records = []

        for name in self.list_interfaces():
            if not self.is_physical(name):
                self.logger.debug("Skipping virtual interface", interface=name)
                continue

            speed = self.speed_of(name)
            if speed is None:
                self.logger.debug("Skipping interface with unknown speed", interface=name)
                continue

            if speed < min_speed_mbps:
                self.logger.debug(
                    "Skipping interface below speed threshold",
                    interface=name,
                    speed_mbps=speed,
                    min_speed_mbps=min_speed_mbps,
                )
                continue

            record = NICRecord(
                name=name,
                link_type=self.link_type_of(name),
                speed_mbps=speed,
                is_physical=True,
            )
            records.append(self.enrich(record))

        records.sort(key=lambda r: r.name)
        self.logger.info(
            f"Found {len(records)} high-speed physical NICs (>= {min_speed_mbps}Mbps)",
            interfaces=[r.name for r in records],
        )
        return records
