"""Ring buffer optimization with bounded parallelism."""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable

from hpcnic.core.ethtool import HardwareQueryError, HardwareQueryPort
from hpcnic.core.logging import NullLogger
from hpcnic.core.models import (
    FailureKind,
    LinkType,
    NICRecord,
    OptimizationOutcome,
    SkipReason,
)


class OptimizationEngine:
    """
    Raises ring buffers to their hardware maxima.

    The only component that mutates NIC state. Every mutation is verified
    by re-reading the ring settings; the record is updated with what the
    hardware actually reports.
    """

    def __init__(self, port: HardwareQueryPort, logger=None):
        self.port = port
        self.logger = logger or NullLogger()

    def classify(self, record: NICRecord) -> OptimizationOutcome | None:
        """
        Decide whether a record needs a mutation.

        Returns:
            A finished outcome for ineligible records, None if eligible
        """
        if record.link_type is LinkType.INFINIBAND:
            self.logger.info(
                f"Skipping Infiniband interface {record.name} "
                "(not supported for ring buffer optimization)",
                interface=record.name,
            )
            return OptimizationOutcome(record, skip_reason=SkipReason.INFINIBAND)
        elif record.link_type is LinkType.UNKNOWN:
            self.logger.info(
                f"Skipping interface {record.name} with unknown link type",
                interface=record.name,
            )
            return OptimizationOutcome(record, skip_reason=SkipReason.UNKNOWN_LINK_TYPE)
        elif record.link_type is not LinkType.ETHERNET:
            raise ValueError(f"Unhandled link type: {record.link_type}")

        if record.ring is None or record.rx_max <= 0 or record.tx_max <= 0:
            detail = (
                f"Invalid max values for {record.name}: "
                f"RX={record.rx_max}, TX={record.tx_max}"
            )
            if record.ring is None:
                detail = f"Ring buffer maxima unknown for {record.name}"
            self.logger.error(detail, interface=record.name)
            return OptimizationOutcome(
                record,
                failure=FailureKind.CONFIGURATION_DEFECT,
                detail=detail,
            )

        if record.is_optimal:
            self.logger.debug(
                f"{record.name} is already optimized "
                f"(RX: {record.rx_current}/{record.rx_max}, "
                f"TX: {record.tx_current}/{record.tx_max})",
                interface=record.name,
            )
            return OptimizationOutcome(record, skip_reason=SkipReason.ALREADY_OPTIMAL)

        return None

    def optimize_one(
        self,
        record: NICRecord,
        slots: threading.BoundedSemaphore,
    ) -> OptimizationOutcome:
        """
        Set one record's rings to their maxima and verify the result.

        Holds one worker slot for the whole set/verify round trip.
        """
        rx, tx = record.rx_max, record.tx_max
        requested = (rx, tx)

        with slots:
            self.logger.info(
                f"Optimizing Ethernet NIC: {record.name} "
                f"(Speed: {record.speed_mbps}Mbps, Driver: {record.driver or '-'})",
                interface=record.name,
                rx=rx,
                tx=tx,
            )
            try:
                self.port.set_ring(record.name, rx, tx)
            except HardwareQueryError as e:
                return self._failed(
                    record, requested, f"Failed to set ring buffer for {record.name} "
                    f"to RX={rx}, TX={tx}: {e}"
                )

            try:
                observed = self.port.ring_settings_of(record.name)
            except HardwareQueryError as e:
                return self._failed(
                    record, requested, f"Could not verify ring buffer for {record.name} "
                    f"after setting RX={rx}, TX={tx}: {e}"
                )

        record.ring = observed
        if observed.rx_current != rx or observed.tx_current != tx:
            return self._failed(
                record,
                requested,
                f"Ring buffer for {record.name} did not converge: requested "
                f"RX={rx}, TX={tx}, hardware reports "
                f"RX={observed.rx_current}, TX={observed.tx_current}",
            )

        self.logger.info(
            f"Successfully optimized {record.name} (RX: {rx}, TX: {tx})",
            interface=record.name,
            rx=rx,
            tx=tx,
        )
        return OptimizationOutcome(record, changed=True, requested=requested)

    def _failed(
        self,
        record: NICRecord,
        requested: tuple[int, int],
        detail: str,
    ) -> OptimizationOutcome:
        self.logger.error(detail, interface=record.name, rx=requested[0], tx=requested[1])
        return OptimizationOutcome(
            record,
            failure=FailureKind.MUTATION_FAILURE,
            detail=detail,
            requested=requested,
        )

    def optimize_all(
        self,
        records: Iterable[NICRecord],
        max_workers: int,
    ) -> list[OptimizationOutcome]:
        """
        Optimize every eligible record with at most max_workers in flight.

        Args:
            records: Records from one discovery pass
            max_workers: Maximum concurrent mutations (1 = serial)

        Returns:
            One outcome per record, sorted by interface name
        """
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")

        outcomes: list[OptimizationOutcome] = []
        eligible: list[NICRecord] = []

        for record in records:
            outcome = self.classify(record)
            if outcome is None:
                eligible.append(record)
            else:
                outcomes.append(outcome)

        self.logger.info(
            f"Found {len(eligible)} Ethernet interfaces for optimization "
            f"(skipped {len(outcomes)})",
            interfaces=[r.name for r in eligible],
        )

        if eligible:
            slots = threading.BoundedSemaphore(max_workers)
            # one thread per record; the semaphore alone bounds concurrent mutations
            with ThreadPoolExecutor(max_workers=len(eligible)) as executor:
                futures = {
                    executor.submit(self.optimize_one, record, slots): record
                    for record in eligible
                }
                for future, record in futures.items():
                    try:
                        outcomes.append(future.result())
                    except Exception as e:
                        outcomes.append(
                            self._failed(
                                record,
                                (record.rx_max, record.tx_max),
                                f"Unexpected error optimizing {record.name}: {e}",
                            )
                        )

        changed = sum(1 for o in outcomes if o.changed)
        self.logger.info(
            f"Optimization complete: {changed} of {len(eligible)} Ethernet NICs optimized",
            changed=changed,
            eligible=len(eligible),
            failed=sum(1 for o in outcomes if not o.ok),
        )

        outcomes.sort(key=lambda o: o.record.name)
        return outcomes
