"""Report data for discovered NICs and optimization outcomes."""

from typing import Any

from hpcnic.core.models import LinkType, NICRecord, OptimizationOutcome
from hpcnic.core.output import Output


def interface_status(record: NICRecord, outcome: OptimizationOutcome | None) -> str:
    """Display status for one interface."""
    if outcome is not None and outcome.failure is not None:
        return "FAILED"

    if record.link_type is LinkType.INFINIBAND:
        return "SKIPPED"
    elif record.link_type is LinkType.UNKNOWN:
        return "SKIPPED"
    elif record.link_type is not LinkType.ETHERNET:
        raise ValueError(f"Unhandled link type: {record.link_type}")

    if not ring_supported(record):
        return "UNKNOWN"
    return "OPTIMIZED" if record.is_optimal else "SUB-OPTIMAL"


def ring_supported(record: NICRecord) -> bool:
    """True if ring maxima were read and are usable."""
    return record.ring is not None and record.ring.maxima_known


def ring_display(record: NICRecord) -> str:
    if record.link_type is LinkType.INFINIBAND:
        return "N/A"
    if record.ring is None:
        return "-"
    return (
        f"{record.rx_current}/{record.tx_current} "
        f"(max {record.rx_max}/{record.tx_max})"
    )


def build_report(
    records: list[NICRecord],
    outcomes: list[OptimizationOutcome],
) -> dict[str, Any]:
    """
    Combine records and their outcomes into report data.

    The optimized ratio counts Ethernet interfaces only; Infiniband and
    unclassified links are never tuned and stay out of the denominator.
    """
    by_name = {o.record.name: o for o in outcomes}
    rows = []
    for record in sorted(records, key=lambda r: r.name):
        outcome = by_name.get(record.name)
        row = record.to_dict()
        row["status"] = interface_status(record, outcome)
        row["ring_display"] = ring_display(record)
        row["outcome"] = outcome.to_dict() if outcome else None
        rows.append(row)

    ethernet = [r for r in records if r.link_type is LinkType.ETHERNET]
    optimized = sum(1 for r in ethernet if r.is_optimal)
    failed = [o for o in outcomes if not o.ok]

    return {
        "interfaces": rows,
        "summary": {
            "total": len(records),
            "ethernet": len(ethernet),
            "infiniband": sum(1 for r in records if r.link_type is LinkType.INFINIBAND),
            "unknown": sum(1 for r in records if r.link_type is LinkType.UNKNOWN),
            "optimized": optimized,
            "optimized_ratio": f"{optimized}/{len(ethernet)}",
            "changed": sum(1 for o in outcomes if o.changed),
            "failed": len(failed),
        },
        "issues": [
            {
                "severity": "error",
                "interface": o.record.name,
                "kind": o.failure.value,
                "message": o.detail,
            }
            for o in sorted(failed, key=lambda o: o.record.name)
        ],
    }


def render_report(
    records: list[NICRecord],
    outcomes: list[OptimizationOutcome],
    output: Output | None = None,
    format: str = "plain",
    title: str | None = None,
) -> Output:
    """Build the report, print it and return the populated Output."""
    output = output or Output()
    data = build_report(records, outcomes)
    output.emit(data)
    summary = data["summary"]
    output.set_summary(
        f"total={summary['total']}, optimized={summary['optimized_ratio']}, "
        f"failed={summary['failed']}"
    )
    output.render(format, title)
    return output
