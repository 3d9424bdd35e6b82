"""Report output: the NIC table or JSON."""

import json
from typing import Any

TABLE_WIDTH = 118
ROW_FORMAT = "{:<15} {:<12} {:<10} {:<15} {:<20} {:<25} {:<15}"
HEADERS = (
    "Interface",
    "Speed(Mbps)",
    "Type",
    "Driver",
    "MAC Address",
    "Ring Buffer(RX/TX)",
    "Status",
)
INFINIBAND_NOTE = (
    "NOTE: Infiniband interfaces are skipped as ring buffer "
    "optimization is not applicable"
)


class Output:
    """
    Collects report data and issues, then prints them once.

    Issues come from the ``issues`` list of an emitted report and from
    direct error() calls; both render the same way.
    """

    def __init__(self):
        self.data: dict[str, Any] = {}
        self.issues: list[dict[str, Any]] = []
        self._summary: str | None = None
        self._rendered = False

    def emit(self, data: dict[str, Any]) -> None:
        """Merge report data; an ``issues`` list is appended, not replaced."""
        data = dict(data)
        self.issues.extend(data.pop("issues", []))
        self.data.update(data)

    def error(self, message: str, interface: str | None = None) -> None:
        self.issues.append({"severity": "error", "interface": interface, "message": message})

    @property
    def errors(self) -> list[str]:
        return [i["message"] for i in self.issues if i["severity"] == "error"]

    def set_summary(self, summary: str) -> None:
        self._summary = summary

    @property
    def summary(self) -> str:
        """One line for stderr: explicit summary, else the first error."""
        if self._summary:
            return self._summary
        if self.errors:
            return f"Error: {self.errors[0]}"
        return "ok"

    def to_json(self) -> str:
        return json.dumps({**self.data, "issues": self.issues}, indent=2, default=str)

    def render(self, format: str = "plain", title: str | None = None) -> None:
        """
        Print the report.

        Args:
            format: "json" or "plain"
            title: Heading above the plain table
        """
        if self._rendered:
            return
        self._rendered = True
        print(self.to_json() if format == "json" else self.to_plain(title))

    def to_plain(self, title: str | None = None) -> str:
        lines = []
        if title:
            lines += ["", f"=== {title} ==="]

        lines += [ROW_FORMAT.format(*HEADERS), "-" * TABLE_WIDTH]

        rows = self.data.get("interfaces", [])
        if rows:
            lines += [self._row(row) for row in rows]
            lines += self._summary_lines(self.data.get("summary", {}))
        else:
            lines.append("No high-speed NICs found.")

        if self.issues:
            lines += ["", "Issues:"]
            lines += [
                f"  [{issue['severity'].upper()}] {issue['message']}"
                for issue in self.issues
            ]

        return "\n".join(lines)

    @staticmethod
    def _row(row: dict[str, Any]) -> str:
        # empty driver/MAC/speed render as "-"
        return ROW_FORMAT.format(
            row["name"],
            row["speed_mbps"] or "-",
            row["link_type"],
            row["driver"] or "-",
            row["mac_address"] or "-",
            row["ring_display"],
            row["status"],
        )

    @staticmethod
    def _summary_lines(summary: dict[str, Any]) -> list[str]:
        lines = [
            "-" * TABLE_WIDTH,
            f"SUMMARY: Total: {summary.get('total', 0)} NICs"
            f" | Ethernet: {summary.get('ethernet', 0)}"
            f" | Infiniband: {summary.get('infiniband', 0)}"
            f" | Optimized: {summary.get('optimized_ratio', '0/0')}",
        ]
        if summary.get("changed"):
            lines.append(f"Changed this run: {summary['changed']}")
        if summary.get("infiniband"):
            lines.append(INFINIBAND_NOTE)
        return lines
