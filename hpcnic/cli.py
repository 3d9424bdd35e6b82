"""Command-line interface for optimize-hpc-nic."""

import argparse
import signal
import sys
import threading

from hpcnic import __version__
from hpcnic.core import (
    Context,
    EnumerationError,
    EthtoolPort,
    HardwareQueryPort,
    InterfaceCatalog,
    MonitorLoop,
    OptimizationEngine,
    Output,
    render_report,
)
from hpcnic.core.config import DEFAULT_INTERVAL, DEFAULT_MIN_SPEED, DEFAULT_WORKERS
from hpcnic.core.logging import PROGRAM, RunLogger
from hpcnic.lib.process import check_tool

MODE_QUERY = "query"
MODE_SET = "set"
MODE_MONITOR = "monitor"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog=PROGRAM,
        description="Inspect and raise ring buffer sizes on high-speed HPC NICs",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"{PROGRAM} {__version__}",
    )

    modes = parser.add_mutually_exclusive_group()
    modes.add_argument(
        "-q",
        "--query",
        dest="mode",
        action="store_const",
        const=MODE_QUERY,
        help="Query current ring buffer settings (default)",
    )
    modes.add_argument(
        "-s",
        "--set",
        dest="mode",
        action="store_const",
        const=MODE_SET,
        help="Set ring buffers to hardware maximum",
    )
    modes.add_argument(
        "-m",
        "--monitor",
        dest="mode",
        action="store_const",
        const=MODE_MONITOR,
        help="Monitor and optimize ring buffers continuously",
    )
    parser.set_defaults(mode=MODE_QUERY)

    parser.add_argument(
        "--interval",
        type=int,
        default=DEFAULT_INTERVAL,
        metavar="SECONDS",
        help=f"Monitor interval in seconds (default: {DEFAULT_INTERVAL})",
    )
    parser.add_argument(
        "--min-speed",
        type=int,
        default=DEFAULT_MIN_SPEED,
        metavar="MBPS",
        help=f"Minimum NIC speed in Mbps (default: {DEFAULT_MIN_SPEED})",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=DEFAULT_WORKERS,
        metavar="N",
        help=f"Maximum number of parallel workers (default: {DEFAULT_WORKERS})",
    )
    parser.add_argument(
        "--log",
        default=None,
        metavar="PATH",
        help="Log file path, or 'stdout' (default: ~/var/log/hpcnic/<date>/)",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["plain", "json"],
        default="plain",
        help="Output format (default: plain)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose logging, echoed to stderr",
    )

    return parser


def report_title(min_speed: int, prefix: str) -> str:
    return f"{prefix} High-Speed NICs (>= {min_speed}Mbps)"


def cmd_query(args: argparse.Namespace, catalog: InterfaceCatalog) -> int:
    """Read-only report."""
    records = catalog.discover(args.min_speed)
    output = render_report(
        records,
        [],
        format=args.format,
        title=report_title(args.min_speed, "Configuration Results for All"),
    )
    print(output.summary, file=sys.stderr)
    return 0


def cmd_set(
    args: argparse.Namespace,
    catalog: InterfaceCatalog,
    engine: OptimizationEngine,
    logger: RunLogger,
) -> int:
    """One-shot optimize and report."""
    logger.info("Configuring ring buffers for high-speed NICs")
    records = catalog.discover(args.min_speed)
    outcomes = engine.optimize_all(records, args.workers)
    output = render_report(
        records,
        outcomes,
        format=args.format,
        title=report_title(args.min_speed, "Configuration Results for"),
    )
    print(output.summary, file=sys.stderr)
    return 1 if any(not o.ok for o in outcomes) else 0


def cmd_monitor(
    args: argparse.Namespace,
    catalog: InterfaceCatalog,
    engine: OptimizationEngine,
    logger: RunLogger,
    cancel: threading.Event | None = None,
) -> int:
    """Recurring optimize until SIGINT/SIGTERM."""
    cancel = cancel or threading.Event()

    def render(records, outcomes):
        render_report(
            records,
            outcomes,
            format=args.format,
            title=report_title(args.min_speed, "Current Configuration of"),
        )

    loop = MonitorLoop(
        catalog,
        engine,
        render,
        min_speed_mbps=args.min_speed,
        max_workers=args.workers,
        logger=logger,
    )

    def _stop(signum, frame):
        cancel.set()

    previous = {}
    if threading.current_thread() is threading.main_thread():
        for signum in (signal.SIGINT, signal.SIGTERM):
            previous[signum] = signal.signal(signum, _stop)
    try:
        loop.run(args.interval, cancel)
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)

    logger.info("Shutdown requested, monitor stopped")
    return 0


def main(
    argv: list[str] | None = None,
    context: Context | None = None,
    port: HardwareQueryPort | None = None,
    cancel: threading.Event | None = None,
) -> int:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.workers < 1:
        parser.error("--workers must be at least 1")
    if args.interval < 1:
        parser.error("--interval must be at least 1 second")
    if args.min_speed < 0:
        parser.error("--min-speed must not be negative")

    output = Output()
    context = context or Context()
    if port is None:
        if not check_tool("ethtool", context=context):
            output.error("ethtool not found in PATH")
            print(output.summary, file=sys.stderr)
            return 2
        port = EthtoolPort(context)

    with RunLogger(PROGRAM, log_path=args.log, verbose=args.verbose) as logger:
        logger.info(f"{PROGRAM} starting with mode: {args.mode}", mode=args.mode)
        catalog = InterfaceCatalog(port, context=context, logger=logger)
        engine = OptimizationEngine(port, logger=logger)

        if args.mode == MODE_MONITOR:
            return cmd_monitor(args, catalog, engine, logger, cancel=cancel)

        try:
            if args.mode == MODE_SET:
                return cmd_set(args, catalog, engine, logger)
            return cmd_query(args, catalog)
        except EnumerationError as e:
            logger.error(f"Failed to get NICs: {e}")
            output.error(str(e))
            print(output.summary, file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
