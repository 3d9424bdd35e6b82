"""Core hpcnic functionality."""

from hpcnic.core.catalog import EnumerationError, InterfaceCatalog
from hpcnic.core.context import Context
from hpcnic.core.ethtool import EthtoolPort, HardwareQueryError, HardwareQueryPort
from hpcnic.core.models import (
    FailureKind,
    LinkType,
    NICRecord,
    OptimizationOutcome,
    RingSettings,
    SkipReason,
)
from hpcnic.core.monitor import MonitorLoop, MonitorState
from hpcnic.core.optimizer import OptimizationEngine
from hpcnic.core.output import Output
from hpcnic.core.report import build_report, render_report

__all__ = [
    "Context",
    "EnumerationError",
    "EthtoolPort",
    "FailureKind",
    "HardwareQueryError",
    "HardwareQueryPort",
    "InterfaceCatalog",
    "LinkType",
    "MonitorLoop",
    "MonitorState",
    "NICRecord",
    "OptimizationEngine",
    "OptimizationOutcome",
    "Output",
    "RingSettings",
    "SkipReason",
    "build_report",
    "render_report",
]
