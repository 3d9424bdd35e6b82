"""Ring buffer tuning for high-speed HPC network interfaces."""

__version__ = "0.1.0"
