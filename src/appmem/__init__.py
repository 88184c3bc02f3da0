"""appmem - per-application memory usage report."""

__version__ = "0.1.0"
