"""Exceptions raised by appmem."""


class AppmemError(Exception):
    """Base class for errors reported to the user."""


class ConfigurationError(AppmemError):
    """Invalid command line option or setting."""


class SnapshotError(AppmemError):
    """The process table or system memory could not be read."""
