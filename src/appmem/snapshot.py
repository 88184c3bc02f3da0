"""Process snapshot source backed by psutil."""

import os
from dataclasses import dataclass, field
from typing import Any

import psutil

from appmem.errors import SnapshotError
from appmem.logging import get_logger
from appmem.models import ProcessRecord

log = get_logger()

# Attributes fetched for every process in one pass
PROCESS_ATTRS = ["pid", "name", "cmdline", "memory_info"]


@dataclass(slots=True, frozen=True)
class Snapshot:
    """All readable processes plus system memory at one point in time."""

    records: list[ProcessRecord] = field(default_factory=list)
    system_memory_bytes: int = 0
    skipped: int = 0  # Processes that vanished or could not be read


def command_name(cmdline: list[str] | None, fallback: str | None) -> str:
    """
    Derive the command name from argv[0].

    Processes that rewrite their title (``nginx: master process``) keep
    everything in argv[0], so it is cut at the first space before taking
    the base name, and a trailing colon is dropped. Falls back to the OS
    process name.
    """
    argv0 = cmdline[0].split(" ", 1)[0] if cmdline else ""
    name = os.path.basename(argv0.rstrip("/")).rstrip(":")
    return name or (fallback or "")


def to_record(info: dict[str, Any]) -> ProcessRecord | None:
    """Build a ProcessRecord from a ``process_iter`` info dict, or None if unreadable."""
    mem_info = info.get("memory_info")
    if mem_info is None:
        # AccessDenied on memory_info comes back as None
        return None

    cmdline = info.get("cmdline") or []
    name = command_name(cmdline, info.get("name"))
    if not name:
        return None

    return ProcessRecord(
        pid=info.get("pid", 0),
        command_name=name,
        arguments=tuple(cmdline[1:]),
        memory_bytes=max(0, int(mem_info.rss)),
    )


def collect_records(include_empty: bool = False) -> tuple[list[ProcessRecord], int]:
    """
    Collect one ProcessRecord per readable live process.

    Processes whose memory cannot be read are skipped. Processes without
    resident memory (kernel threads) are dropped unless ``include_empty``
    is set; they do not count as skipped.

    Returns:
        The records and the number of skipped processes.

    Raises:
        SnapshotError: If the process table cannot be enumerated at all.
    """
    records: list[ProcessRecord] = []
    skipped = 0

    try:
        for proc in psutil.process_iter(attrs=PROCESS_ATTRS):
            # process_iter drops processes that vanish and reports denied
            # attributes as None
            record = to_record(proc.info)
            if record is None:
                skipped += 1
                log.debug("Skipping unreadable process %s", proc.pid)
                continue
            if record.memory_bytes == 0 and not include_empty:
                continue
            records.append(record)
    except (psutil.Error, OSError) as e:
        raise SnapshotError(f"Cannot enumerate processes: {e}") from e

    return records, skipped


def system_memory() -> int:
    """Installed physical memory in bytes."""
    try:
        total = psutil.virtual_memory().total
    except (psutil.Error, OSError) as e:
        raise SnapshotError(f"Cannot read system memory: {e}") from e
    if total <= 0:
        raise SnapshotError("System reported no physical memory")
    return total


def take_snapshot(include_empty: bool = False) -> Snapshot:
    """Take a fresh snapshot of the process table."""
    total = system_memory()
    records, skipped = collect_records(include_empty=include_empty)
    log.debug("Collected %d processes, skipped %d", len(records), skipped)
    return Snapshot(records=records, system_memory_bytes=total, skipped=skipped)
