"""Data models for appmem."""

from dataclasses import dataclass

BYTES_PER_MB = 1024 * 1024


@dataclass(slots=True, frozen=True)
class ProcessRecord:
    """Immutable view of one live process at snapshot time."""

    pid: int
    command_name: str  # argv[0] base name, e.g. 'java', 'chrome'
    arguments: tuple[str, ...]  # argv[1:]
    memory_bytes: int  # Resident set size


@dataclass(slots=True)
class GroupEntry:
    """Running totals for one resolved name during an aggregation pass."""

    name: str
    count: int
    total_memory_bytes: int

    def add(self, record: ProcessRecord) -> None:
        """Fold another process into this group."""
        self.count += 1
        self.total_memory_bytes += record.memory_bytes


@dataclass(slots=True, frozen=True)
class RankedRow:
    """One output row of the ranked report."""

    name: str
    count: int
    total_memory_bytes: int
    percent: float
    cumulative_percent: float

    @property
    def total_memory_mb(self) -> float:
        """Total memory in megabytes, for display."""
        return self.total_memory_bytes / BYTES_PER_MB


@dataclass(slots=True, frozen=True)
class Report:
    """Result of one snapshot-to-report pass."""

    rows: list[RankedRow]
    grand_total_bytes: int  # Sum over all groups, including dropped rows
    process_count: int
    group_count: int
    system_memory_bytes: int | None = None

    @property
    def grand_total_mb(self) -> float:
        """Grand total in megabytes."""
        return self.grand_total_bytes / BYTES_PER_MB

    @property
    def truncated(self) -> bool:
        """Whether some groups were left out of ``rows``."""
        return len(self.rows) < self.group_count
