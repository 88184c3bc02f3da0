"""Group resolved processes and rank the groups by memory."""

from collections.abc import Iterable, Iterator, Mapping

from appmem.config import RelativeTo, ReportSettings
from appmem.models import GroupEntry, ProcessRecord, RankedRow, Report
from appmem.resolver import resolve_name


def resolve_all(
    records: Iterable[ProcessRecord], settings: ReportSettings
) -> Iterator[tuple[ProcessRecord, str]]:
    """Pair every record with its resolved name."""
    for record in records:
        yield record, resolve_name(record, settings.java_by, settings.launchers)


def aggregate(pairs: Iterable[tuple[ProcessRecord, str]]) -> dict[str, GroupEntry]:
    """Fold (record, name) pairs into one GroupEntry per name."""
    groups: dict[str, GroupEntry] = {}
    for record, name in pairs:
        entry = groups.get(name)
        if entry is None:
            groups[name] = GroupEntry(name=name, count=1, total_memory_bytes=record.memory_bytes)
        else:
            entry.add(record)
    return groups


def rank(
    groups: Mapping[str, GroupEntry] | Iterable[GroupEntry],
    limit: int | None = None,
    total: int | None = None,
) -> list[RankedRow]:
    """
    Sort groups by memory and annotate them with percentages.

    Args:
        groups: The aggregated groups, as a mapping or a plain iterable.
        limit: Maximum number of rows; None or a non-positive value keeps all.
        total: Percentage denominator. Defaults to the sum over all groups.

    Returns:
        Rows in descending memory order, ties broken by ascending name.
        Rows past ``limit`` are dropped without being folded into the
        remaining ones, so the last cumulative percentage only reaches 100
        when every group is shown.
    """
    entries = list(groups.values()) if isinstance(groups, Mapping) else list(groups)
    denominator = sum(e.total_memory_bytes for e in entries) if total is None else total

    ordered = sorted(entries, key=lambda e: (-e.total_memory_bytes, e.name))
    if limit is not None and limit > 0:
        ordered = ordered[:limit]

    rows: list[RankedRow] = []
    cumulative = 0.0
    for entry in ordered:
        percent = entry.total_memory_bytes * 100 / denominator if denominator > 0 else 0.0
        cumulative += percent
        rows.append(
            RankedRow(
                name=entry.name,
                count=entry.count,
                total_memory_bytes=entry.total_memory_bytes,
                percent=percent,
                cumulative_percent=cumulative,
            )
        )
    return rows


def build_report(
    records: Iterable[ProcessRecord],
    settings: ReportSettings,
    system_memory_bytes: int | None = None,
) -> Report:
    """Run one snapshot through resolution, aggregation and ranking."""
    records = list(records)
    groups = aggregate(resolve_all(records, settings))
    grand_total = sum(g.total_memory_bytes for g in groups.values())

    total = None
    if settings.relative_to is RelativeTo.SYSTEM and system_memory_bytes:
        total = system_memory_bytes

    return Report(
        rows=rank(groups, limit=settings.row_limit, total=total),
        grand_total_bytes=grand_total,
        process_count=len(records),
        group_count=len(groups),
        system_memory_bytes=system_memory_bytes,
    )
