from __future__ import annotations

from typing import Any, Dict

from rich import box
from rich.table import Table

from appmem.logging import console
from appmem.models import BYTES_PER_MB, Report


def format_mb(value: float) -> str:
    return f"{value:.2f}"


def format_percent(value: float) -> str:
    return f"{value:.2f}%"


def build_report_table(report: Report) -> Table:
    t = Table(title="Memory by Application", box=box.SIMPLE_HEAVY, show_lines=False)
    t.add_column("Application", overflow="fold")
    for h in ("Num", "Memory(MB)", "%", "Cum.%"):
        t.add_column(h, justify="right", no_wrap=True)
    for row in report.rows:
        t.add_row(
            row.name,
            str(row.count),
            format_mb(row.total_memory_mb),
            format_percent(row.percent),
            format_percent(row.cumulative_percent),
        )

    caption = (
        f"{len(report.rows)} of {report.group_count} applications, "
        f"{report.process_count} processes, {format_mb(report.grand_total_mb)} MB total"
    )
    if report.system_memory_bytes:
        caption += f" of {format_mb(report.system_memory_bytes / BYTES_PER_MB)} MB installed"
    t.caption = caption
    return t


def report_to_dict(report: Report) -> Dict[str, Any]:
    return {
        "rows": [
            {
                "name": row.name,
                "count": row.count,
                "memory_bytes": row.total_memory_bytes,
                "memory_mb": round(row.total_memory_mb, 2),
                "percent": round(row.percent, 2),
                "cumulative_percent": round(row.cumulative_percent, 2),
            }
            for row in report.rows
        ],
        "grand_total_bytes": report.grand_total_bytes,
        "process_count": report.process_count,
        "group_count": report.group_count,
        "system_memory_bytes": report.system_memory_bytes,
        "truncated": report.truncated,
    }


def print_report(report: Report, as_json: bool = False) -> None:
    if as_json:
        console().print_json(data=report_to_dict(report))
    else:
        console().print(build_report_table(report))
