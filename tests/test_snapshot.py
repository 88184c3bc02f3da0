"""Tests for the psutil snapshot source."""

import os
from types import SimpleNamespace

import psutil
import pytest

from appmem import snapshot as snapshot_module
from appmem.errors import SnapshotError
from appmem.models import ProcessRecord
from appmem.snapshot import (
    Snapshot,
    collect_records,
    command_name,
    system_memory,
    take_snapshot,
    to_record,
)


def fake_proc(pid, name, cmdline, rss):
    """Build an object shaped like a process_iter() result."""
    mem = None if rss is None else SimpleNamespace(rss=rss)
    return SimpleNamespace(
        pid=pid,
        info={"pid": pid, "name": name, "cmdline": cmdline, "memory_info": mem},
    )


@pytest.fixture
def fake_process_table(monkeypatch):
    """Replace psutil.process_iter with a fixed process table."""
    procs = [
        fake_proc(1, "systemd", ["/sbin/init", "splash"], 8 * 1024**2),
        fake_proc(2, "kthreadd", [], 0),
        fake_proc(10, "chrome", ["/opt/google/chrome/chrome", "--type=renderer"], 100),
        fake_proc(11, "java", ["/usr/bin/java", "-jar", "/opt/app/service.jar"], 50),
        fake_proc(12, "secret", None, None),  # memory_info denied
        fake_proc(13, "nginx", ["nginx: master process /usr/sbin/nginx"], 30),
    ]

    def process_iter(attrs=None):
        assert attrs == snapshot_module.PROCESS_ATTRS
        return iter(procs)

    monkeypatch.setattr(psutil, "process_iter", process_iter)
    return procs


class TestCommandName:
    """Tests for command_name."""

    def test_basename_of_argv0(self):
        """Test directories are stripped from argv[0]."""
        assert command_name(["/usr/lib/jvm/bin/java", "-jar", "x.jar"], "java") == "java"

    def test_rewritten_title(self):
        """Test a process title with spaces is cut at the first space."""
        assert command_name(["postgres: checkpointer"], "postgres") == "postgres"

    def test_fallback_to_process_name(self):
        """Test an empty command line falls back to the OS name."""
        assert command_name([], "kthreadd") == "kthreadd"
        assert command_name(None, "kthreadd") == "kthreadd"
        assert command_name([""], "zombie") == "zombie"

    def test_nothing_known(self):
        """Test no information at all gives an empty name."""
        assert command_name(None, None) == ""


class TestToRecord:
    """Tests for to_record."""

    def test_record_fields(self):
        """Test info dicts map onto ProcessRecord fields."""
        proc = fake_proc(42, "java", ["/usr/bin/java", "-Xmx1g", "Main"], 2048)
        assert to_record(proc.info) == ProcessRecord(
            pid=42,
            command_name="java",
            arguments=("-Xmx1g", "Main"),
            memory_bytes=2048,
        )

    def test_memory_denied(self):
        """Test unreadable memory yields no record."""
        assert to_record(fake_proc(1, "x", ["x"], None).info) is None

    def test_no_name(self):
        """Test a process without any name yields no record."""
        assert to_record(fake_proc(1, None, None, 10).info) is None


class TestCollectRecords:
    """Tests for collect_records against a fake process table."""

    def test_skips_unreadable_and_empty(self, fake_process_table):
        """Test kernel threads are dropped and unreadable processes counted."""
        records, skipped = collect_records()

        assert [r.pid for r in records] == [1, 10, 11, 13]
        assert skipped == 1

    def test_include_empty(self, fake_process_table):
        """Test zero-memory processes are kept on request."""
        records, skipped = collect_records(include_empty=True)

        assert [r.pid for r in records] == [1, 2, 10, 11, 13]
        assert records[1].command_name == "kthreadd"
        assert records[1].arguments == ()
        assert skipped == 1

    def test_title_rewriting_process(self, fake_process_table):
        """Test a rewritten title gives the leading word as command name."""
        records, _ = collect_records()
        assert records[-1].command_name == "nginx"
        assert records[-1].arguments == ()

    def test_enumeration_failure(self, monkeypatch):
        """Test failure to list processes raises SnapshotError."""

        def process_iter(attrs=None):
            raise PermissionError("/proc is not readable")

        monkeypatch.setattr(psutil, "process_iter", process_iter)
        with pytest.raises(SnapshotError, match="enumerate"):
            collect_records()


class TestSystemMemory:
    """Tests for system_memory."""

    def test_reads_total(self, monkeypatch):
        """Test the installed memory total is returned."""
        monkeypatch.setattr(psutil, "virtual_memory", lambda: SimpleNamespace(total=16 * 1024**3))
        assert system_memory() == 16 * 1024**3

    def test_failure(self, monkeypatch):
        """Test an OS error becomes a SnapshotError."""

        def virtual_memory():
            raise FileNotFoundError("/proc/meminfo")

        monkeypatch.setattr(psutil, "virtual_memory", virtual_memory)
        with pytest.raises(SnapshotError, match="system memory"):
            system_memory()

    def test_zero_total(self, monkeypatch):
        """Test a zero total is treated as a failure."""
        monkeypatch.setattr(psutil, "virtual_memory", lambda: SimpleNamespace(total=0))
        with pytest.raises(SnapshotError):
            system_memory()


class TestTakeSnapshot:
    """Tests for take_snapshot."""

    def test_fake_snapshot(self, fake_process_table, monkeypatch):
        """Test the snapshot bundles records, skips and system memory."""
        monkeypatch.setattr(psutil, "virtual_memory", lambda: SimpleNamespace(total=1024**3))
        snap = take_snapshot()

        assert isinstance(snap, Snapshot)
        assert len(snap.records) == 4
        assert snap.skipped == 1
        assert snap.system_memory_bytes == 1024**3

    def test_snapshot_uses_slots(self):
        """Test Snapshot uses __slots__ for memory efficiency."""
        assert not hasattr(Snapshot(), "__dict__")

    def test_live_snapshot(self):
        """Test a snapshot of the real system contains this process."""
        snap = take_snapshot()

        assert snap.system_memory_bytes > 0
        assert len(snap.records) > 0
        pids = {r.pid for r in snap.records}
        assert os.getpid() in pids

        for record in snap.records:
            assert isinstance(record, ProcessRecord)
            assert record.command_name
            assert record.memory_bytes > 0
            assert isinstance(record.arguments, tuple)
