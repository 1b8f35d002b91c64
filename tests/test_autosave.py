"""Tests for the autosave coalescer."""

import asyncio

import pytest

from momentum_log.services.autosave import AutosaveCoalescer

DELAY = 0.02


class Recorder:
    """Collects written values, optionally blocking or failing."""

    def __init__(self):
        self.values = []
        self.gate: asyncio.Event | None = None
        self.started = asyncio.Event()
        self.fail = False

    async def write(self, value):
        self.started.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise RuntimeError("disk full")
        self.values.append(value)


class TestAutosaveCoalescer:
    """Tests for AutosaveCoalescer."""

    async def test_debounce_keeps_latest(self):
        """Test rapid edits produce one write of the last value."""
        recorder = Recorder()
        saver = AutosaveCoalescer(recorder.write, delay=DELAY)

        for value in (1, 2, 3):
            saver.schedule(value)
        await asyncio.sleep(DELAY * 5)

        assert recorder.values == [3]
        assert not saver.pending

    async def test_flush_supersedes_timer(self):
        """Test flushing writes immediately and the timer never fires."""
        recorder = Recorder()
        saver = AutosaveCoalescer(recorder.write, delay=DELAY)

        saver.schedule("draft")
        await saver.flush()
        await asyncio.sleep(DELAY * 5)

        assert recorder.values == ["draft"]

    async def test_flush_without_pending_is_noop(self):
        """Test nothing is written when there is nothing to save."""
        recorder = Recorder()
        await AutosaveCoalescer(recorder.write, delay=DELAY).flush()
        assert recorder.values == []

    async def test_newer_value_written_after_inflight_write(self):
        """Test a value scheduled during a write is written after it."""
        recorder = Recorder()
        recorder.gate = asyncio.Event()
        saver = AutosaveCoalescer(recorder.write, delay=DELAY)

        saver.schedule(1)
        await recorder.started.wait()
        saver.schedule(2)
        flush = asyncio.create_task(saver.flush())
        recorder.gate.set()
        await flush
        await asyncio.sleep(DELAY * 5)

        assert recorder.values == [1, 2]

    async def test_flush_failure_keeps_value(self):
        """Test a failed flush raises and the value can be retried."""
        recorder = Recorder()
        recorder.fail = True
        saver = AutosaveCoalescer(recorder.write, delay=DELAY)

        saver.schedule("entry")
        with pytest.raises(RuntimeError):
            await saver.flush()
        assert saver.pending

        recorder.fail = False
        await saver.flush()
        assert recorder.values == ["entry"]

    async def test_close(self):
        """Test close flushes and rejects new values."""
        recorder = Recorder()
        saver = AutosaveCoalescer(recorder.write, delay=10)

        saver.schedule("last")
        await saver.close()

        assert recorder.values == ["last"]
        with pytest.raises(RuntimeError):
            saver.schedule("late")
