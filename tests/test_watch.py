"""
Tests for watch mode. Passes are driven directly; the observer is not started.
"""

import threading
import time

import pytest
from envdrift.core.config import EnvDriftConfig
from envdrift.core.syncer import ENVDRIFT_SIGNATURE
from envdrift.watch import EnvWatcher


@pytest.fixture
def project(tmp_path):
    (tmp_path / ".env").write_text("NODE_ENV=production\nAPI_KEY=secret\n")
    return tmp_path


class TestSyncPass:
    """Test a single regeneration pass."""

    def test_writes_example(self, project):
        summaries = []
        watcher = EnvWatcher(EnvDriftConfig(), str(project), on_sync=summaries.append)

        watcher.process_change()

        content = (project / ".env.example").read_text()
        assert content.startswith(ENVDRIFT_SIGNATURE)
        assert "API_KEY=YOUR_API_KEY_HERE" in content
        assert summaries[0].added == ["NODE_ENV", "API_KEY"]
        assert summaries[0].scrubbed == 1

    def test_no_write_when_unchanged(self, project):
        summaries = []
        watcher = EnvWatcher(EnvDriftConfig(), str(project), on_sync=summaries.append)

        watcher.process_change()
        watcher.process_change()

        assert len(summaries) == 1

    def test_dry_run_does_not_write(self, project):
        summaries = []
        watcher = EnvWatcher(EnvDriftConfig(), str(project), dry_run=True, on_sync=summaries.append)

        watcher.process_change()

        assert not (project / ".env.example").exists()
        assert len(summaries) == 1

    def test_missing_env_is_noop(self, tmp_path):
        summaries = []
        watcher = EnvWatcher(EnvDriftConfig(), str(tmp_path), on_sync=summaries.append)
        watcher.process_change()
        assert summaries == []

    def test_errors_reported(self, project):
        errors = []

        def broken(summary):
            raise RuntimeError("boom")

        watcher = EnvWatcher(EnvDriftConfig(), str(project), on_sync=broken, on_error=errors.append)
        watcher.process_change()

        assert len(errors) == 1
        assert str(errors[0]) == "boom"


class TestCoalescing:
    """Changes during a pass queue a single follow-up pass."""

    def test_reentrant_change_runs_once_more(self, project, monkeypatch):
        watcher = EnvWatcher(EnvDriftConfig(), str(project))
        calls = []

        def fake_sync():
            calls.append(1)
            if len(calls) == 1:
                # Two changes arrive while the first pass is running
                watcher.process_change()
                watcher.process_change()

        monkeypatch.setattr(watcher, "_sync_once", fake_sync)
        watcher.process_change()

        assert len(calls) == 2


class TestWatchedPaths:
    """Test which files trigger a pass."""

    def test_env_watched(self, project):
        watcher = EnvWatcher(EnvDriftConfig(), str(project))
        assert watcher.is_watched(str(project / ".env"))
        assert not watcher.is_watched(str(project / ".env.example"))

    def test_env_local_watched_when_present(self, project):
        (project / ".env.local").write_text("A=1\n")
        watcher = EnvWatcher(EnvDriftConfig(), str(project))
        assert watcher.is_watched(str(project / ".env.local"))

    def test_trigger_debounces(self, project):
        watcher = EnvWatcher(EnvDriftConfig(), str(project), debounce=60)
        watcher.trigger()
        first = watcher._timer
        watcher.trigger()
        assert first is not watcher._timer
        assert not first.is_alive() or first.finished.is_set()
        watcher.stop()
        assert watcher._timer is None


class TestStop:
    """stop() leaves no pass running behind it."""

    def test_stop_waits_for_running_pass(self, project, monkeypatch):
        """A pass in progress finishes before stop() returns."""
        watcher = EnvWatcher(EnvDriftConfig(), str(project))
        started = threading.Event()
        finished = []

        def slow_sync():
            started.set()
            time.sleep(0.2)
            finished.append(True)

        monkeypatch.setattr(watcher, "_sync_once", slow_sync)
        worker = threading.Thread(target=watcher.process_change)
        worker.start()
        assert started.wait(5)

        watcher.stop()

        assert finished == [True]
        worker.join(5)

    def test_no_pass_after_stop(self, project):
        """Changes arriving after stop() are ignored."""
        watcher = EnvWatcher(EnvDriftConfig(), str(project))
        watcher.stop()

        watcher.trigger()
        watcher.process_change()

        assert watcher._timer is None
        assert not (project / ".env.example").exists()

    def test_stop_from_callback_does_not_block(self, project):
        """Calling stop() from on_sync returns without waiting on itself."""
        watcher = EnvWatcher(EnvDriftConfig(), str(project))
        watcher.on_sync = lambda summary: watcher.stop()

        watcher.process_change()

        assert (project / ".env.example").exists()
