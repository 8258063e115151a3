"""Tests for chunklog.lifecycle — cleanup tasks and exit hooks."""

import signal
import sys
import threading
import time

import pytest

from chunklog.engines import EngineSettings
from chunklog.lib.compile_lib import Level
from chunklog.lifecycle import LifecycleManager, system_logger
from chunklog.logger import Logger

from conftest import RecordingEngine


@pytest.fixture
def notices():
    """Logger the manager reports through, plus its recorder."""
    logger = Logger(prefixes=["SYSTEM"])
    return logger, RecordingEngine(EngineSettings(debug=True), logger)


@pytest.fixture
def lifecycle(notices):
    manager = LifecycleManager(logger=notices[0])
    yield manager
    manager.deactivate()


class TestCleanupRegistry:
    """Registering and unregistering tasks."""

    def test_register_and_query(self, lifecycle):
        lifecycle.register_cleanup_task("db", lambda: None)
        assert lifecycle.has_cleanup_task("db")
        assert lifecycle.task_ids == ["db"]

    def test_overwrite_warns(self, lifecycle, notices):
        lifecycle.register_cleanup_task("db", lambda: None)
        lifecycle.register_cleanup_task("db", lambda: None)
        warning, = notices[1].messages
        assert "already registered" in warning.text
        assert warning.level.name == "WARN"

    def test_unregister(self, lifecycle, notices):
        lifecycle.register_cleanup_task("db", lambda: None)
        lifecycle.unregister_cleanup_task("db")
        assert not lifecycle.has_cleanup_task("db")
        assert notices[1].messages == []

    def test_unregister_unknown_warns(self, lifecycle, notices):
        lifecycle.unregister_cleanup_task("ghost")
        assert "not registered" in notices[1].messages[0].text


class TestRunCleanupTasks:
    """Concurrent, run-once execution."""

    def test_runs_every_task_once(self, lifecycle):
        ran = []
        lifecycle.register_cleanup_task("a", lambda: ran.append("a"))
        lifecycle.register_cleanup_task("b", lambda: ran.append("b"))
        lifecycle.run_cleanup_tasks()
        lifecycle.run_cleanup_tasks()
        assert sorted(ran) == ["a", "b"]
        assert lifecycle.task_ids == []

    def test_tasks_run_concurrently(self, lifecycle):
        barrier = threading.Barrier(2, timeout=5)
        lifecycle.register_cleanup_task("a", barrier.wait)
        lifecycle.register_cleanup_task("b", barrier.wait)
        lifecycle.run_cleanup_tasks()
        assert not barrier.broken

    def test_failure_reported_others_run(self, lifecycle, notices):
        ran = []

        def broken():
            raise OSError("disk full")

        lifecycle.register_cleanup_task("broken", broken)
        lifecycle.register_cleanup_task("fine", lambda: ran.append(True))
        lifecycle.run_cleanup_tasks()
        assert ran == [True]
        error, = notices[1].messages
        assert error.level.name == "ERROR"
        assert "broken" in error.text and "disk full" in error.text

    def test_overlapping_calls_run_once(self, lifecycle):
        ran = []

        def slow():
            time.sleep(0.2)
            ran.append(True)

        lifecycle.register_cleanup_task("slow", slow)
        threads = [threading.Thread(target=lifecycle.run_cleanup_tasks) for _ in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=5)
        assert ran == [True]


class TestShutdown:
    """Exit paths mark loggers exited and clean up."""

    def test_shutdown(self, lifecycle):
        app = Logger(lifecycle=lifecycle)
        cleaned = []
        lifecycle.register_cleanup_task("files", lambda: cleaned.append(True))
        lifecycle.shutdown(1)
        assert app.exited
        assert cleaned == [True]
        assert lifecycle.exited

    def test_shutdown_once(self, lifecycle, notices):
        lifecycle.shutdown(1)
        lifecycle.shutdown(1)
        assert len(notices[1].messages) == 1

    def test_signal_handler(self, lifecycle, notices):
        app = Logger(lifecycle=lifecycle)
        with pytest.raises(SystemExit) as exc_info:
            lifecycle._on_signal(signal.SIGINT, None)
        assert exc_info.value.code == 0
        assert notices[1].texts == ["Manually Finished!"]
        assert app.exited

    def test_finish(self, lifecycle, notices):
        app = Logger(lifecycle=lifecycle)
        lifecycle.finish()
        lifecycle.finish()
        assert notices[1].texts == ["Program finished, code: 0"]
        assert app.exited

    def test_context_manager_reports_exit_code(self, notices):
        with pytest.raises(SystemExit):
            with LifecycleManager(logger=notices[0]):
                raise SystemExit(3)
        assert notices[1].texts == ["Program finished, code: 3"]

    def test_context_manager(self, notices):
        cleaned = []
        with LifecycleManager(logger=notices[0]) as lifecycle:
            assert lifecycle.active
            lifecycle.register_cleanup_task("x", lambda: cleaned.append(True))
        assert not lifecycle.active
        assert cleaned == [True]


class TestHooks:
    """activate() installs signal handlers; deactivate() restores them."""

    def test_activate_installs_handlers(self, lifecycle):
        previous = signal.getsignal(signal.SIGTERM)
        lifecycle.activate()
        assert signal.getsignal(signal.SIGINT) == lifecycle._on_signal
        assert signal.getsignal(signal.SIGTERM) == lifecycle._on_signal
        lifecycle.deactivate()
        assert signal.getsignal(signal.SIGTERM) == previous

    def test_activate_twice(self, lifecycle):
        assert lifecycle.activate() is lifecycle
        assert lifecycle.activate() is lifecycle
        lifecycle.deactivate()
        assert not lifecycle.active


class TestSystemLogger:

    def test_system_prefix(self):
        logger = system_logger()
        prefix, = logger.prefixes
        assert prefix.content == "SYSTEM"
        assert prefix.color.color == "#ffaa00"
        engine, = logger.listeners
        assert engine.debug


class TestUncaughtExceptions:
    """activate() reports exceptions nobody caught."""

    def test_excepthook_installed_and_restored(self, lifecycle):
        previous = sys.excepthook, threading.excepthook
        lifecycle.activate()
        assert sys.excepthook == lifecycle._on_uncaught
        assert threading.excepthook == lifecycle._on_thread_uncaught
        lifecycle.deactivate()
        assert (sys.excepthook, threading.excepthook) == previous

    def test_uncaught_error_logged_and_cleaned_up(self, lifecycle, notices):
        app = Logger(lifecycle=lifecycle)
        cleaned = []
        lifecycle.register_cleanup_task("files", lambda: cleaned.append(True))
        lifecycle.activate()
        try:
            raise ValueError("bad input")
        except ValueError as e:
            sys.excepthook(type(e), e, e.__traceback__)
        message, = notices[1].messages
        assert message.level is Level.ERROR
        assert message.text == "ValueError: bad input"
        assert message.sub_lines
        assert app.exited
        assert cleaned == [True]

    def test_thread_error_logged_without_exiting(self, lifecycle, notices):
        app = Logger(lifecycle=lifecycle)
        lifecycle.activate()

        def crash():
            raise RuntimeError("worker died")

        worker = threading.Thread(target=crash, name="worker")
        worker.start()
        worker.join()
        message, = notices[1].messages
        assert message.level is Level.ERROR
        assert message.text == "Uncaught exception in thread worker"
        assert "RuntimeError: worker died" in "".join(
            chunk.content for chunk in message.sub_lines)
        assert not app.exited
        assert not lifecycle.exited
