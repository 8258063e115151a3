"""
LifecycleManager — cleanup on shutdown.

Engines that hold resources (file streams, write queues) register a
cleanup task under a unique id. The manager runs every pending task when
the process is ending, which happens one of three ways:

    SIGINT / SIGTERM      warn "Manually Finished!", clean up, exit 0
    uncaught exception    error with the exception, clean up
    interpreter exit      info "Program finished, code: N", clean up
    fatal log             Logger calls shutdown(1), then raises SystemExit

In each case every attached logger is marked exited first, so nothing is
printed once shutdown has begun. There is no module-level instance: create
one, pass it to loggers and engines, and ``activate()`` it.

An exception escaping a worker thread is logged as an error too, but the
process keeps running, so nothing is marked exited.

Usage::

    lifecycle = LifecycleManager().activate()
    logger = Logger(prefixes=['app'], lifecycle=lifecycle)
    ConsoleEngine(None, logger)
    FileStorageEngine(FileStorageSettings(log_folder_path='logs'), logger,
                      lifecycle=lifecycle)
"""

import atexit
import signal
import sys
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Callable, Dict, List

from chunklog.engines import ConsoleEngine, EngineSettings
from chunklog.lib.compile_lib import Prefix
from chunklog.logger import Logger

SYSTEM_PREFIX = 'SYSTEM'
SYSTEM_COLOR = '#ffaa00'
HANDLED_SIGNALS = (signal.SIGINT, signal.SIGTERM)


def system_logger() -> Logger:
    """Logger used for the library's own notices."""
    logger = Logger(prefixes=[Prefix.create(SYSTEM_PREFIX, SYSTEM_COLOR)])
    ConsoleEngine(EngineSettings(debug=True), logger)
    return logger


class LifecycleManager:
    """Registry of cleanup tasks plus the process exit hooks that run them.

    Args:
        logger: Where lifecycle notices go. Defaults to a SYSTEM-prefixed
            logger printing to the terminal, built on first use.
    """

    def __init__(self, logger: Logger = None):
        self._logger = logger
        self._tasks: Dict[str, Callable[[], None]] = {}
        self._tasks_lock = threading.Lock()
        self._run_lock = threading.Lock()
        self._loggers: List[Logger] = []
        self._previous_handlers: Dict[int, object] = {}
        self._previous_excepthook = None
        self._previous_thread_excepthook = None
        self._active = False
        self._exited = False

    @property
    def logger(self) -> Logger:
        if self._logger is None:
            self._logger = system_logger()
        return self._logger

    @property
    def exited(self) -> bool:
        return self._exited

    @property
    def active(self) -> bool:
        return self._active

    # -------------------------------------------------------------------------
    # Cleanup tasks
    # -------------------------------------------------------------------------

    def register_cleanup_task(self, task_id: str, task: Callable[[], None]) -> None:
        """Register ``task`` under ``task_id``, replacing any previous one."""
        with self._tasks_lock:
            replaced = task_id in self._tasks
            self._tasks[task_id] = task
        if replaced:
            self.logger.warn(f"Cleanup task '{task_id}' was already registered and has been replaced")

    def unregister_cleanup_task(self, task_id: str) -> None:
        with self._tasks_lock:
            removed = self._tasks.pop(task_id, None)
        if removed is None:
            self.logger.warn(f"Cleanup task '{task_id}' is not registered")

    def has_cleanup_task(self, task_id: str) -> bool:
        with self._tasks_lock:
            return task_id in self._tasks

    @property
    def task_ids(self) -> List[str]:
        with self._tasks_lock:
            return list(self._tasks)

    def run_cleanup_tasks(self) -> None:
        """Run every registered task concurrently and wait for all of them.

        Tasks run once: the registry is emptied before they start. A call
        made while another is running waits for it, then finds nothing
        left to do. A failing task is reported and does not stop the rest.
        """
        with self._run_lock:
            with self._tasks_lock:
                tasks = dict(self._tasks)
                self._tasks.clear()
            if not tasks:
                return

            with ThreadPoolExecutor(max_workers=len(tasks),
                                    thread_name_prefix='chunklog-cleanup') as pool:
                futures = {pool.submit(task): task_id for task_id, task in tasks.items()}
                for future in as_completed(futures):
                    error = future.exception()
                    if error is not None:
                        self.logger.error(
                            f"Cleanup task '{futures[future]}' failed: "
                            f"{type(error).__name__}: {error}"
                        )

    # -------------------------------------------------------------------------
    # Loggers
    # -------------------------------------------------------------------------

    def attach(self, logger: Logger) -> None:
        """Mark ``logger`` exited when shutdown begins."""
        if logger not in self._loggers:
            self._loggers.append(logger)

    def _finish(self) -> None:
        self._exited = True
        for logger in self._loggers:
            logger.mark_exited()
        self.run_cleanup_tasks()

    def shutdown(self, exit_code: int = 0) -> None:
        """Mark loggers exited and run cleanup. The caller ends the process."""
        if self._exited:
            return
        self.logger.debug(f"Shutting down with exit code {exit_code}")
        self._finish()

    # -------------------------------------------------------------------------
    # Process hooks
    # -------------------------------------------------------------------------

    def _on_signal(self, signum, frame) -> None:
        if self._exited:
            raise SystemExit(0)
        self.logger.warn("Manually Finished!")
        self._finish()
        raise SystemExit(0)

    def _on_uncaught(self, exc_type, exc, tb) -> None:
        """sys.excepthook: report the exception, then clean up."""
        if self._exited or issubclass(exc_type, KeyboardInterrupt):
            self._previous_excepthook(exc_type, exc, tb)
            return
        self.logger.error(exc if exc is not None else exc_type.__name__)
        self._finish()

    def _on_thread_uncaught(self, args) -> None:
        """threading.excepthook: report the exception; the process goes on."""
        if issubclass(args.exc_type, SystemExit):
            return
        if self._exited:
            self._previous_thread_excepthook(args)
            return
        name = args.thread.name if args.thread is not None else 'unknown'
        error = args.exc_value if args.exc_value is not None else args.exc_type.__name__
        self.logger.error(f"Uncaught exception in thread {name}", error)

    def finish(self, exit_code: int = 0) -> None:
        """Normal end of the program: log it, mark loggers exited, clean up."""
        if self._exited:
            return
        self.logger.info(f"Program finished, code: {exit_code}")
        self._finish()

    def _on_exit(self) -> None:
        self.finish()

    def activate(self) -> 'LifecycleManager':
        """Install the atexit hook, the exception hooks and, on the main
        thread, signal handlers."""
        if self._active:
            return self
        atexit.register(self._on_exit)
        self._previous_excepthook = sys.excepthook
        sys.excepthook = self._on_uncaught
        self._previous_thread_excepthook = threading.excepthook
        threading.excepthook = self._on_thread_uncaught
        if threading.current_thread() is threading.main_thread():
            for signum in HANDLED_SIGNALS:
                self._previous_handlers[signum] = signal.signal(signum, self._on_signal)
        self._active = True
        return self

    def deactivate(self) -> None:
        """Remove the hooks installed by ``activate()``."""
        if not self._active:
            return
        atexit.unregister(self._on_exit)
        if sys.excepthook == self._on_uncaught:
            sys.excepthook = self._previous_excepthook
        if threading.excepthook == self._on_thread_uncaught:
            threading.excepthook = self._previous_thread_excepthook
        for signum, previous in self._previous_handlers.items():
            signal.signal(signum, previous if previous is not None else signal.SIG_DFL)
        self._previous_handlers.clear()
        self._active = False

    def __enter__(self) -> 'LifecycleManager':
        return self.activate()

    def __exit__(self, exc_type, exc, tb) -> bool:
        self.deactivate()
        if exc_type is None:
            self.finish(0)
        elif issubclass(exc_type, SystemExit):
            self.finish(exc.code if isinstance(exc.code, int) else 1)
        else:
            self.finish(1)
        return False
