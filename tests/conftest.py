"""Shared test fixtures for chunklog test suite."""

import io
import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
from rich.console import Console


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from chunklog.engines import Engine, EngineSettings  # noqa: E402
from chunklog.lib.compile_lib import STANDARD  # noqa: E402
from chunklog.lib.compile_lib.compiler import MessageCompiler  # noqa: E402
from chunklog.logger import Logger  # noqa: E402

TERMINAL_WIDTH = 40


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: writer-thread stress tests")


# ---------------------------------------------------------------------------
# Engines
# ---------------------------------------------------------------------------
class RecordingEngine(Engine):
    """Keeps every accepted message in ``messages``."""

    def __init__(self, settings=None, *loggers, synchronous=True, journal=None):
        self.messages = []
        self.synchronous = synchronous
        self.journal = journal
        self.flushed = 0
        super().__init__(settings, *loggers)

    def log(self, message):
        if not self.accepts(message):
            return
        self.messages.append(message)
        if self.journal is not None:
            self.journal.append(self)

    def flush(self):
        self.flushed += 1

    @property
    def texts(self):
        return [message.text for message in self.messages]


def make_test_console(width=TERMINAL_WIDTH):
    """In-memory console: fixed width, no ANSI codes."""
    return Console(file=io.StringIO(), width=width, color_system=None,
                   highlight=False, markup=False, emoji=False, soft_wrap=True)


def console_output(console):
    return console.file.getvalue()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture
def compiler():
    """Compiler with the stock palette and no redaction."""
    return MessageCompiler(STANDARD)


@pytest.fixture
def logger():
    """Logger with a 'test' prefix and a crash-free FATAL."""
    return Logger(prefixes=["test"], disable_fatal_crash=True)


@pytest.fixture
def recorder(logger):
    """RecordingEngine in debug mode attached to ``logger``."""
    return RecordingEngine(EngineSettings(debug=True), logger)


@pytest.fixture
def terminal():
    """(stdout_console, stderr_console) pair of in-memory consoles."""
    return make_test_console(), make_test_console()


@pytest.fixture
def log_folder(tmp_path):
    """Destination folder for file storage engines (not yet created)."""
    return tmp_path / "logs"


@pytest.fixture
def tmp_config_home(tmp_path):
    """Provide a temporary home directory for ~/.chunklog/config.json."""
    home = tmp_path / "home"
    home.mkdir()
    with patch.dict(os.environ, {"HOME": str(home), "USERPROFILE": str(home)}):
        with patch("pathlib.Path.home", return_value=home):
            yield home


@pytest.fixture
def tmp_project(tmp_path, monkeypatch):
    """Empty project directory used as the working directory."""
    project = tmp_path / "project"
    project.mkdir()
    monkeypatch.chdir(project)
    return project
