"""Tests for chunklog._version — PEP 440 compliance and version parsing."""

import re

import chunklog
from chunklog import _version
from chunklog._version import (
    BASE_VERSION,
    MAJOR, MINOR, PATCH, PHASE,
    VERSION,
    get_base_version,
    get_pip_version,
)

from conftest import PROJECT_ROOT


def test_base_version_format():
    """Base version should be MAJOR.MINOR.PATCH-PHASE."""
    base = get_base_version()
    assert re.match(r"^\d+\.\d+\.\d+(-\w+)?$", base), \
        f"Unexpected base version format: {base}"


def test_base_version_matches_components():
    """Base version should match the MAJOR.MINOR.PATCH constants."""
    assert get_base_version().startswith(f"{MAJOR}.{MINOR}.{PATCH}")


def test_pip_version_pep440():
    """PIP version must be PEP 440 compliant (no hyphens, proper pre-release)."""
    pip_ver = get_pip_version()
    assert "-" not in pip_ver, \
        f"PEP 440 forbids hyphens in version: {pip_ver}"
    assert re.match(r"^\d+\.\d+\.\d+((a|b|rc)\d+)?$", pip_ver)


def test_pip_version_phase_mapping(monkeypatch):
    """Each phase maps to its PEP 440 pre-release tag."""
    for phase, tag in [("alpha", "a0"), ("beta", "b0"), ("rc", "rc0"), (None, "")]:
        monkeypatch.setattr(_version, "PHASE", phase)
        assert _version.get_pip_version() == f"{MAJOR}.{MINOR}.{PATCH}{tag}"


def test_version_is_plain():
    """No build metadata in the version string."""
    assert VERSION == get_pip_version()
    assert "_" not in VERSION
    assert BASE_VERSION == get_base_version()


def test_setup_reads_version_module():
    """setup.py takes its version from _version.py instead of repeating it."""
    setup_source = (PROJECT_ROOT / "setup.py").read_text(encoding="utf-8")
    assert "_version.py" in setup_source
    assert VERSION not in setup_source


def test_package_exports_version():
    assert chunklog.__version__ == VERSION
    assert chunklog.__app_name__ == "chunklog"
    assert PHASE is None or PHASE in ("alpha", "beta", "rc")
