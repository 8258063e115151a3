"""
Version information for chunklog.

The components below are the only place the version is written down;
setup.py reads this file.
"""

MAJOR = 0
MINOR = 3
PATCH = 0
PHASE = "beta"  # None, "alpha", "beta" or "rc"

__app_name__ = "chunklog"

_PEP440_PHASES = {"alpha": "a0", "beta": "b0", "rc": "rc0"}


def get_base_version():
    """Return MAJOR.MINOR.PATCH[-PHASE], e.g. 0.3.0-beta."""
    base = f"{MAJOR}.{MINOR}.{PATCH}"
    if PHASE:
        base = f"{base}-{PHASE}"
    return base


def get_pip_version():
    """Return the PEP 440 form, e.g. 0.3.0b0."""
    base = f"{MAJOR}.{MINOR}.{PATCH}"
    if PHASE:
        base += _PEP440_PHASES.get(PHASE, PHASE)
    return base


__version__ = get_pip_version()
VERSION = __version__
BASE_VERSION = get_base_version()
