"""Top-level package for the Student Performance Tracker toolkit.

Provides subpackages:
- spt_toolkit.core – student, mark and outcome models plus serialization
- spt_toolkit.engine – CO/PO attainment computation and target adjustment
- spt_toolkit.importing – spreadsheet readers for student and history workbooks
- spt_toolkit.output – Excel/PDF exporters and chart data series
- spt_toolkit.client – REST client for the persistence backend
"""

import re
from importlib.metadata import PackageNotFoundError, version as _dist_version
from pathlib import Path

_VERSION_LINE = re.compile(r'^version\s*=\s*["\']([^"\']+)["\']', re.MULTILINE)


def _get_version() -> str:
    """Installed distribution version; the source tree's pyproject.toml when not installed."""
    try:
        return _dist_version("spt-toolkit")
    except PackageNotFoundError:
        pass
    pyproject = Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        match = _VERSION_LINE.search(pyproject.read_text(encoding="utf-8"))
    except OSError:
        match = None
    return match.group(1) if match else "0.0.0"


__version__ = _get_version()
__all__: list[str] = ["__version__"]
