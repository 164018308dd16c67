"""Top-level package for the stamp toolkit.

Fills template PDF pages with text and images; text that does not fit a
hole flows onto the template's overflow template.

Provides subpackages:
- stamp_toolkit.core – token, format and template models, schemas
- stamp_toolkit.tokenizer – markup to tokens
- stamp_toolkit.layout – line breaking, hole fitting, paragraphs
- stamp_toolkit.fonts – font registry and metrics
- stamp_toolkit.holes – hole-type fillers
- stamp_toolkit.output – drawing and PDF composition
"""


def _get_version() -> str:
    """Get version from pyproject.toml (dev) or importlib.metadata (installed)."""
    from pathlib import Path

    pyproject = Path(__file__).resolve().parent.parent.parent / "pyproject.toml"
    if pyproject.exists():
        for line in pyproject.read_text(encoding="utf-8").splitlines():
            if line.strip().startswith("version"):
                # Parse: version = "0.3.1"
                return line.split("=")[1].strip().strip('"').strip("'")

    from importlib.metadata import PackageNotFoundError, version as pkg_version
    try:
        return pkg_version("stamp-toolkit")
    except PackageNotFoundError:
        return "0.0.0"


__version__ = _get_version()

from stamp_toolkit.errors import StampError  # noqa: E402
from stamp_toolkit.config import OverflowPolicy, StampConfig  # noqa: E402
from stamp_toolkit.context import StampContext, base_context  # noqa: E402
from stamp_toolkit.controller import StampResult, fill_pages, stamp_pages  # noqa: E402

__all__: list[str] = [
    "__version__",
    "StampError",
    "OverflowPolicy",
    "StampConfig",
    "StampContext",
    "base_context",
    "StampResult",
    "fill_pages",
    "stamp_pages",
]
