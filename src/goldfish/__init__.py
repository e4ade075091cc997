"""
goldfish - cross-platform command unification.

One command definition, one template per platform: goldfish validates the
typed parameters of an invocation, renders the template for the current
platform and runs the result through the system shell, propagating the
command's exit status.
"""

from importlib import metadata as importlib_metadata
from importlib.metadata import PackageNotFoundError

# Local/package imports
from .core.exceptions import GoldfishError
from .core.types import CommandSpec, ExecutionContext, ParameterSpec, Platform
from .engine.executor import Engine
from .utils.logger import get_logger

# Configure package-level logger
package_logger = get_logger(__name__)

__version__ = "0.1.0"
__title__ = "goldfish"


def get_metadata():
    """Extract version and title from the installed distribution when available."""

    global __version__, __title__

    try:
        _meta = importlib_metadata.metadata("goldfish")
    except PackageNotFoundError:
        return

    __version__ = _meta.get("Version", __version__)
    __title__ = _meta.get("Name", __title__)


get_metadata()

__all__ = [
    "CommandSpec",
    "Engine",
    "ExecutionContext",
    "GoldfishError",
    "ParameterSpec",
    "Platform",
    "__title__",
    "__version__",
]
