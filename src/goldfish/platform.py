"""Host platform detection.

The engine never asks for the current platform on its own; callers detect
it once and pass it through the execution context.
"""

import sys
from typing import List, Optional

from .core.exceptions import UnsupportedPlatformError
from .core.types import Platform


def detect_platform(system: Optional[str] = None) -> Platform:
    """Map a ``sys.platform`` value to a supported platform.

    Args:
        system: Value to map; defaults to ``sys.platform``

    Raises:
        UnsupportedPlatformError: If the host is not Linux, macOS or Windows
    """
    system = system if system is not None else sys.platform
    if system.startswith("linux"):
        return Platform.LINUX
    if system == "darwin":
        return Platform.DARWIN
    if system in ("win32", "cygwin"):
        return Platform.WINDOWS
    raise UnsupportedPlatformError(system)


def is_supported(platform: str) -> bool:
    return str(platform) in {p.value for p in Platform}


def supported_platforms() -> List[Platform]:
    return list(Platform)
