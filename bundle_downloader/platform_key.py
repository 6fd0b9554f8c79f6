"""Platform identifier used to select bundle variants.

Metadata listings key their file lists by engine-style platform names
(``Windows``, ``OSX``, ``Linux``, ``Android`` ...). Editor and standalone
runs of the same platform report names like ``WindowsEditor`` and
``WindowsPlayer``; both collapse to ``Windows``.
"""

from __future__ import annotations

import logging
import os
import platform
import sys

logger = logging.getLogger(__name__)

PLATFORM_ENV_VAR = "BUNDLE_DOWNLOADER_PLATFORM"

_MODE_SUFFIXES = ("Editor", "Player")

# sys.platform prefix -> engine platform name
_RUNTIME_PLATFORMS = {
    "win32": "Windows",
    "cygwin": "Windows",
    "darwin": "OSX",
    "linux": "Linux",
    "android": "Android",
    "ios": "IPhone",
}


def normalize_platform(name: str) -> str:
    """Strip execution-mode markers from a reported platform name."""
    for suffix in _MODE_SUFFIXES:
        name = name.replace(suffix, "")
    return name


def detect_platform(override: str | None = None) -> str:
    """Resolve the platform identifier for this session.

    Resolution order:
    1. Explicit override (e.g. from settings)
    2. BUNDLE_DOWNLOADER_PLATFORM environment variable
    3. The running interpreter's platform

    Returns:
        Normalized platform identifier
    """
    reported = override or os.environ.get(PLATFORM_ENV_VAR)
    if not reported:
        reported = next(
            (name for prefix, name in _RUNTIME_PLATFORMS.items() if sys.platform.startswith(prefix)),
            platform.system() or sys.platform,
        )
    resolved = normalize_platform(reported)
    logger.debug(f"Platform identifier: {resolved} (reported: {reported})")
    return resolved
