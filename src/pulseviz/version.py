"""Project version source of truth."""

from __future__ import annotations

import platform

__all__ = ["PROJECT_NAME", "__version__", "build_help_epilog"]

# Manually updated for each release.
__version__ = "0.1.0"
PROJECT_NAME = "pulseviz"


def build_help_epilog() -> str:
    return (
        f"Modes: bars, radial, wave, particles\n"
        f"Platform: {platform.platform()}\n"
        f"Version: {PROJECT_NAME} {__version__}"
    )
