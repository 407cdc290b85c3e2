"""amxxpack command line interface."""

from __future__ import annotations

from amxxpack import __version__

__all__ = ["__version__"]
