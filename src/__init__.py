"""postguard: near-real-time spam and abuse risk scoring for short posts."""

from postguard.version import __version__

__all__ = ["__version__"]
