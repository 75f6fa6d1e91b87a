"""Package-manager backends.

This module exports the backend interface and the Homebrew bundle
implementation.
"""

from craftbrew.backends.base import Backend
from craftbrew.backends.homebrew import HomebrewBundleBackend

__all__ = ["Backend", "HomebrewBundleBackend"]
