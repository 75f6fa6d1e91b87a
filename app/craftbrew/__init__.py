"""craftbrew - Declarative Homebrew manifest reconciliation.

Composes Brewfile-style manifests into one merged manifest and converges
the installed Homebrew state towards it.
"""

__version__ = "1.0.0"

__all__ = ["__version__"]
