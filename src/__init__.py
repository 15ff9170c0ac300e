# src/__init__.py — v1
"""incrlint: incremental lint orchestration for build targets."""

from incrlint.version import __version__

__all__ = ["__version__"]
