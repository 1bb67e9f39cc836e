"""handlers/__init__.py — re-export handler functions for convenience."""
from .diagnostics import build_diagnostics, get_diagnostics

__all__ = ['build_diagnostics', 'get_diagnostics']
