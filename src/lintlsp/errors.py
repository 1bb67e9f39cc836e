"""Exceptions raised by the lint pipeline.

Only :class:`DocumentNotFoundError` from an explicit update and
:class:`ConfigError` at startup reach a caller; everything else is logged
by the dispatcher and turns into an empty (or partial) diagnostic set.
"""
from __future__ import annotations


class LintError(Exception):
    """Base class for every lintlsp error."""


class NotAFileURIError(LintError):
    """A document identifier does not use the ``file`` scheme."""

    def __init__(self, uri: str, scheme: str):
        super().__init__(f'only file URIs are supported, got {scheme!r} ({uri})')
        self.uri = uri
        self.scheme = scheme


class DocumentNotFoundError(LintError):
    def __init__(self, uri: str):
        super().__init__(f'document not found: {uri}')
        self.uri = uri


class PatternCompileError(LintError):
    """A configured errorformat string could not be compiled."""

    def __init__(self, pattern: str, reason: str):
        super().__init__(f'invalid errorformat {pattern!r}: {reason}')
        self.pattern = pattern
        self.reason = reason


class PathResolutionError(LintError):
    def __init__(self, path: str, reason: str):
        super().__init__(f'cannot resolve path {path!r}: {reason}')
        self.path = path


class LintTimeoutError(LintError):
    """The lint command did not finish within its time budget."""

    def __init__(self, command: str, timeout: float):
        super().__init__(f'lint command timed out after {timeout:g}s: {command}')
        self.command = command
        self.timeout = timeout


class ConfigError(LintError):
    """The configuration file is unreadable or has the wrong shape."""
