"""Convert errorformat matches into LSP Diagnostic objects."""
from __future__ import annotations

import logging
from typing import Iterable

from lsprotocol import types as lsp

from lintlsp.config import Configuration
from lintlsp.errorformat import Errorformat, Match
from lintlsp.errors import PathResolutionError
from lintlsp.uri import normalize_path, to_slash

logger = logging.getLogger(__name__)

# File names lint tools print when they read the document from stdin.
STDIN_NAMES = frozenset({'stdin', '-'})


def build_diagnostics(matches: Iterable[Match], path: str,
                      config: Configuration) -> list[lsp.Diagnostic]:
    """Return a ``Diagnostic`` for every match that refers to *path*.

    Matches naming any other file are dropped.  Order is preserved.
    """
    target = normalize_path(path)
    diags: list[lsp.Diagnostic] = []
    for m in matches:
        if config.lint_stdin and m.file in STDIN_NAMES:
            fname = path
        else:
            fname = to_slash(m.file)
        try:
            if normalize_path(fname) != target:
                continue
        except PathResolutionError as e:
            logger.warning('build_diagnostics: %s', e)
            continue

        column = m.column or 1
        # LSP is 0-based; lint tools are 1-based.
        line = max(0, m.line - 1 - config.lint_offset)
        col = max(0, column - 1)
        diags.append(
            lsp.Diagnostic(
                range=lsp.Range(
                    start=lsp.Position(line=line, character=col),
                    end=lsp.Position(line=line, character=col),
                ),
                message=m.message,
                severity=lsp.DiagnosticSeverity.Error,
                source='lintlsp',
            )
        )
    return diags


def get_diagnostics(output: str, path: str, config: Configuration,
                    efm: Errorformat | None = None) -> list[lsp.Diagnostic]:
    """Parse lint *output* and return the diagnostics for *path*.

    Raises :class:`~lintlsp.errors.PatternCompileError` if the configured
    formats are malformed and *efm* is not given.
    """
    if efm is None:
        efm = Errorformat(config.lint_formats)
    return build_diagnostics(efm.scan(output), path, config)
