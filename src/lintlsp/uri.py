"""
Conversion between ``file://`` URIs and local paths.

Editors identify documents by URI while lint tools print plain paths, so
both sides have to be brought into the same shape before they can be
compared:

* Windows drive paths (``C:/src/main.c``) live in the URI path with a
  leading slash (``file:///C:/src/main.c``) and lose it again on the way
  back.
* Separators are normalized to ``/``.
* On case-insensitive platforms the comparison form is lower-cased.

The comparison form produced by :func:`normalize_path` is only ever used
for equality checks, never for paths handed to a subprocess.
"""
from __future__ import annotations

import os
import sys
from urllib.parse import quote, unquote, urlparse

from lintlsp.errors import NotAFileURIError, PathResolutionError

CASE_INSENSITIVE = sys.platform == 'win32'


def is_windows_drive_path(path: str) -> bool:
    """Return True for paths such as ``C:/foo`` or ``c:\\foo``."""
    if len(path) < 4:
        return False
    return path[0].isalpha() and path[1] == ':'


def is_windows_drive_uri(path: str) -> bool:
    """Return True for URI paths of the form ``/C:/foo``."""
    if len(path) < 4:
        return False
    return path[0] == '/' and path[1].isalpha() and path[2] == ':'


def to_slash(path: str) -> str:
    """Replace the native separator with ``/``."""
    if os.sep == '/':
        return path
    return path.replace(os.sep, '/')


def from_uri(uri: str) -> str:
    """Return the local path for a ``file://`` *uri*.

    Raises :class:`NotAFileURIError` for any other scheme.
    """
    parsed = urlparse(uri)
    if parsed.scheme != 'file':
        raise NotAFileURIError(uri, parsed.scheme)
    path = unquote(parsed.path)
    if is_windows_drive_uri(path):
        path = path[1:]
    return path


def to_uri(path: str) -> str:
    """Return the ``file://`` URI for *path*."""
    path = to_slash(path)
    if is_windows_drive_path(path):
        path = '/' + path
    return 'file://' + quote(path, safe='/:')


def resolve_path(path: str) -> str:
    """Return *path* made absolute against the current directory."""
    if '\0' in path:
        raise PathResolutionError(path, 'embedded NUL character')
    try:
        return os.path.abspath(path)
    except (OSError, ValueError) as e:
        raise PathResolutionError(path, str(e)) from e


def normalize_path(path: str, case_insensitive: bool | None = None) -> str:
    """Return the form of *path* used for identity comparison.

    *case_insensitive* defaults to :data:`CASE_INSENSITIVE`, read per call.
    """
    if case_insensitive is None:
        case_insensitive = CASE_INSENSITIVE
    path = to_slash(resolve_path(path))
    if case_insensitive:
        path = path.lower()
    return path
