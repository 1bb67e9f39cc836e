"""
Per-document text store.

Each open document is stored as a :class:`Document` keyed by URI.  The store
is written by the LSP request handlers and read by the lint worker thread,
so every access goes through one lock.  Readers receive copies; no caller
keeps a reference to a stored entry.
"""
from __future__ import annotations

import dataclasses
import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping

from lintlsp.config import Configuration
from lintlsp.errors import DocumentNotFoundError


@dataclass
class Document:
    uri: str
    language_id: str
    text: str = ''


class DocumentStore:
    """Thread-safe mapping from URI to :class:`Document`.

    *on_update* is called with the URI after every successful
    :meth:`update`, outside the lock, so it may block (the dispatcher's
    enqueue does).
    """

    def __init__(self, configs: Mapping[str, Configuration] | None = None,
                 on_update: Callable[[str], None] | None = None):
        self._lock = threading.Lock()
        self._docs: dict[str, Document] = {}
        self._configs: Mapping[str, Configuration] = MappingProxyType(dict(configs or {}))
        self._on_update = on_update

    def configure(self, configs: Mapping[str, Configuration]) -> None:
        """Replace the per-language configuration mapping."""
        frozen = MappingProxyType(dict(configs))
        with self._lock:
            self._configs = frozen

    def open(self, uri: str, language_id: str) -> None:
        with self._lock:
            self._docs[uri] = Document(uri=uri, language_id=language_id)

    def update(self, uri: str, text: str) -> None:
        """Replace the text of *uri* and request a lint run.

        Raises :class:`DocumentNotFoundError` if *uri* is not open.
        """
        with self._lock:
            doc = self._docs.get(uri)
            if doc is None:
                raise DocumentNotFoundError(uri)
            doc.text = text
        if self._on_update is not None:
            self._on_update(uri)

    def close(self, uri: str) -> None:
        with self._lock:
            self._docs.pop(uri, None)

    def get(self, uri: str) -> Document | None:
        with self._lock:
            doc = self._docs.get(uri)
            return dataclasses.replace(doc) if doc is not None else None

    def config_for(self, uri: str) -> Configuration:
        """Return the configuration for the language of *uri*, or an empty one."""
        with self._lock:
            doc = self._docs.get(uri)
            if doc is None:
                return Configuration()
            return self._configs.get(doc.language_id, Configuration())

    def __contains__(self, uri: str) -> bool:
        with self._lock:
            return uri in self._docs
