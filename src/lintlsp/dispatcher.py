"""
Serialized lint worker.

All lint runs happen on one background thread fed by a :class:`LintQueue`.
The queue has no capacity: :meth:`LintQueue.put` returns only once the
worker has taken that request, so at most one run is in flight and a
producer waits while the worker is busy with the previous run.

Requests are not merged.  Two updates of the same document run twice, in
the order they were enqueued, and the later publish replaces the earlier
one on the client.
"""
from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Callable

from lsprotocol import types as lsp

from lintlsp.document import DocumentStore
from lintlsp.errorformat import Errorformat
from lintlsp.errors import LintError
from lintlsp.handlers import get_diagnostics
from lintlsp.runner import run_lint
from lintlsp.uri import from_uri

logger = logging.getLogger(__name__)

PublishFn = Callable[[str, list[lsp.Diagnostic]], None]


class QueueClosedError(RuntimeError):
    """Raised by :meth:`LintQueue.put` after :meth:`LintQueue.close`."""


class LintQueue:
    """Unbuffered FIFO handoff between request handlers and the worker."""

    def __init__(self):
        self._cond = threading.Condition()
        self._pending: deque[str] = deque()
        self._issued = 0     # requests ever put
        self._taken = 0      # requests ever handed to get()
        self._closed = False

    def put(self, uri: str) -> None:
        """Hand *uri* to the consumer, blocking until it has been taken."""
        with self._cond:
            if self._closed:
                raise QueueClosedError(uri)
            ticket = self._issued
            self._issued += 1
            self._pending.append(uri)
            self._cond.notify_all()
            while self._taken <= ticket:
                if self._closed:
                    raise QueueClosedError(uri)
                self._cond.wait()

    def get(self) -> str | None:
        """Return the next request, or ``None`` once the queue is closed."""
        with self._cond:
            while not self._pending and not self._closed:
                self._cond.wait()
            if self._closed:
                return None
            uri = self._pending.popleft()
            self._taken += 1
            self._cond.notify_all()
            return uri

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._pending.clear()
            self._cond.notify_all()


class LintDispatcher:
    """Owns the worker thread that lints and publishes one URI at a time."""

    def __init__(self, store: DocumentStore, publish: PublishFn):
        self.store = store
        self.publish = publish
        self._queue = LintQueue()
        self._thread: threading.Thread | None = None
        self._start_lock = threading.Lock()

    def start(self) -> None:
        with self._start_lock:
            if self._thread is not None:
                return
            self._thread = threading.Thread(
                target=self._run, name='lintlsp-lint', daemon=True,
            )
            self._thread.start()

    def enqueue(self, uri: str) -> None:
        """Request a lint run for *uri*; blocks until the worker accepts it."""
        self.start()
        self._queue.put(uri)

    def close(self) -> None:
        """Stop accepting requests; the run in progress is allowed to finish."""
        self._queue.close()

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self) -> None:
        while True:
            uri = self._queue.get()
            if uri is None:
                break
            try:
                diags = self.lint(uri)
            except Exception:
                logger.exception('lint of %s failed', uri)
                diags = []
            try:
                self.publish(uri, diags)
            except Exception:
                logger.exception('publishing diagnostics for %s failed', uri)
        logger.debug('lint worker stopped')

    def lint(self, uri: str) -> list[lsp.Diagnostic]:
        """Run the full pipeline for *uri* and return its diagnostics.

        Every :class:`LintError` is logged and yields an empty list.
        """
        doc = self.store.get(uri)
        if doc is None:
            logger.warning('lint: document not found: %s', uri)
            return []
        config = self.store.config_for(uri)
        if not config.lint_command:
            return []

        try:
            path = from_uri(uri)
            efm = Errorformat(config.lint_formats)
            result = run_lint(doc, config, path)
        except LintError as e:
            logger.error('lint: %s', e)
            return []

        if result is None or result.succeeded:
            return []
        try:
            diags = get_diagnostics(result.output, path, config, efm)
        except LintError as e:
            logger.error('lint: %s', e)
            return []
        logger.debug('lint: %s → %d diagnostics', uri, len(diags))
        return diags
