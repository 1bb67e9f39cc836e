"""
lintlsp Language Server.

Registers the text-synchronisation features and wires them to the document
store and the lint worker.
"""
from __future__ import annotations

import asyncio
import logging

from pygls.lsp.server import LanguageServer
from lsprotocol import types as lsp

from lintlsp import __version__
from lintlsp.config import ServerConfig, parse_languages
from lintlsp.dispatcher import LintDispatcher
from lintlsp.document import DocumentStore
from lintlsp.errors import ConfigError

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Server instance + per-session state
# ---------------------------------------------------------------------------

server = LanguageServer(
    'lintlsp', __version__,
    text_document_sync_kind=lsp.TextDocumentSyncKind.Full,
)

# Event loop the server runs on; captured at initialize so the lint thread
# can hand notifications back to it.
_loop: asyncio.AbstractEventLoop | None = None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _publish_diagnostics(uri: str, diagnostics: list[lsp.Diagnostic]) -> None:
    """Send the full diagnostic set for *uri*; called from the lint thread."""
    logger.debug('_publish_diagnostics: %s → %d diagnostics', uri, len(diagnostics))
    params = lsp.PublishDiagnosticsParams(uri=uri, diagnostics=diagnostics)
    loop = _loop
    if loop is not None and not loop.is_closed():
        loop.call_soon_threadsafe(server.text_document_publish_diagnostics, params)
    else:
        server.text_document_publish_diagnostics(params)


# Per-URI document store; every successful update enqueues a lint run.
_store = DocumentStore(on_update=lambda uri: _dispatcher.enqueue(uri))

# Single lint worker shared by all documents.
_dispatcher = LintDispatcher(_store, _publish_diagnostics)


def configure(config: ServerConfig) -> None:
    """Install the configuration loaded by the CLI."""
    _store.configure(config.languages)
    logger.info('configured languages: %s', ', '.join(sorted(config.languages)) or '(none)')


def _apply_log_level(raw: str | None) -> None:
    """Set the root logger level from a string like 'debug', 'warning', etc."""
    if not raw:
        return
    level = getattr(logging, raw.upper(), None)
    if isinstance(level, int):
        logging.getLogger().setLevel(level)


def _apply_settings(settings) -> None:
    """Honor ``logLevel`` and ``languages`` from client-supplied settings."""
    if not isinstance(settings, dict):
        return
    _apply_log_level(settings.get('logLevel'))
    languages = settings.get('languages')
    if languages is not None:
        try:
            _store.configure(parse_languages(languages))
        except ConfigError as e:
            logger.error('ignoring client language settings: %s', e)


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

@server.feature(lsp.INITIALIZE)
def on_initialize(params: lsp.InitializeParams):
    global _loop
    try:
        _loop = asyncio.get_running_loop()
    except RuntimeError:
        _loop = None
    _apply_settings(getattr(params, 'initialization_options', None))
    _dispatcher.start()


@server.feature(lsp.SHUTDOWN)
def on_shutdown(params=None):
    _dispatcher.close()


@server.feature(lsp.WORKSPACE_DID_CHANGE_CONFIGURATION)
def did_change_configuration(params: lsp.DidChangeConfigurationParams):
    """Handle live config changes sent under the ``lintlsp`` settings key."""
    settings = getattr(params, 'settings', None) or {}
    if isinstance(settings, dict):
        _apply_settings(settings.get('lintlsp'))


# ---------------------------------------------------------------------------
# Text document synchronisation
# ---------------------------------------------------------------------------

@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def did_open(params: lsp.DidOpenTextDocumentParams):
    td = params.text_document
    _store.open(td.uri, td.language_id)
    _store.update(td.uri, td.text)


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def did_change(params: lsp.DidChangeTextDocumentParams):
    if not params.content_changes:
        return
    # Full sync: the last change carries the whole document.
    _store.update(params.text_document.uri, params.content_changes[-1].text)


@server.feature(lsp.TEXT_DOCUMENT_DID_SAVE)
def did_save(params: lsp.DidSaveTextDocumentParams):
    _dispatcher.enqueue(params.text_document.uri)


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def did_close(params: lsp.DidCloseTextDocumentParams):
    _store.close(params.text_document.uri)
