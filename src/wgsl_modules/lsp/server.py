"""pygls-based language server for WGSL modules.

The server resolves every open ``.wgsl`` buffer through a ModuleCache and
publishes resolution and validation failures as diagnostics. Open buffers
shadow the files on disk, so an edited include is picked up by the modules
that include it before it is saved. Include directives are exposed as
document links and as go-to-definition targets.
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from urllib.parse import unquote, urlparse

from lsprotocol import types
from pygls.lsp.server import LanguageServer
from pygls.uris import from_fs_path

from wgsl_modules import __version__
from wgsl_modules.config import WgslModulesConfig, load_config
from wgsl_modules.errors import ModuleError, ValidatorNotFoundError
from wgsl_modules.include_directive import IncludeDirective
from wgsl_modules.include_directive_parser import IncludeDirectiveParser
from wgsl_modules.module import read_source
from wgsl_modules.module_cache import ModuleCache
from wgsl_modules.paths import normpath
from wgsl_modules.validator import NagaValidator

logger = logging.getLogger(__name__)

SERVER_NAME = "wgsl-modules-lsp"
DIAGNOSTIC_SOURCE = "wgsl-modules"


def uri_to_path(uri: str) -> Path:
    """Convert a document URI to a canonical filesystem path."""
    parsed = urlparse(uri)
    return normpath(unquote(parsed.path))


def path_to_uri(path: Path) -> str:
    return from_fs_path(str(path)) or path.as_uri()


class WgslModulesLanguageServer:
    """Language server tracking open WGSL documents and their include graphs."""

    def __init__(self, workspace_root: str | None = None, config: WgslModulesConfig | None = None) -> None:
        """Initialize the server.

        Args:
            workspace_root: Directory whose ``pyproject.toml`` holds settings.
            config: Explicit settings, overriding ``workspace_root`` lookup.
        """
        self.lsp = LanguageServer(SERVER_NAME, __version__, text_document_sync_kind=types.TextDocumentSyncKind.Full)
        self._workspace_root = workspace_root
        self._config = config if config is not None else load_config(workspace_root)
        self._naga: NagaValidator | None = NagaValidator.from_config(self._config) if self._config.validate else None
        self._include_parser = IncludeDirectiveParser()

        # uri -> buffer content
        self._documents: dict[str, str] = {}
        # canonical path -> uri of the open buffer
        self._open_paths: dict[Path, str] = {}
        # uri -> dependencies found by the last resolution
        self._dependencies: dict[str, set[Path]] = {}
        # uri -> diagnostics from the last resolution
        self._diagnostics: dict[str, list[types.Diagnostic]] = {}

        self._register_features()

    def _register_features(self) -> None:
        lsp = self.lsp

        @lsp.feature(types.INITIALIZE)
        def initialize(ls: LanguageServer, params: types.InitializeParams) -> None:
            if params.root_uri and self._workspace_root is None:
                self._workspace_root = str(uri_to_path(params.root_uri))
                self._config = load_config(self._workspace_root)
                self._naga = NagaValidator.from_config(self._config) if self._config.validate else None
                logger.info(f"Workspace root: {self._workspace_root}")

        @lsp.feature(types.TEXT_DOCUMENT_DID_OPEN)
        def did_open(ls: LanguageServer, params: types.DidOpenTextDocumentParams) -> None:
            self._publish(self._open_document(params.text_document.uri, params.text_document.text))

        @lsp.feature(types.TEXT_DOCUMENT_DID_CHANGE)
        def did_change(ls: LanguageServer, params: types.DidChangeTextDocumentParams) -> None:
            if not params.content_changes:
                return
            content = params.content_changes[-1].text
            self._publish(self._change_document(params.text_document.uri, content))

        @lsp.feature(types.TEXT_DOCUMENT_DID_SAVE)
        def did_save(ls: LanguageServer, params: types.DidSaveTextDocumentParams) -> None:
            uri = params.text_document.uri
            if uri in self._documents:
                self._publish(self._refresh(uri))

        @lsp.feature(types.TEXT_DOCUMENT_DID_CLOSE)
        def did_close(ls: LanguageServer, params: types.DidCloseTextDocumentParams) -> None:
            self._publish(self._close_document(params.text_document.uri))

        @lsp.feature(types.TEXT_DOCUMENT_DOCUMENT_LINK)
        def document_link(ls: LanguageServer, params: types.DocumentLinkParams) -> list[types.DocumentLink]:
            return self.document_link(params)

        @lsp.feature(types.TEXT_DOCUMENT_DEFINITION)
        def goto_definition(ls: LanguageServer, params: types.DefinitionParams) -> types.Location | None:
            return self.goto_definition(params)

    # document lifecycle

    def _open_document(self, uri: str, content: str) -> list[str]:
        """Track a newly opened document and resolve it.

        Returns:
            URIs whose diagnostics changed.
        """
        self._documents[uri] = content
        self._open_paths[uri_to_path(uri)] = uri
        return self._refresh(uri)

    def _change_document(self, uri: str, content: str) -> list[str]:
        self._documents[uri] = content
        self._open_paths.setdefault(uri_to_path(uri), uri)
        return self._refresh(uri)

    def _close_document(self, uri: str) -> list[str]:
        """Stop tracking a document and clear its diagnostics."""
        if uri not in self._documents:
            return []
        del self._documents[uri]
        self._open_paths.pop(uri_to_path(uri), None)
        self._dependencies.pop(uri, None)
        self._diagnostics[uri] = []

        affected = [uri]
        # Includers fall back to the file on disk
        affected.extend(self._refresh_dependents(uri_to_path(uri)))
        return affected

    def _refresh(self, uri: str) -> list[str]:
        self._diagnostics[uri] = self._diagnose(uri)
        return [uri, *self._refresh_dependents(uri_to_path(uri))]

    def _refresh_dependents(self, path: Path) -> list[str]:
        affected: list[str] = []
        for other_uri, dependencies in list(self._dependencies.items()):
            if path in dependencies and other_uri in self._documents:
                self._diagnostics[other_uri] = self._diagnose(other_uri)
                affected.append(other_uri)
        return affected

    def _publish(self, uris: list[str]) -> None:
        for uri in uris:
            self.lsp.text_document_publish_diagnostics(
                types.PublishDiagnosticsParams(uri=uri, diagnostics=self._diagnostics.get(uri, []))
            )

    # resolution

    def _read_source(self, path: Path) -> str:
        uri = self._open_paths.get(path)
        if uri is not None and uri in self._documents:
            return self._documents[uri]
        return read_source(path, encoding=self._config.encoding)

    def _validate(self, source: str) -> None:
        if self._naga is None:
            return
        try:
            self._naga(source)
        except ValidatorNotFoundError as e:
            logger.warning(f"{e}; validation diagnostics are disabled")
            self._naga = None

    def _diagnose(self, uri: str) -> list[types.Diagnostic]:
        """Resolve an open document and turn a failure into a diagnostic."""
        content = self._documents[uri]
        path = uri_to_path(uri)
        cache = ModuleCache(self._validate, config=self._config, reader=self._read_source)

        try:
            module = cache.load(path, content)
        except ModuleError as e:
            logger.debug(f"Resolution of {uri} failed: {e}")
            # Everything the failed resolution touched, so fixing any of it re-diagnoses
            touched = {target for _, target in self._include_targets(path, content)}
            touched.update(cached_path for cached_path, _ in cache.modules())
            failed_path = getattr(e, "path", None)
            if failed_path is not None:
                touched.add(failed_path)
            touched.discard(path)
            self._dependencies[uri] = touched
            directive = self._failing_directive(cache, path, content)
            if directive is not None:
                error_range = directive.to_range()
            else:
                start = types.Position(line=0, character=0)
                error_range = types.Range(start=start, end=start)
            return [
                types.Diagnostic(
                    range=error_range,
                    message=str(e),
                    severity=types.DiagnosticSeverity.Error,
                    source=DIAGNOSTIC_SOURCE,
                )
            ]

        self._dependencies[uri] = set(module.dependencies())
        return []

    def _include_targets(self, path: Path, content: str) -> list[tuple[IncludeDirective, Path]]:
        dir_path = path.parent
        return [
            (directive, normpath(dir_path / directive.path))
            for directive in self._include_parser.extract_includes(content)
        ]

    def _failing_directive(self, cache: ModuleCache, path: Path, content: str) -> IncludeDirective | None:
        """Find the directive whose resolution raised.

        Includes are resolved from the last directive to the first and every
        include that resolved is cached, so the failing one is the last
        directive whose target is missing from the cache.
        """
        for directive, target in reversed(self._include_targets(path, content)):
            if target not in cache:
                return directive
        return None

    # requests

    def document_link(self, params: types.DocumentLinkParams) -> list[types.DocumentLink]:
        """Return a link to the included file for every include directive."""
        uri = params.text_document.uri
        content = self._documents.get(uri)
        if content is None:
            return []
        return [
            types.DocumentLink(range=directive.to_range(), target=path_to_uri(target), tooltip=directive.path)
            for directive, target in self._include_targets(uri_to_path(uri), content)
        ]

    def goto_definition(self, params: types.DefinitionParams) -> types.Location | None:
        """Jump from an include directive to the included file."""
        uri = params.text_document.uri
        content = self._documents.get(uri)
        if content is None:
            return None

        position = params.position
        for directive, target in self._include_targets(uri_to_path(uri), content):
            if directive.contains(position.line, position.character):
                start = types.Position(line=0, character=0)
                return types.Location(uri=path_to_uri(target), range=types.Range(start=start, end=start))
        return None


def main() -> None:
    logging.basicConfig(level=logging.INFO, stream=sys.stderr, format="%(levelname)s %(name)s: %(message)s")
    server = WgslModulesLanguageServer(workspace_root=os.environ.get("WGSL_MODULES_ROOT"))
    logger.info(f"Starting {SERVER_NAME} {__version__}")
    server.lsp.start_io()
