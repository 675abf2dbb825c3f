from __future__ import annotations

from typing import Any, Dict, List, Optional, cast
from pathlib import Path
from urllib.parse import urlparse, unquote
from urllib.request import url2pathname

from pygls.server import LanguageServer
from pygls.workspace import TextDocument
from lsprotocol import types as lsp

from gherkin_steps_ls import __version__
from gherkin_steps_ls.constants import (
    COMMAND_REBUILD_INVENTORY,
    FEATURE_FILE_SUFFIX,
    LANGUAGE_ID,
    SETTINGS_FILE,
    SETTINGS_SECTION,
)
from gherkin_steps_ls.model import Settings, Step
from gherkin_steps_ls.text import get_current_line, get_lines
from gherkin_steps_ls.utils import LogOutputChannelLogger, glob_files

from .inventory import StepInventory, compile_inventory
from .features.completion import complete_step, resolve_completion
from .features.definition import get_step_definition
from .features.diagnostics import validate_gherkin, validate_configuration


__all__ = [
    'Step',
    'StepInventory',
    'StepsLanguageServer',
    'server',
]


class StepsLanguageServer(LanguageServer):
    logger: LogOutputChannelLogger

    root_path: Path
    client_settings: Dict[str, Any]
    settings: Settings
    inventory: StepInventory

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__('gherkin-steps-ls', __version__, *args, **kwargs)

        self.logger = LogOutputChannelLogger(self)
        self.root_path = Path.cwd()
        self.client_settings = {}
        self.settings = Settings()
        self.inventory = StepInventory()

    @property
    def settings_file(self) -> Path:
        return self.root_path / SETTINGS_FILE

    def load_settings(self, client_settings: Any) -> None:
        if not isinstance(client_settings, dict):
            return

        client_settings = cast(Dict[str, Any], client_settings)
        self.client_settings = client_settings.get(SETTINGS_SECTION, client_settings)
        self.settings = Settings.from_client_settings(self.client_settings)

        self.logger.debug(f'{self.settings=}')

    def is_feature_file(self, text_document: TextDocument) -> bool:
        return text_document.language_id == LANGUAGE_ID or text_document.path.endswith(FEATURE_FILE_SUFFIX)

    def is_steps_file(self, text_document: TextDocument) -> bool:
        path = Path(text_document.path).resolve()

        for step_pattern in self.settings.steps:
            if path in [file.resolve() for file in glob_files(self.root_path, step_pattern)]:
                return True

        return False

    def publish_feature_diagnostics(self, text_document: TextDocument) -> None:
        diagnostics = validate_gherkin(self.inventory, text_document)
        self.publish_diagnostics(text_document.uri, diagnostics)  # type: ignore

    def validate_open_documents(self) -> None:
        for text_document in self.workspace.text_documents.values():
            if not self.is_feature_file(text_document):
                continue

            self.publish_feature_diagnostics(text_document)


def rebuild_inventory(ls: StepsLanguageServer) -> None:
    compile_inventory(ls)

    diagnostics = validate_configuration(ls.root_path, ls.settings.steps, ls.settings_file)

    if len(diagnostics) > 0:
        ls.logger.warning(f'{len(diagnostics)} of {len(ls.settings.steps)} step file patterns did not match any files', notify=True)

    if ls.settings_file.is_file():
        ls.publish_diagnostics(ls.settings_file.as_uri(), diagnostics)  # type: ignore

    ls.validate_open_documents()


server = StepsLanguageServer()


@server.feature(lsp.INITIALIZE)
def initialize(ls: StepsLanguageServer, params: lsp.InitializeParams) -> None:
    ls.logger.info(f'initializing language server {__version__}')

    if params.root_path is None and params.root_uri is None:
        ls.logger.error(
            'neither root_path or root uri was received from client',
            notify=True,
        )
        return

    try:
        if params.root_uri is not None:
            ls.root_path = Path(unquote(url2pathname(urlparse(params.root_uri).path)))
        else:
            ls.root_path = Path(cast(str, params.root_path))

        ls.load_settings(params.initialization_options)
    except Exception:
        ls.logger.exception('failed to initialize extension', notify=True)


@server.feature(lsp.INITIALIZED)
def initialized(ls: StepsLanguageServer, params: lsp.InitializedParams) -> None:
    try:
        rebuild_inventory(ls)
    except Exception:
        ls.logger.exception('failed to create step inventory', notify=True)


@server.feature(lsp.WORKSPACE_DID_CHANGE_CONFIGURATION)
def workspace_did_change_configuration(
    ls: StepsLanguageServer,
    params: lsp.DidChangeConfigurationParams,
) -> None:
    ls.logger.debug(f'{lsp.WORKSPACE_DID_CHANGE_CONFIGURATION}: {params=}')

    if not isinstance(params.settings, dict):
        return

    try:
        ls.load_settings(params.settings)
        rebuild_inventory(ls)
    except Exception:
        ls.logger.exception('failed to apply changed configuration', notify=True)


@server.feature(
    lsp.TEXT_DOCUMENT_COMPLETION,
    lsp.CompletionOptions(resolve_provider=True),
)
def text_document_completion(
    ls: StepsLanguageServer,
    params: lsp.CompletionParams,
) -> Optional[lsp.CompletionList]:
    items: Optional[List[lsp.CompletionItem]] = None

    if len(ls.inventory) < 1:
        ls.logger.error('no steps in inventory', notify=True)
        return None

    try:
        text_document = ls.workspace.get_text_document(params.text_document.uri)
        line = get_current_line(text_document, params.position)

        ls.logger.debug(f'{line=}, {params.position=}')

        items = complete_step(ls.inventory, line, params.position, get_lines(text_document.source))
    except Exception:
        ls.logger.exception('failed to complete step expression', notify=True)

    if items is None:
        return None

    return lsp.CompletionList(
        is_incomplete=False,
        items=items,
    )


@server.feature(lsp.COMPLETION_ITEM_RESOLVE)
def completion_item_resolve(ls: StepsLanguageServer, item: lsp.CompletionItem) -> lsp.CompletionItem:
    try:
        return resolve_completion(ls.inventory, item)
    except Exception:
        ls.logger.exception('failed to resolve completion item', notify=True)

    return item


@server.feature(lsp.TEXT_DOCUMENT_DEFINITION)
def text_document_definition(
    ls: StepsLanguageServer,
    params: lsp.DefinitionParams,
) -> Optional[lsp.Location]:
    ls.logger.debug(f'{lsp.TEXT_DOCUMENT_DEFINITION}: {params=}')

    try:
        text_document = ls.workspace.get_text_document(params.text_document.uri)
        current_line = get_current_line(text_document, params.position)

        return get_step_definition(ls.inventory, current_line, params.position.character)
    except Exception:
        ls.logger.exception('failed to get step definition', notify=True)

    return None


@server.feature(lsp.TEXT_DOCUMENT_DID_OPEN)
def text_document_did_open(ls: StepsLanguageServer, params: lsp.DidOpenTextDocumentParams) -> None:
    text_document = ls.workspace.get_text_document(params.text_document.uri)

    if not ls.is_feature_file(text_document):
        return

    try:
        ls.publish_feature_diagnostics(text_document)
    except Exception:
        ls.logger.exception('failed to run diagnostics on opened file', notify=True)


@server.feature(lsp.TEXT_DOCUMENT_DID_CHANGE)
def text_document_did_change(ls: StepsLanguageServer, params: lsp.DidChangeTextDocumentParams) -> None:
    if ls.settings.diagnostics_on_save_only:
        return

    text_document = ls.workspace.get_text_document(params.text_document.uri)

    if not ls.is_feature_file(text_document):
        return

    try:
        ls.publish_feature_diagnostics(text_document)
    except Exception:
        ls.logger.exception('failed to run diagnostics on changed file', notify=True)


@server.feature(lsp.TEXT_DOCUMENT_DID_SAVE)
def text_document_did_save(ls: StepsLanguageServer, params: lsp.DidSaveTextDocumentParams) -> None:
    text_document = ls.workspace.get_text_document(params.text_document.uri)

    try:
        if ls.is_steps_file(text_document):
            ls.logger.debug(f'step file {text_document.path} saved, rebuilding inventory')
            rebuild_inventory(ls)
        elif ls.is_feature_file(text_document):
            features_pattern = ls.settings.features_pattern
            if features_pattern is not None:
                ls.inventory.set_usage(ls.root_path, features_pattern)

            ls.publish_feature_diagnostics(text_document)
    except Exception:
        ls.logger.exception('failed to handle saved file', notify=True)


@server.feature(lsp.TEXT_DOCUMENT_DID_CLOSE)
def text_document_did_close(ls: StepsLanguageServer, params: lsp.DidCloseTextDocumentParams) -> None:
    # always clear diagnostics when file is closed
    try:
        ls.publish_diagnostics(params.text_document.uri, [])  # type: ignore
    except Exception:
        ls.logger.exception('failed to clear diagnostics for closed file', notify=True)


@server.command(COMMAND_REBUILD_INVENTORY)
def command_rebuild_inventory(ls: StepsLanguageServer, *args: Any) -> None:
    ls.logger.info(f'executing command: {COMMAND_REBUILD_INVENTORY}')

    try:
        rebuild_inventory(ls)
    except Exception:
        ls.logger.exception('failed to rebuild inventory', notify=True)
