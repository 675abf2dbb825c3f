import os
import logging
import traceback

from glob import glob
from typing import Dict, List, Union
from pathlib import Path

from pygls.server import LanguageServer
from lsprotocol import types as lsp

from gherkin_steps_ls.constants import ENV_RUN_EMBEDDED


logger = logging.getLogger(__name__)

IGNORED_FILE_NAMES = ['.gitignore']


def glob_files(root: Union[str, Path], pattern: str) -> List[Path]:
    """Files matching `pattern` relative to `root`, sorted so that every scan sees them in the same order.

    An absolute `pattern` is used as is.
    """
    search = os.path.join(str(root), pattern)
    files = [Path(file) for file in glob(search, recursive=True)]

    return sorted([file for file in files if file.is_file() and file.name not in IGNORED_FILE_NAMES])


def read_file(path: Path) -> str:
    return path.read_text(encoding='utf-8')


class LogOutputChannelLogger:
    """Log to the client output channel when running embedded in the editor extension,
    otherwise through `logging`. `notify` also pops up the message in the client."""

    levels: Dict[int, lsp.MessageType] = {
        logging.DEBUG: lsp.MessageType.Debug,
        logging.INFO: lsp.MessageType.Info,
        logging.WARNING: lsp.MessageType.Warning,
        logging.ERROR: lsp.MessageType.Error,
    }

    ls: LanguageServer
    logger: logging.Logger
    embedded: bool

    def __init__(self, ls: LanguageServer) -> None:
        self.ls = ls
        self.logger = logging.getLogger(ls.__class__.__name__)
        self.embedded = os.environ.get(ENV_RUN_EMBEDDED, 'false') == 'true'

    def log(self, level: int, message: str, *, exc_info: bool = False, notify: bool = False) -> None:
        msg_type = self.levels.get(level, lsp.MessageType.Log)

        if self.embedded:
            if exc_info:
                message = f'{message}\n{traceback.format_exc()}'
            self.ls.show_message_log(message, msg_type=msg_type)  # type: ignore
        else:
            self.logger.log(level, message, exc_info=exc_info)

        if notify:
            self.ls.show_message(message, msg_type=msg_type)  # type: ignore

    def debug(self, message: str, *, notify: bool = False) -> None:
        self.log(logging.DEBUG, message, notify=notify)

    def info(self, message: str, *, notify: bool = False) -> None:
        self.log(logging.INFO, message, notify=notify)

    def warning(self, message: str, *, notify: bool = False) -> None:
        self.log(logging.WARNING, message, notify=notify)

    def error(self, message: str, *, notify: bool = False) -> None:
        self.log(logging.ERROR, message, notify=notify)

    def exception(self, message: str, *, notify: bool = False) -> None:
        self.log(logging.ERROR, message, exc_info=True, notify=notify)
