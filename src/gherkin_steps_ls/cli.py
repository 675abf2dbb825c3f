from __future__ import annotations

from typing import Dict, List
from argparse import Namespace as Arguments
from pathlib import Path

from pygls.workspace import TextDocument
from lsprotocol.types import Diagnostic, DiagnosticSeverity
from colorama import init, Fore

from gherkin_steps_ls.constants import DEFAULT_STEPS, FEATURE_FILE_SUFFIX
from gherkin_steps_ls.server.features.diagnostics import validate_gherkin
from gherkin_steps_ls.server.inventory import StepInventory


# unresolved steps and unmatched step globs are warnings, anything else is printed without color
SEVERITY_COLORS: Dict[DiagnosticSeverity, str] = {
    DiagnosticSeverity.Error: Fore.RED,
    DiagnosticSeverity.Warning: Fore.YELLOW,
}


def diagnostic_to_text(filename: str, diagnostic: Diagnostic) -> str:
    start = diagnostic.range.start

    if diagnostic.severity is None:
        severity, color = 'unknown', Fore.RESET
    else:
        severity, color = diagnostic.severity.name.lower(), SEVERITY_COLORS.get(diagnostic.severity, Fore.RESET)

    message = diagnostic.message.replace('\n', ': ')

    return f'{filename}:{start.line + 1}:{start.character + 1}\t{color}{severity}{Fore.RESET}\t{message}'


def _get_feature_files(root: Path, arguments: List[str]) -> List[Path]:
    if arguments == ['.']:
        return sorted(root.rglob(f'*{FEATURE_FILE_SUFFIX}'))

    files: List[Path] = []

    for argument in arguments:
        path = Path(argument)

        if path.is_dir():
            files.extend(sorted(path.rglob(f'*{FEATURE_FILE_SUFFIX}')))
        else:
            files.append(path)

    return files


def cli(args: Arguments) -> int:
    # init colorama for ansi colors
    init()

    root = Path.cwd().resolve()

    inventory = StepInventory()
    inventory.populate(root, args.steps or DEFAULT_STEPS)

    rc: int = 0
    for file in _get_feature_files(root, args.files):
        text_document = TextDocument(file.resolve().as_uri())
        diagnostics = validate_gherkin(inventory, text_document)

        if len(diagnostics) < 1:
            continue

        rc = 1

        filename = file.resolve().as_posix().replace(root.as_posix(), '').lstrip('/\\')

        for diagnostic in diagnostics:
            print(diagnostic_to_text(filename, diagnostic))

    return rc
