from __future__ import annotations

from typing import Any, List, Optional, Tuple, Union
from pathlib import Path

from pygls.workspace import TextDocument
from lsprotocol import types as lsp
from ordered_set import OrderedSet

from gherkin_steps_ls.constants import DIAGNOSTIC_SOURCE
from gherkin_steps_ls.server.inventory import StepInventory
from gherkin_steps_ls.text import get_gherkin_match, get_lines
from gherkin_steps_ls.utils import glob_files


class StepDiagnostic(lsp.Diagnostic):
    """Hashable diagnostic, identified by where it starts and what it says."""

    @property
    def key(self) -> Tuple[int, int, str]:
        return (self.range.start.line, self.range.start.character, self.message)

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, StepDiagnostic) and self.key == other.key

    def __hash__(self) -> int:  # type: ignore[override]
        return hash(self.key)


def validate_step(inventory: StepInventory, line: str, lineno: int) -> Optional[lsp.Diagnostic]:
    line = line.rstrip()
    match = get_gherkin_match(line)

    if match is None:
        return None

    if inventory.find_by_text(match.group(4)) is not None:
        return None

    indentation = match.group(1)

    return StepDiagnostic(
        range=lsp.Range(
            start=lsp.Position(line=lineno, character=len(indentation)),
            end=lsp.Position(line=lineno, character=len(line)),
        ),
        message=f'Was unable to find step for "{line.lstrip()}"',
        severity=lsp.DiagnosticSeverity.Warning,
        source=DIAGNOSTIC_SOURCE,
    )


def validate_gherkin(inventory: StepInventory, text_document: TextDocument) -> List[lsp.Diagnostic]:
    diagnostics: OrderedSet[lsp.Diagnostic] = OrderedSet()

    for lineno, line in enumerate(get_lines(text_document.source)):
        diagnostic = validate_step(inventory, line, lineno)

        if diagnostic is not None:
            diagnostics.add(diagnostic)

    return list(diagnostics)


def _get_text_range(path: Optional[Path], text: str) -> lsp.Range:
    """Range of the first occurrence of `text` in file `path`, start of file if not found."""
    if path is not None and path.is_file():
        for lineno, line in enumerate(get_lines(path.read_text(encoding='utf-8'))):
            character = line.find(text)
            if character < 0:
                continue

            return lsp.Range(
                start=lsp.Position(line=lineno, character=character),
                end=lsp.Position(line=lineno, character=character + len(text)),
            )

    return lsp.Range(
        start=lsp.Position(line=0, character=0),
        end=lsp.Position(line=0, character=0),
    )


def validate_configuration(
    root: Union[str, Path],
    step_patterns: List[str],
    settings_file: Optional[Path] = None,
) -> List[lsp.Diagnostic]:
    diagnostics: List[lsp.Diagnostic] = []

    for step_pattern in step_patterns:
        if len(glob_files(root, step_pattern)) > 0:
            continue

        diagnostics.append(
            StepDiagnostic(
                range=_get_text_range(settings_file, f'"{step_pattern}"'),
                message='No steps files found',
                severity=lsp.DiagnosticSeverity.Warning,
                source=DIAGNOSTIC_SOURCE,
            )
        )

    return diagnostics
