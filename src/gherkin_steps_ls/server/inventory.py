from __future__ import annotations

import re
import logging

from typing import Dict, Iterator, List, Optional, Union, TYPE_CHECKING
from pathlib import Path

from lsprotocol import types as lsp

from gherkin_steps_ls.constants import KEYWORDS
from gherkin_steps_ls.model import Step
from gherkin_steps_ls.text import (
    clear_comments,
    compile_step_pattern,
    get_gherkin_match,
    get_lines,
    get_step_description,
    get_step_id,
    get_step_text,
    get_step_text_invariants,
)
from gherkin_steps_ls.utils import glob_files, read_file


if TYPE_CHECKING:  # pragma: no cover
    from gherkin_steps_ls.server import StepsLanguageServer


logger = logging.getLogger(__name__)


# anything that doesn't end with a word character can come before the keyword, e.g. `@`, `Given(`,
# `    @when(`. the step itself is enclosed in `/`, `'` or `"`, python string prefixes are allowed
# before the opening delimiter (`@given(u'...')`)
STEP_DECLARATION_PATTERN = re.compile(
    r'^(?P<prefix>(?:[^\'"/]*?[^\w])|)'
    rf'(?P<keyword>{"|".join(KEYWORDS)})'
    r'[^/\'"\w]*?'
    r'(?:[rub]{1,2})?'
    r'(?P<delimiter>[/\'"])'
    r'(?P<body>(?:(?!(?P=delimiter)).)+)'
    r'(?P=delimiter)',
    re.IGNORECASE,
)


def get_steps(line: str, keyword: str, body: str, definition: lsp.Location) -> List[Step]:
    steps: List[Step] = []
    description = get_step_description(line)

    for variant in get_step_text_invariants(body):
        try:
            pattern = compile_step_pattern(variant)
        except re.error as e:
            logger.debug(f'ignoring step "{variant}" in {definition.uri}:{definition.range.start.line + 1}: {str(e)}')
            continue

        text = get_step_text(variant)

        steps.append(
            Step(
                id=get_step_id(text),
                pattern=pattern,
                text=text,
                description=description,
                keyword=keyword,
                definition=definition,
            )
        )

    return steps


def get_file_steps(path: Path, source: str) -> List[Step]:
    steps: List[Step] = []
    uri = path.resolve().as_uri()

    for lineno, line in enumerate(get_lines(clear_comments(source))):
        match = STEP_DECLARATION_PATTERN.match(line)
        if match is None:
            continue

        position = lsp.Position(line=lineno, character=len(match.group('prefix')))
        definition = lsp.Location(uri=uri, range=lsp.Range(start=position, end=position))

        steps.extend(get_steps(line, match.group('keyword'), match.group('body'), definition))

    return steps


def _read_file(path: Path) -> Optional[str]:
    try:
        return read_file(path)
    except (OSError, UnicodeDecodeError):
        logger.warning(f'unable to read {path.as_posix()}', exc_info=True)
        return None


class StepInventory:
    """All steps found in the step definition files of a workspace, in the order they were found.

    Rebuilt as a whole by `populate`, usage counts are recalculated as a whole by `set_usage`.
    """

    files: List[Path]
    usage: Dict[str, int]

    _steps: List[Step]
    _steps_by_id: Dict[str, Step]

    def __init__(self) -> None:
        self.files = []
        self.usage = {}
        self._steps = []
        self._steps_by_id = {}

    def __len__(self) -> int:
        return len(self._steps)

    def __iter__(self) -> Iterator[Step]:
        return iter(self._steps)

    @property
    def steps(self) -> List[Step]:
        return list(self._steps)

    def get(self, step_id: str) -> Optional[Step]:
        return self._steps_by_id.get(step_id, None)

    def populate(self, root: Union[str, Path], step_patterns: List[str]) -> None:
        files: List[Path] = []

        for step_pattern in step_patterns:
            for file in glob_files(root, step_pattern):
                if file not in files:
                    files.append(file)

        steps: List[Step] = []
        steps_by_id: Dict[str, Step] = {}

        for file in files:
            source = _read_file(file)
            if source is None:
                continue

            for step in get_file_steps(file, source):
                # first declaration wins
                if step.id in steps_by_id:
                    logger.debug(f'step "{step.text}" in {file.as_posix()} is already declared in {steps_by_id[step.id].definition.uri}')
                    continue

                step.count = self.usage.get(step.id, 0)
                steps.append(step)
                steps_by_id.update({step.id: step})

        self.files = files
        self._steps = steps
        self._steps_by_id = steps_by_id

        logger.debug(f'found {len(steps)} steps in {len(files)} files')

    def find_by_text(self, text: str) -> Optional[Step]:
        for step in self._steps:
            if step.pattern.search(text):
                return step

        # display text of a step, e.g. `I have {int} items`, doesn't always match its own pattern
        return self._steps_by_id.get(get_step_id(text), None)

    def set_usage(self, root: Union[str, Path], scenario_pattern: str) -> None:
        usage: Dict[str, int] = {}

        for file in glob_files(root, scenario_pattern):
            source = _read_file(file)
            if source is None:
                continue

            for line in get_lines(source):
                match = get_gherkin_match(line)
                if match is None:
                    continue

                step = self.find_by_text(match.group(4))
                if step is None:
                    continue

                usage.update({step.id: usage.get(step.id, 0) + 1})

        self.usage = usage

        for step in self._steps:
            step.count = self.get_usage(step.id)

    def get_usage(self, step_id: str) -> int:
        return self.usage.get(step_id, 0)

    def increment_usage(self, step_id: str) -> None:
        count = self.get_usage(step_id) + 1
        self.usage.update({step_id: count})

        step = self.get(step_id)
        if step is not None:
            step.count = count


def compile_inventory(ls: StepsLanguageServer) -> None:
    ls.logger.debug('creating step inventory')
    project_name = ls.root_path.stem

    inventory = StepInventory()
    # usage from accepted completions survives a rebuild, unless it is recalculated
    inventory.usage = ls.inventory.usage.copy()
    inventory.populate(ls.root_path, ls.settings.steps)

    features_pattern = ls.settings.features_pattern
    if features_pattern is not None:
        inventory.set_usage(ls.root_path, features_pattern)

    ls.inventory = inventory

    ls.logger.info(f'found {len(inventory)} steps in {len(inventory.files)} files in "{project_name}"')
