from __future__ import annotations

import re

from typing import List, Optional
from hashlib import md5

from lsprotocol.types import Position
from pygls.workspace import TextDocument

from gherkin_steps_ls.constants import KEYWORDS, SORT_PREFIX_WIDTH


GHERKIN_PATTERN = re.compile(rf'^(\s*)({"|".join(KEYWORDS)})(\s+)(.*)')

# <!-- step argument to regular expression, stages are applied in the order they are declared
INTERPOLATION_PATTERN = re.compile(r'#\{(.*?)\}')

BUILTIN_TYPES = {
    '{float}': r'-?\d*\.?\d+',
    '{int}': r'-?\d+',
    '{stringInDoubleQuotes}': r'"[^"]+"',
}

# `{name}` that is not escaped, and not a counted repetition (`{2}`, `{2,}`, `{,2}`)
CUSTOM_TYPE_PATTERN = re.compile(r'(?<!\\)\{(?![\d,])(.*?)\}')

UNESCAPED_SLASH_PATTERN = re.compile(r'(?<!\\)/')
# // -->

INVARIANT_PATTERN = re.compile(r'\(([^()]+\|[^()]+)\)')

INSERT_FIELD_PATTERN = re.compile(r'\{_(.+?)_\}')

LINE_SEPARATOR_PATTERN = re.compile(r'\r?\n')
BLOCK_COMMENT_PATTERN = re.compile(r'/\*.*?\*/', re.DOTALL)
LINE_COMMENT_PATTERN = re.compile(r'^\s*(#|//)')


def get_lines(source: str) -> List[str]:
    return LINE_SEPARATOR_PATTERN.split(source)


def get_current_line(text_document: TextDocument, position: Position) -> str:
    lines = get_lines(text_document.source)

    try:
        return lines[position.line]
    except IndexError:
        return ''


def get_gherkin_match(line: str) -> Optional[re.Match[str]]:
    return GHERKIN_PATTERN.match(line)


def replace_interpolations(step: str) -> str:
    """Embedded expressions, e.g. ruby `#{value}`, can be anything."""
    return INTERPOLATION_PATTERN.sub('.*', step)


def replace_builtin_types(step: str) -> str:
    for placeholder, pattern in BUILTIN_TYPES.items():
        step = step.replace(placeholder, pattern)

    return step


def replace_custom_types(step: str) -> str:
    """Cucumber expression custom parameter types, and behave/parse named fields (`{name}`, `{name:d}`)."""
    return CUSTOM_TYPE_PATTERN.sub('.*', step)


def escape_pattern(step: str) -> str:
    """The step body is a regular expression in the regex dialects, only the body delimiter must be escaped."""
    return UNESCAPED_SLASH_PATTERN.sub(r'\/', step)


def get_step_pattern_text(step: str) -> str:
    step = replace_interpolations(step)
    step = replace_builtin_types(step)
    step = replace_custom_types(step)

    return escape_pattern(step)


def compile_step_pattern(step: str) -> re.Pattern[str]:
    """Raises `re.error` if the step can not be used as a regular expression."""
    return re.compile(get_step_pattern_text(step))


def get_step_text(step: str) -> str:
    step = step.replace('\\', '')

    # regular expression anchors
    step = re.sub(r'^\^|\$$', '', step)

    # `"(.*)"` is shown as `""`
    return re.sub(r'"\([^)]*\)"', '""', step)


def get_step_id(text: str) -> str:
    return f'step{md5(text.encode("utf-8")).hexdigest()}'


def get_step_description(line: str) -> str:
    # function body
    description = re.sub(r'\{.*', '', line).strip()

    # body start of javascript regular expression steps, e.g. `Given(/^`
    return description.replace('(/^', '', 1).strip()


def get_step_text_invariants(step: str) -> List[str]:
    """Expand alternation groups, `I click (yes|no)` is both `I click yes` and `I click no`.

    Every group is expanded, so the result is the cross product of all alternatives, in the
    order they are written.
    """
    match = INVARIANT_PATTERN.search(step)

    if match is None:
        return [step]

    group = match.group(1)
    if group.startswith('?:'):
        group = group[2:]

    invariants: List[str] = []
    start, end = match.span()

    for variant in group.split('|'):
        invariants.extend(get_step_text_invariants(f'{step[:start]}{variant}{step[end:]}'))

    return invariants


def clear_comments(source: str) -> str:
    """Blank out comments, without moving anything else in the source to another line or column."""
    source = BLOCK_COMMENT_PATTERN.sub(lambda match: re.sub(r'[^\n]', ' ', match.group(0)), source)

    return '\n'.join(['' if LINE_COMMENT_PATTERN.match(line) else line for line in get_lines(source)])


def normalize_step_part(text: str) -> str:
    # user values enclosed in double quotes are not part of the step
    text = re.sub(r'"[^"]*"', '""', text)

    # the word that is currently being typed
    return re.sub(r'[^\s]+$', '', text)


def escape_snippet(text: str) -> str:
    return re.sub(r'([\\$}])', r'\\\1', text)


def get_completion_insert_text(text: str) -> str:
    """Fields written as `{_name_}` becomes numbered snippet placeholders, `${1:<name>}`."""
    buffer: List[str] = []
    offset = 0

    for index, match in enumerate(INSERT_FIELD_PATTERN.finditer(text), start=1):
        buffer.append(escape_snippet(text[offset : match.start()]))
        buffer.append(f'${{{index}:<{escape_snippet(match.group(1))}>}}')
        offset = match.end()

    buffer.append(escape_snippet(text[offset:]))

    return ''.join(buffer)


def get_sort_prefix(count: int, width: int = SORT_PREFIX_WIDTH) -> str:
    """Fixed width prefix that sorts higher counts first."""
    maximum = 10**width - 1
    count = min(max(count, 0), maximum)

    return str(maximum - count).zfill(width)
