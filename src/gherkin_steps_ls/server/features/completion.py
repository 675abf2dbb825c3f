from __future__ import annotations

import re
import logging

from typing import List, Optional

from lsprotocol import types as lsp

from gherkin_steps_ls.constants import KEYWORD_CONTINUATION
from gherkin_steps_ls.server.inventory import StepInventory
from gherkin_steps_ls.text import (
    get_completion_insert_text,
    get_gherkin_match,
    get_sort_prefix,
    normalize_step_part,
)


logger = logging.getLogger(__name__)


def get_base_keyword(position: lsp.Position, lines: List[str]) -> str:
    """Keyword of the closest line above `position` that is not a continuation of an earlier step,
    empty string if there is none."""
    for line in reversed(lines[: position.line]):
        match = get_gherkin_match(line)

        if match is not None and match.group(2) != KEYWORD_CONTINUATION:
            return match.group(2)

    return ''


def _compile_step_part(step_part: str) -> re.Pattern[str]:
    try:
        return re.compile(step_part)
    except re.error:
        # whatever the user has typed should be matched as is
        return re.compile(re.escape(step_part))


def complete_step(
    inventory: StepInventory,
    line: str,
    position: lsp.Position,
    lines: List[str],
) -> Optional[List[lsp.CompletionItem]]:
    match = get_gherkin_match(line)

    if match is None:
        # free text, suggest any step containing it
        step_part, keyword = line, ''
    else:
        step_part, keyword = match.group(4), match.group(2)

    if keyword == KEYWORD_CONTINUATION:
        keyword = get_base_keyword(position, lines)

    step_part = normalize_step_part(step_part)
    step_part_pattern = _compile_step_part(step_part)

    logger.debug(f'{line=}, {keyword=}, {step_part=}')

    items: List[lsp.CompletionItem] = []

    for step in inventory:
        if step_part_pattern.search(step.text) is None:
            continue

        # step definitions can be declared with lowercase keywords, e.g. `@given`
        if len(keyword) > 0 and step.keyword.lower() != keyword.lower():
            continue

        label = step_part_pattern.sub('', step.text, count=1)

        items.append(
            lsp.CompletionItem(
                label=label,
                kind=lsp.CompletionItemKind.Snippet,
                data=step.id,
                sort_text=f'{get_sort_prefix(step.count)}_{label}',
                insert_text=get_completion_insert_text(label),
                insert_text_format=lsp.InsertTextFormat.Snippet,
            )
        )

    if len(items) < 1:
        return None

    return sorted(items, key=lambda item: item.sort_text or '')


def resolve_completion(inventory: StepInventory, item: lsp.CompletionItem) -> lsp.CompletionItem:
    """An accepted completion counts as one more usage of the step."""
    if isinstance(item.data, str):
        inventory.increment_usage(item.data)

    return item
