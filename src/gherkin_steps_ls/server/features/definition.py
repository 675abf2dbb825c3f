from __future__ import annotations

from typing import Optional

from lsprotocol import types as lsp

from gherkin_steps_ls.server.inventory import StepInventory
from gherkin_steps_ls.text import get_gherkin_match


def get_step_definition(inventory: StepInventory, line: str, character: int) -> Optional[lsp.Location]:
    # where in the line the cursor is does not matter, the whole step is the link
    match = get_gherkin_match(line)

    if match is None:
        return None

    step = inventory.find_by_text(match.group(4))

    return step.definition if step is not None else None
