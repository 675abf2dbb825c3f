from __future__ import annotations

import re
import logging

from typing import Any, Dict, List, Optional, Union
from dataclasses import dataclass, field

from lsprotocol.types import Location

from gherkin_steps_ls.constants import DEFAULT_STEPS, DEFAULT_SYNC_FEATURES


logger = logging.getLogger(__name__)


@dataclass
class Step:
    id: str
    pattern: re.Pattern[str]
    text: str
    description: str
    keyword: str
    definition: Location
    count: int = field(default=0)


@dataclass
class Settings:
    steps: List[str] = field(default_factory=lambda: list(DEFAULT_STEPS))
    sync_features: Union[bool, str] = field(default=True)
    diagnostics_on_save_only: bool = field(default=True)

    @property
    def features_pattern(self) -> Optional[str]:
        """Glob used for counting step usage, `None` if usage should not be counted."""
        if self.sync_features is True:
            return DEFAULT_SYNC_FEATURES
        elif isinstance(self.sync_features, str) and len(self.sync_features.strip()) > 0:
            return self.sync_features

        return None

    @classmethod
    def from_client_settings(cls, client_settings: Optional[Dict[str, Any]]) -> Settings:
        settings = cls()

        if client_settings is None:
            return settings

        steps = client_settings.get('steps', None)
        if isinstance(steps, str):
            steps = [steps]

        if isinstance(steps, list) and all(isinstance(step, str) for step in steps):
            settings.steps = list(steps)
        elif steps is not None:
            logger.warning(f'ignoring invalid value for setting "steps": {steps!r}')

        sync_features = client_settings.get('sync_features', None)
        if isinstance(sync_features, (bool, str)):
            settings.sync_features = sync_features
        elif sync_features is not None:
            logger.warning(f'ignoring invalid value for setting "sync_features": {sync_features!r}')

        diagnostics_on_save_only = client_settings.get('diagnostics_on_save_only', None)
        if isinstance(diagnostics_on_save_only, bool):
            settings.diagnostics_on_save_only = diagnostics_on_save_only

        return settings
