from typing import List


KEYWORDS: List[str] = ['Given', 'When', 'Then', 'But', 'And']
KEYWORD_CONTINUATION = 'And'

DIAGNOSTIC_SOURCE = 'gherkin-steps-ls'

LANGUAGE_ID = 'gherkin'
FEATURE_FILE_SUFFIX = '.feature'

SETTINGS_SECTION = 'gherkin_steps'
SETTINGS_FILE = '.vscode/settings.json'

DEFAULT_STEPS: List[str] = ['features/steps/**/*.py']
DEFAULT_SYNC_FEATURES = '**/*.feature'

SORT_PREFIX_WIDTH = 5

COMMAND_REBUILD_INVENTORY = 'gherkin-steps-ls.rebuild-inventory'

ENV_RUN_EMBEDDED = 'GHERKIN_STEPS_LS_RUN_EMBEDDED'
