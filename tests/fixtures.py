from typing import Dict, Optional
from pathlib import Path


STEPS_PY = '''from behave import given, when, then


@given(u'a user of type "{user_type}"')
def step_user(context, user_type):
    pass


@when(u'I click (yes|no)')
def step_click(context):
    pass


# @then(u'this step is commented out')
@then('I have {int} items')
def step_items(context):
    pass


@then('the total is {float}')
def step_total(context):
    pass


@then(u'I see "(unclosed" on the page')
def step_broken(context):
    pass
'''

STEPS_JS = '''// steps for the web application
Given(/^I am on the "(.*)" page$/, function (page) {
    return this.open(page);
});

When(/^I click yes$/, function () {
    return this.click(true);
});

Then('I should see {string}', function (text) {
    return this.see(text);
});

/*
Then('I am a commented out step', function () {
});
*/
'''

FEATURE = '''Feature: example
    Scenario: first
        Given a user of type "RestApi"
        When I click yes
        And I click no
        Then I have 3 items
        And the total is 1.5
        Then I see something unknown

    Scenario: second
        Given I am on the "start" page
        When I click yes
'''

STEP_PATTERNS = ['features/steps/**/*.py', 'features/steps/**/*.js']


class StepsProject:
    root: Path

    def __init__(self, root: Path) -> None:
        self.root = root

    def write(self, path: str, content: str) -> Path:
        file = self.root / path
        file.parent.mkdir(parents=True, exist_ok=True)
        file.write_text(content, encoding='utf-8')

        return file

    def create(self, files: Optional[Dict[str, str]] = None) -> 'StepsProject':
        if files is None:
            files = {
                'features/steps/steps.py': STEPS_PY,
                'features/steps/web.js': STEPS_JS,
                'features/example.feature': FEATURE,
            }

        for path, content in files.items():
            self.write(path, content)

        return self

    @property
    def steps_py(self) -> Path:
        return self.root / 'features' / 'steps' / 'steps.py'

    @property
    def steps_js(self) -> Path:
        return self.root / 'features' / 'steps' / 'web.js'

    @property
    def feature(self) -> Path:
        return self.root / 'features' / 'example.feature'


def line_of(source: str, text: str) -> int:
    return source.splitlines().index(text)
