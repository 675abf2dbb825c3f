import pytest

from lsprotocol import types as lsp
from pygls.workspace import TextDocument

from gherkin_steps_ls.server.inventory import StepInventory
from gherkin_steps_ls.server.features.diagnostics import (
    StepDiagnostic,
    validate_step,
    validate_gherkin,
    validate_configuration,
)

from tests.fixtures import StepsProject, STEP_PATTERNS


def test_validate_step(inventory: StepInventory) -> None:
    assert validate_step(inventory, 'Feature: example', 0) is None
    assert validate_step(inventory, '', 0) is None
    assert validate_step(inventory, '    # Given a comment', 0) is None
    assert validate_step(inventory, '    When I click yes', 0) is None

    diagnostic = validate_step(inventory, '    Then I see something unknown  ', 3)

    assert diagnostic is not None
    assert diagnostic.message == 'Was unable to find step for "Then I see something unknown"'
    assert diagnostic.severity == lsp.DiagnosticSeverity.Warning
    assert diagnostic.source == 'gherkin-steps-ls'
    assert diagnostic.range == lsp.Range(
        start=lsp.Position(line=3, character=4),
        end=lsp.Position(line=3, character=len('    Then I see something unknown')),
    )


@pytest.mark.parametrize(
    'keyword',
    ['Given', 'When', 'Then', 'And', 'But'],
)
def test_validate_step_known_steps(project: StepsProject, keyword: str) -> None:
    project.write('features/steps/results.py', "@then(r'^I have (\\d+) results$')\ndef step_results(context, count):\n    pass\n")

    inventory = StepInventory()
    inventory.populate(project.root, STEP_PATTERNS)

    assert 'I have (d+) results' in [step.text for step in inventory]

    # display text of every step is a valid step itself
    for step in inventory:
        assert validate_step(inventory, f'{keyword} {step.text}', 0) is None


def test_step_diagnostic() -> None:
    kwargs = dict(
        range=lsp.Range(start=lsp.Position(line=1, character=4), end=lsp.Position(line=1, character=10)),
        message='Was unable to find step for "Given foo"',
        severity=lsp.DiagnosticSeverity.Warning,
        source='gherkin-steps-ls',
    )

    assert StepDiagnostic(**kwargs) == StepDiagnostic(**kwargs)  # type: ignore
    assert len({StepDiagnostic(**kwargs), StepDiagnostic(**kwargs)}) == 1  # type: ignore
    assert StepDiagnostic(**{**kwargs, 'message': 'foo'}) != StepDiagnostic(**kwargs)  # type: ignore
    assert StepDiagnostic(**{**kwargs, 'severity': lsp.DiagnosticSeverity.Error}) == StepDiagnostic(**kwargs)  # type: ignore


def test_validate_gherkin(project: StepsProject, inventory: StepInventory) -> None:
    text_document = TextDocument(project.feature.as_uri())

    diagnostics = validate_gherkin(inventory, text_document)

    assert len(diagnostics) == 1

    diagnostic = diagnostics[0]
    assert diagnostic.message == 'Was unable to find step for "Then I see something unknown"'
    assert diagnostic.range.start == lsp.Position(line=7, character=8)
    assert diagnostic.range.end == lsp.Position(line=7, character=len('        Then I see something unknown'))

    text_document = TextDocument(
        'file:///test.feature',
        'Feature: test\r\n    Scenario: test\r\n        Given I click maybe\r\n        When I click yes\r\n',
    )

    diagnostics = validate_gherkin(inventory, text_document)

    assert [diagnostic.range.start.line for diagnostic in diagnostics] == [2]
    assert diagnostics[0].message == 'Was unable to find step for "Given I click maybe"'

    assert validate_gherkin(StepInventory(), TextDocument('file:///empty.feature', '')) == []


def test_validate_configuration(project: StepsProject) -> None:
    assert validate_configuration(project.root, STEP_PATTERNS) == []

    diagnostics = validate_configuration(project.root, ['features/steps/**/*.rb'])

    assert len(diagnostics) == 1
    assert diagnostics[0].message == 'No steps files found'
    assert diagnostics[0].severity == lsp.DiagnosticSeverity.Warning
    assert diagnostics[0].range.start == lsp.Position(line=0, character=0)

    settings_file = project.write(
        '.vscode/settings.json',
        '''{
    "gherkin_steps.steps": [
        "features/steps/**/*.py",
        "features/steps/**/*.rb"
    ]
}
''',
    )

    diagnostics = validate_configuration(project.root, ['features/steps/**/*.py', 'features/steps/**/*.rb'], settings_file)

    assert len(diagnostics) == 1
    assert diagnostics[0].range == lsp.Range(
        start=lsp.Position(line=3, character=8),
        end=lsp.Position(line=3, character=8 + len('"features/steps/**/*.rb"')),
    )

    # settings file that does not exist
    diagnostics = validate_configuration(project.root, ['features/steps/**/*.rb'], project.root / 'missing.json')

    assert diagnostics[0].range.start == lsp.Position(line=0, character=0)
