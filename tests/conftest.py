from typing import Generator
from pathlib import Path

import pytest

from pytest_mock import MockerFixture
from pygls.workspace import Workspace

from gherkin_steps_ls.model import Settings
from gherkin_steps_ls.server import StepsLanguageServer
from gherkin_steps_ls.server.inventory import StepInventory

from .fixtures import StepsProject, STEP_PATTERNS


@pytest.fixture
def project(tmp_path: Path) -> StepsProject:
    return StepsProject(tmp_path).create()


@pytest.fixture
def inventory(project: StepsProject) -> StepInventory:
    inventory = StepInventory()
    inventory.populate(project.root, STEP_PATTERNS)
    inventory.set_usage(project.root, '**/*.feature')

    return inventory


@pytest.fixture
def ls(project: StepsProject, mocker: MockerFixture) -> Generator[StepsLanguageServer, None, None]:
    server = StepsLanguageServer()
    server.root_path = project.root
    server.settings = Settings(steps=list(STEP_PATTERNS))
    server.lsp._workspace = Workspace(project.root.as_uri())  # type: ignore

    mocker.patch.object(server, 'publish_diagnostics', return_value=None)
    mocker.patch.object(server, 'show_message', return_value=None)
    mocker.patch.object(server, 'show_message_log', return_value=None)

    yield server

    server.loop.close()
