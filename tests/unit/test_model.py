import logging

from _pytest.logging import LogCaptureFixture

from gherkin_steps_ls.constants import DEFAULT_STEPS, DEFAULT_SYNC_FEATURES
from gherkin_steps_ls.model import Settings


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()

        assert settings.steps == DEFAULT_STEPS
        assert settings.steps is not DEFAULT_STEPS
        assert settings.sync_features is True
        assert settings.diagnostics_on_save_only
        assert settings.features_pattern == DEFAULT_SYNC_FEATURES

    def test_features_pattern(self) -> None:
        assert Settings(sync_features=False).features_pattern is None
        assert Settings(sync_features='').features_pattern is None
        assert Settings(sync_features='test/**/*.feature').features_pattern == 'test/**/*.feature'

    def test_from_client_settings(self, caplog: LogCaptureFixture) -> None:
        assert Settings.from_client_settings(None) == Settings()
        assert Settings.from_client_settings({}) == Settings()

        settings = Settings.from_client_settings(
            {
                'steps': ['steps/*.js', 'steps/*.py'],
                'sync_features': 'features/*.feature',
                'diagnostics_on_save_only': False,
                'unknown': 'ignored',
            }
        )

        assert settings.steps == ['steps/*.js', 'steps/*.py']
        assert settings.sync_features == 'features/*.feature'
        assert not settings.diagnostics_on_save_only

        settings = Settings.from_client_settings({'steps': 'steps/*.rb', 'sync_features': False})
        assert settings.steps == ['steps/*.rb']
        assert settings.features_pattern is None

        with caplog.at_level(logging.WARNING):
            settings = Settings.from_client_settings({'steps': [1, 2], 'sync_features': 42})

        assert settings == Settings()
        assert caplog.messages == [
            'ignoring invalid value for setting "steps": [1, 2]',
            'ignoring invalid value for setting "sync_features": 42',
        ]
