"""Tests for Settings and the CLI argument defaults."""

import pytest

import main
from src.registry.config import Settings

ENV_VARS = ('RDV_HOST', 'RDV_HTTP_PORT', 'RDV_DEFAULT_PORT', 'RDV_TTL', 'RDV_EXPIRE_PERIOD', 'RDV_TRUST_PROXY')


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env()
        assert settings == Settings()
        assert settings.default_port == 443
        assert settings.initial_ttl == 60
        assert settings.expire_period == 10
        assert settings.trust_proxy is False

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv('RDV_HTTP_PORT', '9090')
        monkeypatch.setenv('RDV_DEFAULT_PORT', '8443')
        monkeypatch.setenv('RDV_TTL', '120')
        monkeypatch.setenv('RDV_EXPIRE_PERIOD', '5')
        monkeypatch.setenv('RDV_TRUST_PROXY', 'yes')

        settings = Settings.from_env()
        assert settings.http_port == 9090
        assert settings.default_port == 8443
        assert settings.initial_ttl == 120
        assert settings.expire_period == 5
        assert settings.trust_proxy is True

    @pytest.mark.parametrize(
        'kwargs',
        [
            {'initial_ttl': 0},
            {'initial_ttl': 256},
            {'expire_period': 0},
            {'default_port': 70000},
            {'http_port': 65536},
            {'http_port': -1},
        ],
    )
    def test_rejects_out_of_range(self, kwargs):
        with pytest.raises(ValueError):
            Settings(**kwargs)


class TestCli:
    def test_no_command_means_start(self):
        args = main.parse_args([])
        assert args.command == 'start'
        assert args.port == 8080
        assert args.ttl == 60

    def test_env_feeds_defaults(self, monkeypatch):
        monkeypatch.setenv('RDV_TTL', '30')
        args = main.parse_args(['start', '--expire-period', '3'])
        assert args.ttl == 30
        assert args.expire_period == 3

    def test_invalid_ttl_exits(self, monkeypatch):
        monkeypatch.setattr(main, 'run_start', lambda settings: pytest.fail('server must not start'))
        with pytest.raises(SystemExit):
            main.main(['start', '--ttl', '300'])

    def test_main_builds_settings(self, monkeypatch):
        seen = []
        monkeypatch.setattr(main, 'run_start', seen.append)
        main.main(['start', '--port', '9000', '--default-port', '80', '--trust-proxy'])
        assert seen == [Settings(http_port=9000, default_port=80, trust_proxy=True)]
