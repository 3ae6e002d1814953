"""Tests for the command-line interface."""
import json

import pytest
from typer.testing import CliRunner

from bins import __version__
from bins.cli import main as cli
from bins.core.config import Config
from bins.core.exceptions import ConfigError
from bins.core.options import UrlOutputMode

runner = CliRunner()


@pytest.fixture
def config(monkeypatch):
    """Skip the config file and use an empty configuration."""
    monkeypatch.setattr(cli, 'load_config', lambda: Config.default())


@pytest.fixture
def captured(monkeypatch):
    """Replace the dispatcher with one that records its options."""
    seen = {}

    class RecordingBins:
        def __init__(self, config, options):
            seen['options'] = options

        async def main(self):
            return 'https://paste.test/abc'

    monkeypatch.setattr(cli, 'Bins', RecordingBins)
    return seen


class TestCli:
    """Test suite for the bins command."""

    def test_version(self):
        result = runner.invoke(cli.app, ['--version'])

        assert result.exit_code == 0
        assert result.stdout.strip() == f"bins {__version__}"

    def test_list_bins(self, config):
        result = runner.invoke(cli.app, ['--list-bins'])

        assert result.exit_code == 0
        assert result.stdout.split() == ['bitbucket', 'gist', 'hastebin', 'pastebin', 'pastegg', 'sprunge']

    def test_options_passed(self, config, captured):
        result = runner.invoke(cli.app, ['-b', 'sprunge', '-m', 'hello', '-p', '-A', '-H'])

        assert result.exit_code == 0
        assert result.stdout.strip() == 'https://paste.test/abc'
        options = captured['options']
        assert options.bin == 'sprunge'
        assert options.message == 'hello'
        assert options.private is True
        assert options.authed is False
        assert options.url_output == UrlOutputMode.HTML

    def test_download_arguments(self, config, captured):
        result = runner.invoke(cli.app, ['-n', '0,2', 'https://gist.github.com/abc'])

        assert result.exit_code == 0
        options = captured['options']
        assert options.inputs == ('https://gist.github.com/abc',)
        assert str(options.range) == '0,2'
        assert options.private is None

    @pytest.mark.parametrize("args,message", [
        (['-p', '-P', '-m', 'x'], "--private and --public cannot be used together"),
        (['-l', '-b', 'gist'], "--list-bins and --bin cannot be used together"),
        (['-r', '-H', 'https://x.test/a'], "--raw-urls and --html-urls cannot be used together"),
        (['-m', 'x', 'file.txt'], "--message and input files cannot be used together"),
    ])
    def test_conflicting_flags(self, config, args, message):
        result = runner.invoke(cli.app, args)

        assert result.exit_code == 1
        assert message in result.output

    def test_bad_range(self, config):
        result = runner.invoke(cli.app, ['-n', '1-x', 'https://gist.github.com/abc'])

        assert result.exit_code == 1
        assert "error parsing range" in result.output

    def test_json_error(self, config):
        """Test errors are a JSON object on stdout with --json."""
        result = runner.invoke(cli.app, ['-j', '-b', 'nope', '-m', 'x'])

        assert result.exit_code == 1
        assert json.loads(result.stdout) == {'message': 'there is no bin called "nope"', 'causes': []}

    def test_config_error(self, monkeypatch):
        def broken():
            raise ConfigError("could not parse configuration file", causes=["line 1"])

        monkeypatch.setattr(cli, 'load_config', broken)
        result = runner.invoke(cli.app, ['-m', 'x'])

        assert result.exit_code == 1
        assert "could not parse configuration file" in result.output
        assert "line 1" in result.output

    def test_paste_content_verbatim(self, config, monkeypatch):
        """Test downloaded text keeps tabs and markup-like brackets."""
        class TextBins:
            def __init__(self, config, options):
                pass

            async def main(self):
                return "[bold]a\tb[/bold] :smile:"

        monkeypatch.setattr(cli, 'Bins', TextBins)
        result = runner.invoke(cli.app, ['https://paste.test/abc'])

        assert result.exit_code == 0
        assert result.stdout == "[bold]a\tb[/bold] :smile:\n"
