from click.testing import CliRunner

from tyr import __version__
from tyr.cli.main import cli


def test_version():
    assert __version__ == "0.3.0"


def test_cli_help():
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "STRIDE threat modeling" in result.output
    for command in ("analyze", "scan", "interactive"):
        assert command in result.output


def test_cli_version():
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.3.0" in result.output
