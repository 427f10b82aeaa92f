from typer.testing import CliRunner

from physobj.main import app

runner = CliRunner()


def test_help_shows_commands():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "import" in result.stdout
    assert "validate" in result.stdout
    assert "terms" in result.stdout


def test_import_requires_filename(tmp_path):
    result = runner.invoke(app, ["--log-dir", str(tmp_path / "logs"), "--report-dir", str(tmp_path / "r"), "import"])
    assert result.exit_code == 2


def test_invalid_multi_value_delimiter(tmp_path):
    result = runner.invoke(
        app,
        ["--log-dir", str(tmp_path / "logs"), "--multi-value-delimiter", "||", "validate", "x.csv"],
    )
    assert result.exit_code == 2
