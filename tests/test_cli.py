"""CLI smoke tests using typer's CliRunner."""

import json

import pytest
from typer.testing import CliRunner

from quickcompile.cli.app import app

runner = CliRunner()


@pytest.fixture
def greeter_file(tmp_path, greeter_source):
    path = tmp_path / "greeter.py"
    path.write_text(greeter_source)
    return path


@pytest.fixture
def calculator_file(tmp_path, calculator_source):
    path = tmp_path / "calculator.py"
    path.write_text(calculator_source)
    return path


@pytest.fixture
def bad_file(tmp_path, bad_source):
    path = tmp_path / "bad.py"
    path.write_text(bad_source)
    return path


class TestCheckCommand:
    """Tests for the check command."""

    def test_check_ok(self, greeter_file, isolated_config):
        result = runner.invoke(app, ["check", str(greeter_file)])
        assert result.exit_code == 0
        assert "OK. module=greeter" in result.output
        assert "Greeter" in result.output

    def test_check_failure(self, bad_file, isolated_config):
        result = runner.invoke(app, ["check", str(bad_file)])
        assert result.exit_code == 1
        assert "QC0127" in result.output
        assert "FAILED: 1 error(s)" in result.output

    def test_check_nonexistent_file(self, isolated_config):
        result = runner.invoke(app, ["check", "/nonexistent/path.py"])
        assert result.exit_code != 0

    def test_check_with_namespace(self, tmp_path, isolated_config):
        path = tmp_path / "geometry.py"
        path.write_text("def root(x: float) -> float:\n    return math.sqrt(x)\n")

        result = runner.invoke(app, ["check", str(path), "--namespace", "math"])
        assert result.exit_code == 0

    def test_check_unknown_reference(self, greeter_file, isolated_config):
        result = runner.invoke(app, ["check", str(greeter_file), "-r", "qc_no_such_module"])
        assert result.exit_code == 1
        assert "QC0006" in result.output


class TestRunCommand:
    """Tests for the run command."""

    def test_run_greet(self, greeter_file, isolated_config):
        result = runner.invoke(
            app, ["run", str(greeter_file), "Greeter", "greet", "World", "--returns", "str"]
        )
        assert result.exit_code == 0
        assert result.output.strip() == "Hello, World"

    def test_run_square(self, calculator_file, isolated_config):
        result = runner.invoke(
            app, ["run", str(calculator_file), "Calculator", "square", "7", "--returns", "int"]
        )
        assert result.exit_code == 0
        assert json.loads(result.output) == 49

    def test_run_action_prints_nothing(self, calculator_file, isolated_config):
        result = runner.invoke(app, ["run", str(calculator_file), "Calculator", "reset"])
        assert result.exit_code == 0
        assert result.output == ""

    def test_run_missing_type(self, greeter_file, isolated_config):
        result = runner.invoke(app, ["run", str(greeter_file), "Nonexistent.Type", "greet"])
        assert result.exit_code == 1
        assert "ERROR" in result.output

    def test_run_wrong_signature(self, calculator_file, isolated_config):
        result = runner.invoke(
            app, ["run", str(calculator_file), "Calculator", "square", "seven", "--returns", "int"]
        )
        assert result.exit_code == 1
        assert "No method 'square'" in result.output

    def test_run_unknown_return_type(self, greeter_file, isolated_config):
        result = runner.invoke(
            app, ["run", str(greeter_file), "Greeter", "greet", "World", "--returns", "tuple"]
        )
        assert result.exit_code == 1
        assert "Unknown return type" in result.output

    def test_run_compile_failure(self, bad_file, isolated_config):
        result = runner.invoke(app, ["run", str(bad_file), "Bad", "m"])
        assert result.exit_code == 1
        assert "QC0127" in result.output


class TestConfigCommand:
    """Tests for the config command."""

    def test_config_show(self, isolated_config):
        result = runner.invoke(app, ["config", "show"])
        assert result.exit_code == 0
        assert "Compiler" in result.output
        assert "Logging" in result.output
        assert "optimization = release" in result.output

    def test_config_set(self, isolated_config):
        result = runner.invoke(app, ["config", "set", "compiler.warnings_as_errors", "true"])
        assert result.exit_code == 0
        assert json.loads(isolated_config.read_text())["compiler"]["warnings_as_errors"] is True

    def test_config_set_applies_to_check(self, tmp_path, isolated_config):
        path = tmp_path / "dead.py"
        path.write_text("def f() -> int:\n    return 1\n    f()\n")

        assert runner.invoke(app, ["check", str(path)]).exit_code == 0
        runner.invoke(app, ["config", "set", "compiler.warnings_as_errors", "yes"])
        assert runner.invoke(app, ["check", str(path)]).exit_code == 1

    def test_config_set_invalid_key(self, isolated_config):
        result = runner.invoke(app, ["config", "set", "invalid.key", "value"])
        assert result.exit_code == 1
        assert "Unknown key" in result.output

    def test_config_set_invalid_bool_value(self, isolated_config):
        result = runner.invoke(app, ["config", "set", "compiler.check_overflow", "maybe"])
        assert result.exit_code == 1
        assert "Invalid boolean" in result.output

    def test_config_set_missing_args(self, isolated_config):
        result = runner.invoke(app, ["config", "set"])
        assert result.exit_code == 1

    def test_config_unknown_action(self, isolated_config):
        result = runner.invoke(app, ["config", "unknown_action"])
        assert result.exit_code == 1
        assert "Unknown action" in result.output


class TestVersionFlag:
    """Test the --version flag."""

    def test_version_output(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "quickcompile" in result.output
