"""Tests for the modelprops command line interface."""

from __future__ import annotations

import json
import logging

import pytest
from typer.testing import CliRunner

from modelprops.cli.check_handler import parse_option, parse_options, run_check
from modelprops.cli.json_formatter import format_json_output
from modelprops.cli.typer_app import app
from modelprops.containers import container
from modelprops.shared.errors import ApplicationError, ErrorCode

runner = CliRunner()


@pytest.fixture(autouse=True)
def _fresh_container():
    container.reset_singletons()
    yield
    container.reset_singletons()
    logger = logging.getLogger("modelprops")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


def invoke_json(*args: str):
    result = runner.invoke(app, [*args, "--json"])
    return result, json.loads(result.stdout)


class TestParseOption:
    """Test cases for key=value options."""

    @pytest.mark.parametrize(
        ("option", "expected"),
        [
            ("max_length=10", ("max_length", 10)),
            ("regexp=/^a/i", ("regexp", "/^a/i")),
            ("l10n=true", ("l10n", True)),
            ('multiple_options={"max": 2}', ("multiple_options", {"max": 2})),
            (" key =", ("key", "")),
        ],
    )
    def test_values(self, option, expected):
        assert parse_option(option) == expected

    @pytest.mark.parametrize("option", ["max_length", "=10"])
    def test_invalid(self, option):
        with pytest.raises(ApplicationError) as exc_info:
            parse_option(option)

        assert exc_info.value.code == ErrorCode.CLI_INVALID_ARGUMENTS

    def test_parse_options(self):
        assert parse_options(None) == {}
        assert parse_options(["a=1", "b=x"]) == {"a": 1, "b": "x"}


class TestJsonOutput:
    """Test the JSON envelope."""

    def test_errors_force_failure(self):
        data = json.loads(format_json_output(True, "check", errors=[{"code": "x"}]))

        assert data["success"] is False
        assert data["command"] == "check"
        assert data["data"] is None

    def test_keys_sorted(self):
        output = format_json_output(True, "types", data={"types": []}).decode("utf-8")
        assert list(json.loads(output)) == ["command", "data", "errors", "success", "timestamp"]


class TestRunCheck:
    """Test the check handler without the CLI layer."""

    def test_rendered_fields(self, factory):
        data, issues = run_check(factory, "boolean", "yes", {})

        assert issues == []
        assert data["val"] is True
        assert data["ident"] == "value"
        assert data["valid"] is True

    def test_localized_rendering(self, factory):
        data, _ = run_check(factory, "lang", "fr", {}, lang="fr")
        assert data["display_val"] == "Français"

    def test_operation_logged(self, factory, mocker):
        start = mocker.patch("modelprops.cli.check_handler.log_operation_start")
        success = mocker.patch("modelprops.cli.check_handler.log_operation_success")

        run_check(factory, "string", "x", {})

        start.assert_called_once()
        assert success.call_args.args[2] == {"issues": 0}


class TestCli:
    """Test the commands through the Typer runner."""

    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "modelprops 0.1.0" in result.stdout

    def test_types(self):
        result = runner.invoke(app, ["types"])

        assert result.exit_code == 0
        assert "model-structure" in result.stdout

    def test_types_json(self):
        result, data = invoke_json("types")

        assert result.exit_code == 0
        assert data["success"] is True
        assert "color" in data["data"]["types"]

    def test_check_valid(self):
        result, data = invoke_json("check", "--type", "color", "--value", "red")

        assert result.exit_code == 0
        assert data["data"]["val"] == "#FF0000"
        assert data["data"]["sql_type"] == "CHAR(7)"
        assert data["errors"] == []

    def test_check_table_output(self):
        result = runner.invoke(app, ["check", "-t", "string", "-v", "hello"])

        assert result.exit_code == 0
        assert "hello" in result.stdout

    def test_validation_failure(self):
        """Failed checks are reported with exit code 1."""
        result, data = invoke_json("check", "-t", "string", "-v", "abcd", "-o", "max_length=3")

        assert result.exit_code == 1
        assert data["success"] is False
        assert data["data"]["valid"] is False
        assert [issue["code"] for issue in data["errors"]] == ["max_length"]

    def test_rejected_value(self):
        result, data = invoke_json("check", "-t", "color", "-v", "hsl(0, 100%, 50%)")

        assert result.exit_code == 1
        assert data["data"] is None
        assert data["errors"][0]["code"] == "UNSUPPORTED_COLOR_FORMAT"

    def test_unknown_type(self):
        result, data = invoke_json("check", "-t", "nope", "-v", "x")

        assert result.exit_code == 1
        assert data["errors"][0]["code"] == "UNKNOWN_PROPERTY_TYPE"

    def test_bad_option_format(self):
        result, data = invoke_json("check", "-t", "string", "-v", "x", "-o", "max_length")

        assert result.exit_code == 1
        assert data["errors"][0]["code"] == "CLI_INVALID_ARGUMENTS"

    def test_config_file(self, temp_dir):
        """--config reloads the settings used by the factory."""
        path = temp_dir / "modelprops.toml"
        path.write_text('[properties]\nmultiple_separator = ";"\n', encoding="utf-8")

        result = runner.invoke(
            app,
            ["--config", str(path), "check", "-t", "string", "-v", "a;b", "-o", "multiple=true", "--json"],
        )

        assert result.exit_code == 0
        assert json.loads(result.stdout)["data"]["val"] == ["a", "b"]
