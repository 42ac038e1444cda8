"""
Tests for the command line interface.
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from native_spec_to_code.native_spec_to_code import cli

SPECS_DIR = Path(__file__).parent / "test_data" / "specs"


@pytest.fixture
def runner():
    return CliRunner()


def test_compile_prints_schemas(runner):
    result = runner.invoke(cli, ["compile", str(SPECS_DIR / "calculator.ts")])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    [schema] = data["schemas"]
    assert schema["module_name"] == "Calculator"
    assert [m["name"] for m in schema["methods"]] == ["add", "reset", "subtract"]
    assert len(data["hash"]) == 64


def test_compile_to_file(runner, tmp_path):
    output = tmp_path / "schemas.json"
    result = runner.invoke(cli, ["compile", "-o", str(output), str(SPECS_DIR / "calculator.ts")])
    assert result.exit_code == 0, result.output
    assert json.loads(output.read_text())["schemas"][0]["module_name"] == "Calculator"


def test_compile_reports_diagnostics(runner):
    path = SPECS_DIR / "invalid.ts"
    result = runner.invoke(cli, ["compile", str(path)])
    assert result.exit_code == 1
    assert "invalid.ts:10:" in result.output
    assert "error: Reserved method name `emit` is not allowed" in result.output
    assert "Found 3 error(s)" in result.output


def test_show(runner):
    result = runner.invoke(cli, ["show", str(SPECS_DIR / "calculator.ts")])
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0].startswith("Calculator (")
    assert "│   ├── fn add(&self, a: Number, b: Number) -> Number" in lines
    assert "    └── onReset" in lines


def test_generate(runner, tmp_path):
    spec = str(SPECS_DIR / "calculator.ts")
    result = runner.invoke(cli, ["generate", spec, str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert (tmp_path / "rust" / "calculator_ffi.rs").is_file()
    assert (tmp_path / "rust" / "calculator_impl.rs").is_file()
    assert (tmp_path / "cxx" / "CalculatorBridging.hpp").is_file()
    assert result.output.count("wrote: ") == 4

    result = runner.invoke(cli, ["generate", spec, str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert result.output.count("unchanged: ") == 4


def test_generate_single_target(runner, tmp_path):
    result = runner.invoke(cli, ["generate", "-t", "cxx", str(SPECS_DIR / "calculator.ts"), str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert not (tmp_path / "rust").exists()
    assert (tmp_path / "cxx" / "CalculatorBridging.hpp").is_file()


def test_config_file(runner, tmp_path):
    config = tmp_path / "config.json"
    config.write_text(json.dumps({"cxx_namespace": "acme::bridge", "unknown": True}))
    result = runner.invoke(cli, ["-c", str(config), "generate", "-t", "cxx", str(SPECS_DIR / "users.ts"), str(tmp_path)])
    assert result.exit_code == 0, result.output
    assert "Bridging<acme::bridge::User>" in (tmp_path / "cxx" / "UsersBridging.hpp").read_text()
