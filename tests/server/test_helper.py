# tests/server/test_helper.py

import inspect
import typing

import pytest

from rbstraverse.mcp.helper import describe_parameters, parsed_data, safe_error, split_paths


def test_split_paths():
    assert split_paths("") is None
    assert split_paths(" , ") is None
    assert split_paths("sig, vendor/rbs ,") == ["sig", "vendor/rbs"]


def test_safe_error_reports_failures(capsys):
    @safe_error
    def explode(path):
        raise FileNotFoundError(f"Root directory not found: {path}")

    assert explode("/nowhere") == {
        "status": "failure",
        "error": "FileNotFoundError",
        "message": "Root directory not found: /nowhere",
    }
    assert "Traceback" in capsys.readouterr().err


def test_safe_error_passes_results_through():
    assert safe_error(lambda: {"status": "success"})() == {"status": "success"}


@pytest.mark.parametrize("tool_key", ["generate_signatures", "inspect_macros", "show_signature"])
def test_every_tool_is_described(tool_key):
    assert parsed_data[tool_key]["description"]


def test_describe_parameters():
    def tool(file_path: str, signature_paths: str = ""):
        return file_path, signature_paths

    describe_parameters(tool, parsed_data["show_signature"])
    hints = typing.get_type_hints(tool, include_extras=True)
    field = typing.get_args(hints["file_path"])[1]
    assert typing.get_args(hints["file_path"])[0] is str
    assert field.description == "Absolute path of the Ruby source file."
    assert inspect.signature(tool).parameters["signature_paths"].default == ""
