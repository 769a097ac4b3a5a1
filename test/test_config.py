"""Tests for function configuration loading and JSON helpers."""

import json
from datetime import datetime

import pytest

from lambctl.config import FunctionConfigError, find_function_filename, load_function
from lambctl.jsonutil import decode_fields, marshal_json, save_file, unmarshal_json


def test_find_function_filename(tmp_path):
    assert find_function_filename(tmp_path) == "function.json"
    (tmp_path / "function.jsonnet").write_text("{}")
    assert find_function_filename(tmp_path) == "function.jsonnet"
    (tmp_path / "function.json").write_text("{}")
    assert find_function_filename(tmp_path) == "function.json"


def test_load_function(tmp_path):
    path = tmp_path / "function.json"
    path.write_text(json.dumps({
        "FunctionName": "hello",
        "Handler": "index.handler",
        "Runtime": "python3.12",
        "MemorySize": 128,
        "Environment": {"Variables": {"STAGE": "prod"}},
    }))
    warnings = []
    fn = load_function(path, warn=warnings.append)
    assert fn.FunctionName == "hello"
    assert fn.MemorySize == 128
    assert fn.Environment.Variables == {"STAGE": "prod"}
    assert warnings == []


def test_load_function_unknown_fields_are_lenient(tmp_path):
    path = tmp_path / "function.json"
    path.write_text(json.dumps({"FunctionName": "hello", "SnapStart": {"ApplyOn": "None"}}))
    warnings = []
    fn = load_function(path, warn=warnings.append)
    assert fn.FunctionName == "hello"
    assert len(warnings) == 1
    assert "SnapStart" in warnings[0]
    assert str(path) in warnings[0]


@pytest.mark.parametrize("content", ["{broken", "[]", json.dumps({"Handler": "x"}), json.dumps({"FunctionName": "f", "MemorySize": "lots"})])
def test_load_function_errors(tmp_path, content):
    path = tmp_path / "function.json"
    path.write_text(content)
    with pytest.raises(FunctionConfigError):
        load_function(path)


def test_load_function_missing_file(tmp_path):
    with pytest.raises(FunctionConfigError):
        load_function(tmp_path / "nope.json")


def test_decode_fields_default_sink_logs(caplog):
    with caplog.at_level("WARNING"):
        out = decode_fields({"a": 1, "b": 2}, ["a"], "test.json")
    assert out == {"a": 1}
    assert "unknown field(s) b in test.json" in caplog.text


def test_unmarshal_json_strict_passthrough():
    assert unmarshal_json('{"a": 1}', ["a"], "x", warn=pytest.fail) == {"a": 1}


def test_marshal_json():
    out = marshal_json({"a": [1], "t": datetime(2024, 1, 2)})
    assert out.endswith("}\n")
    assert '\n  "a": [\n    1\n  ]' in out
    assert "2024-01-02 00:00:00" in out


def test_save_file_new(tmp_path):
    path = tmp_path / "out.json"
    assert save_file(path, "{}\n", confirm=pytest.fail)
    assert path.read_text() == "{}\n"


def test_save_file_overwrite_declined(tmp_path):
    path = tmp_path / "out.json"
    path.write_text("old")
    prompts = []

    def confirm(msg, default):
        prompts.append((msg, default))
        return False

    assert not save_file(path, "new", confirm=confirm)
    assert path.read_text() == "old"
    assert prompts == [(f"Overwrite existing file {path}?", False)]


def test_save_file_overwrite_accepted(tmp_path):
    path = tmp_path / "out.json"
    path.write_text("old")
    assert save_file(path, "new", confirm=lambda msg, default: True)
    assert path.read_text() == "new"
